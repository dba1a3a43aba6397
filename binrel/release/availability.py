"""Post-release availability check.

After a release, every platform/arch target must be downloadable from the
public endpoint. Targets are probed one at a time, in matrix order, so the
progress lines read top to bottom while the check runs. A missing target is
data in the report, never an exception.
"""

from __future__ import annotations

from dataclasses import dataclass

from binrel.core.config import ReleaseConfig
from binrel.core.result import Err, Ok, Result
from binrel.net.http import HttpProbe
from binrel.output.console import ConsoleProtocol, Style
from binrel.platform.detection import Arch, Platform
from binrel.release.errors import AvailabilityGap, ReleaseError

__all__ = [
    "TARGETS",
    "AvailabilityReport",
    "AvailabilityResult",
    "PlatformTarget",
    "availability_gap",
    "check_downloads",
    "download_url",
    "verify_availability",
]


@dataclass(frozen=True, slots=True)
class PlatformTarget:
    platform: str
    arch: str

    def __str__(self) -> str:
        return f"{self.platform}-{self.arch}"


TARGETS: tuple[PlatformTarget, ...] = (
    PlatformTarget(Platform.LINUX.value, Arch.X64.value),
    PlatformTarget(Platform.DARWIN.value, Arch.X64.value),
    PlatformTarget(Platform.WIN32.value, Arch.X64.value),
)


@dataclass(frozen=True, slots=True)
class AvailabilityResult:
    target: PlatformTarget
    url: str
    exists: bool


@dataclass(frozen=True, slots=True)
class AvailabilityReport:
    """Probe results in matrix order."""

    version: str
    results: tuple[AvailabilityResult, ...]

    @property
    def all_satisfied(self) -> bool:
        return all(r.exists for r in self.results)

    @property
    def missing(self) -> tuple[AvailabilityResult, ...]:
        return tuple(r for r in self.results if not r.exists)


def download_url(config: ReleaseConfig, version: str, target: PlatformTarget) -> str:
    return (
        f"{config.download.base_url}/{version}?platform={target.platform}&arch={target.arch}"
    )


def _check_target(
    *,
    version: str,
    target: PlatformTarget,
    http: HttpProbe,
    console: ConsoleProtocol,
    config: ReleaseConfig,
) -> AvailabilityResult:
    url = download_url(config, version, target)
    console.write(f"Checking for {target} at {url} ... ")
    # 404, 5xx, timeouts and DNS failures all count as "not there"
    exists = isinstance(http.head(url), Ok)
    console.print("✅" if exists else "❌", Style.SUCCESS if exists else Style.ERROR)
    return AvailabilityResult(target=target, url=url, exists=exists)


def _print_gaps(
    report: AvailabilityReport, console: ConsoleProtocol, config: ReleaseConfig
) -> None:
    version = report.version
    console.newline()
    console.print(
        f"Could not ensure v{version} of the {config.product.name} binary is available "
        "for the following systems:",
        Style.ERROR,
    )
    for result in report.missing:
        console.newline()
        console.print(f"  Platform: {result.target.platform}")
        console.print(f"  Arch: {result.target.arch}")
        console.print(f"  URL: {result.url}")

    purge = config.download.purge_command.format(version=version)
    ensure = config.download.ensure_command.format(version=version)
    console.newline()
    console.write("Purge the cloudflare cache with ")
    console.write(purge, Style.HIGHLIGHT)
    console.write(" and check again with ")
    console.print(ensure, Style.HIGHLIGHT)
    console.newline()


def check_downloads(
    version: str,
    *,
    http: HttpProbe,
    console: ConsoleProtocol,
    config: ReleaseConfig,
) -> AvailabilityReport:
    """Probe every target for ``version`` and print the outcome.

    Always probes all of ``TARGETS``, in order, whatever the earlier probes
    returned. Remediation hints are printed only when something is missing.
    """
    results = tuple(
        _check_target(version=version, target=t, http=http, console=console, config=config)
        for t in TARGETS
    )
    report = AvailabilityReport(version=version, results=results)
    if not report.all_satisfied:
        _print_gaps(report, console, config)
    return report


def verify_availability(
    version: str,
    *,
    http: HttpProbe,
    console: ConsoleProtocol,
    config: ReleaseConfig,
) -> Result[AvailabilityReport, ReleaseError]:
    """``check_downloads`` with any missing target reported as ``AvailabilityGap``."""
    report = check_downloads(version, http=http, console=console, config=config)
    if report.all_satisfied:
        return Ok(report)
    return Err(availability_gap(report, config))


def availability_gap(report: AvailabilityReport, config: ReleaseConfig) -> AvailabilityGap:
    return AvailabilityGap(
        version=report.version,
        missing=tuple(str(r.target) for r in report.missing),
        hint=config.download.ensure_command.format(version=report.version),
    )
