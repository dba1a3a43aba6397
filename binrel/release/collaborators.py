"""External collaborators of the release pipeline.

The pipeline only talks to these protocols. The concrete classes here shell
out to the commands configured in ``binrel.toml`` (build tool, ``aws s3``,
purge script) and use ``zipfile`` for archiving; tests substitute recording
fakes.
"""

from __future__ import annotations

import json
import logging
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol
from zipfile import ZIP_DEFLATED, ZipFile

from binrel.core.config import ReleaseConfig
from binrel.core.result import Err, Ok, Result
from binrel.git.repository import GitError
from binrel.platform.detection import Arch
from binrel.platform.process import ProcessError, run_silent
from binrel.release.availability import TARGETS, download_url
from binrel.release.layout import zip_name
from binrel.release.options import ReleaseOptions

__all__ = [
    "Archiver",
    "Builder",
    "CommandBuilder",
    "CommandStorage",
    "CommandTaskRunner",
    "MockArchiver",
    "MockBuilder",
    "MockStorage",
    "MockTaskRunner",
    "MockVersionControl",
    "Storage",
    "TaskRunner",
    "VersionControl",
    "ZipArchiver",
    "build_manifest",
    "render_command",
]

log = logging.getLogger(__name__)


class Builder(Protocol):
    def build(
        self, platform: str, version: str, options: ReleaseOptions
    ) -> Result[None, ProcessError]: ...


class Archiver(Protocol):
    def zip(self, source_dir: Path, dest_path: Path) -> Result[Path, str]: ...


class Storage(Protocol):
    def upload_binary(
        self, *, zip_file: Path, version: str, platform: str
    ) -> Result[None, ProcessError]: ...

    def upload_manifest(self, version: str) -> Result[None, ProcessError]: ...

    def purge_version(self, version: str) -> Result[None, ProcessError]: ...


class VersionControl(Protocol):
    def commit(self, message: str, *, allow_empty: bool = False) -> Result[str, GitError]: ...


class TaskRunner(Protocol):
    def has_task(self, name: str) -> bool: ...

    def run_task(self, name: str, args: list[str]) -> Result[None, ProcessError]: ...


class _KeepUnknown(dict[str, str]):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def render_command(template: tuple[str, ...], values: Mapping[str, str]) -> list[str]:
    """Substitute ``{name}`` placeholders; unknown placeholders are left as written."""
    lookup = _KeepUnknown(values)
    return [arg.format_map(lookup) for arg in template]


# -----------------------------------------------------------------------------
# Build
# -----------------------------------------------------------------------------


class CommandBuilder:
    """Runs the configured build command for one platform."""

    def __init__(self, config: ReleaseConfig) -> None:
        self._config = config

    def build(
        self, platform: str, version: str, options: ReleaseOptions
    ) -> Result[None, ProcessError]:
        cmd = render_command(
            self._config.commands.build,
            {"platform": platform, "version": version, "arch": Arch.X64.value},
        )
        if options.skip_clean:
            cmd.append("--skip-clean")
        if not options.run_tests:
            cmd.append("--skip-tests")
        return run_silent(cmd, cwd=self._config.root)


# -----------------------------------------------------------------------------
# Archive
# -----------------------------------------------------------------------------


class ZipArchiver:
    """Zips a directory, keeping the directory itself as the top-level entry."""

    def zip(self, source_dir: Path, dest_path: Path) -> Result[Path, str]:
        if not source_dir.is_dir():
            return Err(f"not a directory: {source_dir}")

        files = sorted(p for p in source_dir.rglob("*") if p.is_file())
        try:
            dest_path.parent.mkdir(parents=True, exist_ok=True)
            # build outputs may carry mtime=0, which ZIP cannot store
            with ZipFile(dest_path, "w", compression=ZIP_DEFLATED, strict_timestamps=False) as zf:
                for src in files:
                    arc = f"{source_dir.name}/{src.relative_to(source_dir).as_posix()}"
                    zf.write(src, arcname=arc)
        except OSError as e:
            return Err(f"cannot write {dest_path}: {e}")

        log.debug("zipped %d files from %s into %s", len(files), source_dir, dest_path)
        return Ok(dest_path)


# -----------------------------------------------------------------------------
# Storage
# -----------------------------------------------------------------------------


def build_manifest(config: ReleaseConfig, version: str) -> dict[str, object]:
    """Release manifest listing the download URL of every target."""
    return {
        "name": config.product.name,
        "version": version,
        "packages": {
            str(target): {"url": download_url(config, version, target)} for target in TARGETS
        },
    }


class CommandStorage:
    """Object storage reached through configured CLI commands (e.g. ``aws s3 cp``)."""

    def __init__(self, config: ReleaseConfig) -> None:
        self._config = config

    def upload_binary(
        self, *, zip_file: Path, version: str, platform: str
    ) -> Result[None, ProcessError]:
        cmd = render_command(
            self._config.commands.upload_binary,
            {
                "zip_file": str(zip_file),
                "zip_name": zip_name(self._config, platform),
                "version": version,
                "platform": platform,
                "arch": Arch.X64.value,
            },
        )
        return run_silent(cmd, cwd=self._config.root)

    def upload_manifest(self, version: str) -> Result[None, ProcessError]:
        manifest = build_manifest(self._config, version)
        with tempfile.TemporaryDirectory(prefix="binrel-") as tmp:
            manifest_file = Path(tmp) / "manifest.json"
            manifest_file.write_text(
                json.dumps(manifest, indent=2, sort_keys=True) + "\n", encoding="utf-8"
            )
            cmd = render_command(
                self._config.commands.upload_manifest,
                {"manifest_file": str(manifest_file), "version": version},
            )
            return run_silent(cmd, cwd=self._config.root)

    def purge_version(self, version: str) -> Result[None, ProcessError]:
        cmd = render_command(self._config.commands.purge_version, {"version": version})
        return run_silent(cmd, cwd=self._config.root)


# -----------------------------------------------------------------------------
# Tasks
# -----------------------------------------------------------------------------


class CommandTaskRunner:
    """Runs the command configured under ``[tasks]`` with extra arguments appended."""

    def __init__(self, config: ReleaseConfig) -> None:
        self._config = config

    def has_task(self, name: str) -> bool:
        return name in self._config.tasks

    def run_task(self, name: str, args: list[str]) -> Result[None, ProcessError]:
        template = self._config.tasks.get(name)
        if template is None:
            return Err(ProcessError((name,), -1, "", f"task not configured: {name}"))
        cmd = render_command(template, {}) + list(args)
        return run_silent(cmd, cwd=self._config.root)


# -----------------------------------------------------------------------------
# Test doubles
# -----------------------------------------------------------------------------


def _failed(cmd: str, returncode: int = 1, stderr: str = "") -> Err[ProcessError]:
    return Err(ProcessError((cmd,), returncode, "", stderr))


class MockBuilder:
    """Records builds; set ``error`` to make the next builds fail."""

    def __init__(self, error: ProcessError | None = None) -> None:
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def build(
        self, platform: str, version: str, options: ReleaseOptions
    ) -> Result[None, ProcessError]:
        self.calls.append((platform, version))
        if self.error is not None:
            return Err(self.error)
        return Ok(None)


class MockArchiver:
    """Records zip requests without writing anything."""

    def __init__(self, error: str | None = None) -> None:
        self.error = error
        self.calls: list[tuple[Path, Path]] = []

    def zip(self, source_dir: Path, dest_path: Path) -> Result[Path, str]:
        self.calls.append((source_dir, dest_path))
        if self.error is not None:
            return Err(self.error)
        return Ok(dest_path)


class MockStorage:
    """Records uploads and purges.

    Usage:
        storage = MockStorage()
        storage.fail("upload_binary", returncode=2, stderr="AccessDenied")
    """

    def __init__(self) -> None:
        self.binaries: list[tuple[Path, str, str]] = []
        self.manifests: list[str] = []
        self.purged: list[str] = []
        self._failures: dict[str, ProcessError] = {}

    def fail(self, operation: str, *, returncode: int = 1, stderr: str = "") -> None:
        self._failures[operation] = ProcessError((operation,), returncode, "", stderr)

    def _outcome(self, operation: str) -> Result[None, ProcessError]:
        error = self._failures.get(operation)
        return Err(error) if error is not None else Ok(None)

    def upload_binary(
        self, *, zip_file: Path, version: str, platform: str
    ) -> Result[None, ProcessError]:
        self.binaries.append((zip_file, version, platform))
        return self._outcome("upload_binary")

    def upload_manifest(self, version: str) -> Result[None, ProcessError]:
        self.manifests.append(version)
        return self._outcome("upload_manifest")

    def purge_version(self, version: str) -> Result[None, ProcessError]:
        self.purged.append(version)
        return self._outcome("purge_version")


class MockVersionControl:
    def __init__(self, error: GitError | None = None) -> None:
        self.error = error
        self.commits: list[tuple[str, bool]] = []

    def commit(self, message: str, *, allow_empty: bool = False) -> Result[str, GitError]:
        self.commits.append((message, allow_empty))
        if self.error is not None:
            return Err(self.error)
        return Ok("")


class MockTaskRunner:
    """Known tasks succeed unless listed in ``failing``."""

    def __init__(self, tasks: tuple[str, ...] = (), failing: tuple[str, ...] = ()) -> None:
        self.tasks = set(tasks) | set(failing)
        self.failing = set(failing)
        self.calls: list[tuple[str, list[str]]] = []

    def has_task(self, name: str) -> bool:
        return name in self.tasks

    def run_task(self, name: str, args: list[str]) -> Result[None, ProcessError]:
        self.calls.append((name, list(args)))
        if name in self.failing:
            return _failed(name, stderr=f"{name} exploded")
        return Ok(None)
