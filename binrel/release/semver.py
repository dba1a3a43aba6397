from __future__ import annotations

import re
from dataclasses import dataclass


_SEMVER_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: str | None = None

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.prerelease}" if self.prerelease else base


def parse_version(text: str) -> SemVer | None:
    """Parse ``X.Y.Z`` with an optional ``-prerelease`` (a leading ``v`` is tolerated)."""
    m = _SEMVER_RE.match(text.strip())
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), m.group(4))


def is_valid_version(text: str) -> bool:
    return parse_version(text) is not None


def next_patch(current: str) -> str | None:
    """Suggested next release after ``current``; None if it is not a version."""
    parsed = parse_version(current)
    if parsed is None:
        return None
    # 5.0.0-beta.1 -> 5.0.0
    if parsed.prerelease:
        return str(SemVer(parsed.major, parsed.minor, parsed.patch))
    return str(SemVer(parsed.major, parsed.minor, parsed.patch + 1))
