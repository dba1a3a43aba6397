"""Platform detection.

Release artifacts are keyed by the same names Node's ``os.platform()`` uses
(``linux``, ``darwin``, ``win32``), so the host is reported in those terms.
"""

from __future__ import annotations

import sys as _sys
from enum import StrEnum
from functools import lru_cache

__all__ = [
    "Arch",
    "Platform",
    "detect_platform",
]


class Platform(StrEnum):
    """Operating system a binary is built for."""

    LINUX = "linux"
    DARWIN = "darwin"
    WIN32 = "win32"

    @property
    def label(self) -> str:
        return {
            Platform.LINUX: "Linux",
            Platform.DARWIN: "Mac",
            Platform.WIN32: "Windows",
        }[self]


class Arch(StrEnum):
    """CPU architecture of a published binary."""

    X64 = "x64"


@lru_cache(maxsize=1)
def detect_platform() -> Platform | None:
    """Detect the host operating system (cached); None when unrecognised."""
    # NOTE: avoid platform.system() on Windows, it may query WMI.
    system = _sys.platform.lower()
    if system.startswith("linux"):
        return Platform.LINUX
    if system.startswith("darwin"):
        return Platform.DARWIN
    if system.startswith(("win32", "cygwin", "msys")):
        return Platform.WIN32
    return None
