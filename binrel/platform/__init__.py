"""Host platform helpers."""

from .cwd import preserved_cwd
from .detection import Arch, Platform, detect_platform
from .process import ProcessError, run, run_silent

__all__ = [
    "Arch",
    "Platform",
    "ProcessError",
    "detect_platform",
    "preserved_cwd",
    "run",
    "run_silent",
]
