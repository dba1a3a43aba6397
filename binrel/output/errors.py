"""Error presentation utilities.

Centralized release error formatting and exit code mapping.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from binrel.core.errors import ErrorCode
from binrel.output.console import Style
from binrel.release.errors import (
    AvailabilityGap,
    CollaboratorFailure,
    InvalidInput,
    PreconditionViolation,
    ReleaseError,
    UnknownTask,
)

if TYPE_CHECKING:
    from binrel.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]

_NETWORK_STAGES = frozenset({"upload", "manifest", "purge"})


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print a release error with its hint."""
    match error:
        case CollaboratorFailure(stage=stage, message=message, returncode=rc):
            suffix = f" (exit {rc})" if rc is not None else ""
            console.error(f"{stage}: {message}{suffix}")
        case PreconditionViolation(field=field, message=message):
            console.error(f"{message} [{field}]")
        case AvailabilityGap() | UnknownTask() | InvalidInput():
            console.error(error.message)

    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    """Get the process exit code for a release error."""
    match error:
        case PreconditionViolation() | UnknownTask() | InvalidInput() | AvailabilityGap():
            return int(ErrorCode.USER_ERROR)
        case CollaboratorFailure(stage="prompt"):
            return int(ErrorCode.ENV_ERROR)
        case CollaboratorFailure(stage=stage) if stage in _NETWORK_STAGES:
            return int(ErrorCode.NETWORK_ERROR)
        case CollaboratorFailure():
            return int(ErrorCode.BUILD_ERROR)
