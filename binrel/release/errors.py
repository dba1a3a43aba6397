"""Error types for the release pipeline.

Every stage returns one of these inside ``Err``. They are plain data so the
CLI can render them and pick an exit code without knowing which stage ran.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

StageName = Literal["build", "zip", "upload", "manifest", "commit", "purge", "task", "prompt"]


@dataclass(frozen=True, slots=True)
class PreconditionViolation:
    """A required option is empty/unset or a required input is missing."""

    field: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class CollaboratorFailure:
    """An external step (build, archiver, storage, git, prompt) reported failure."""

    stage: StageName
    message: str
    returncode: int | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class AvailabilityGap:
    """The release completed but some targets are not downloadable."""

    version: str
    missing: tuple[str, ...]
    hint: str | None = None

    @property
    def message(self) -> str:
        return f"v{self.version} is not available for: {', '.join(self.missing)}"


@dataclass(frozen=True, slots=True)
class UnknownTask:
    """A task name with no handler (bump answer, unconfigured external task)."""

    task: str
    hint: str | None = None

    @property
    def message(self) -> str:
        return f"unknown task: {self.task}"


@dataclass(frozen=True, slots=True)
class InvalidInput:
    """An argument or answer that cannot be used as given."""

    message: str
    hint: str | None = None


ReleaseError = (
    PreconditionViolation | CollaboratorFailure | AvailabilityGap | UnknownTask | InvalidInput
)
