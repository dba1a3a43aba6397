from __future__ import annotations

from dataclasses import dataclass, replace

from binrel.core.config import ReleaseConfig
from binrel.net.http import HttpProbe, MockHttpClient
from binrel.output.console import ConsoleProtocol, MockConsole
from binrel.platform.detection import Platform
from binrel.release.collaborators import (
    Archiver,
    Builder,
    MockArchiver,
    MockBuilder,
    MockStorage,
    MockTaskRunner,
    MockVersionControl,
    Storage,
    TaskRunner,
    VersionControl,
)
from binrel.release.questions import MockPrompter, Prompter


@dataclass(frozen=True, slots=True)
class ReleaseContext:
    """Everything a release command needs, built once per invocation."""

    config: ReleaseConfig
    console: ConsoleProtocol
    host: Platform | None
    prompter: Prompter
    builder: Builder
    archiver: Archiver
    storage: Storage
    vcs: VersionControl
    http: HttpProbe
    tasks: TaskRunner


def mock_context(config: ReleaseConfig | None = None, **overrides: object) -> ReleaseContext:
    """A context wired with the in-memory collaborators; ``overrides`` replace fields."""
    ctx = ReleaseContext(
        config=config or ReleaseConfig(),
        console=MockConsole(),
        host=Platform.LINUX,
        prompter=MockPrompter(),
        builder=MockBuilder(),
        archiver=MockArchiver(),
        storage=MockStorage(),
        vcs=MockVersionControl(),
        http=MockHttpClient(),
        tasks=MockTaskRunner(),
    )
    return replace(ctx, **overrides)  # type: ignore[arg-type]
