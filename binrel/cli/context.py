from __future__ import annotations

from pathlib import Path

import typer

from binrel.core.config import ReleaseConfig, load_config_or_default
from binrel.core.errors import ErrorCode
from binrel.core.result import Err
from binrel.git.repository import Repository
from binrel.net.http import RealHttpClient
from binrel.output.console import RichConsole
from binrel.platform.detection import detect_platform
from binrel.release.collaborators import (
    CommandBuilder,
    CommandStorage,
    CommandTaskRunner,
    ZipArchiver,
)
from binrel.release.context import ReleaseContext
from binrel.release.questions import TyperPrompter


def load_release_config(config_path: Path | None) -> ReleaseConfig:
    result = load_config_or_default(config_path)
    if isinstance(result, Err):
        typer.echo(f"error: {result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    return result.value


def build_context(config_path: Path | None = None) -> ReleaseContext:
    config = load_release_config(config_path)
    return ReleaseContext(
        config=config,
        console=RichConsole(),
        host=detect_platform(),
        prompter=TyperPrompter(),
        builder=CommandBuilder(config),
        archiver=ZipArchiver(),
        storage=CommandStorage(config),
        vcs=Repository(config.root),
        http=RealHttpClient(timeout=config.download.timeout),
        tasks=CommandTaskRunner(config),
    )
