"""Command name -> handler table.

Every CLI command is a ``Command`` member; ``dispatch`` looks up its handler
and runs it with the remaining arguments. Commands that only forward to an
external task (npm package upload, binary moves) share one handler shape.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import StrEnum
from functools import partial

from binrel.core.result import Result
from binrel.release import orchestrator
from binrel.release.context import ReleaseContext
from binrel.release.errors import ReleaseError

__all__ = ["HANDLERS", "Command", "Handler", "dispatch"]

Handler = Callable[[list[str], ReleaseContext], Result[object, ReleaseError]]


class Command(StrEnum):
    BUMP = "bump"
    RELEASE = "release"
    ENSURE = "ensure"
    BUILD = "build"
    ZIP = "zip"
    UPLOAD = "upload"
    UPLOAD_NPM_PACKAGE = "upload-npm-package"
    UPLOAD_UNIQUE_BINARY = "upload-unique-binary"
    MOVE_BINARIES = "move-binaries"
    PURGE_VERSION = "purge-version"
    DEPLOY = "deploy"


def _external(name: str, argv: list[str], ctx: ReleaseContext) -> Result[object, ReleaseError]:
    ctx.console.header(f"#{name}")
    return orchestrator.run_external_task(name, argv, ctx)


HANDLERS: Mapping[Command, Handler] = {
    Command.BUMP: orchestrator.bump,
    Command.RELEASE: orchestrator.release,
    Command.ENSURE: orchestrator.ensure,
    Command.BUILD: orchestrator.build,
    Command.ZIP: orchestrator.zip_build,
    Command.UPLOAD: orchestrator.upload,
    Command.UPLOAD_NPM_PACKAGE: partial(_external, Command.UPLOAD_NPM_PACKAGE.value),
    Command.UPLOAD_UNIQUE_BINARY: partial(_external, Command.UPLOAD_UNIQUE_BINARY.value),
    Command.MOVE_BINARIES: partial(_external, Command.MOVE_BINARIES.value),
    Command.PURGE_VERSION: orchestrator.purge_version,
    Command.DEPLOY: orchestrator.deploy,
}


def dispatch(
    command: Command, argv: list[str], ctx: ReleaseContext
) -> Result[object, ReleaseError]:
    return HANDLERS[command](argv, ctx)
