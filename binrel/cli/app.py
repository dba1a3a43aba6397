from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import typer

from binrel import __version__
from binrel.cli.context import build_context
from binrel.core.result import Err
from binrel.output.errors import print_release_error, release_error_exit_code
from binrel.release.dispatch import Command, dispatch

DEBUG_ENV_VAR = "BINREL_DEBUG"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    invoke_without_command=True,
    rich_markup_mode="rich",
)

# release commands take loosely spelled flags (--zipFile, --skip-clean...) and
# parse them themselves
_PASSTHROUGH = {"allow_extra_args": True, "ignore_unknown_options": True}

_HELP: dict[Command, str] = {
    Command.BUMP: "Run the test projects or bump them to a new version.",
    Command.RELEASE: "Upload the release manifest, optionally --commit, then check downloads.",
    Command.ENSURE: "Check that --version is downloadable for every platform.",
    Command.BUILD: "Build the binary; platform and version may be given positionally.",
    Command.ZIP: "Zip the build output for --platform.",
    Command.UPLOAD: "Upload --zip for --platform and --version.",
    Command.UPLOAD_NPM_PACKAGE: "Upload the npm package (external task).",
    Command.UPLOAD_UNIQUE_BINARY: "Upload the binary under a unique hash (external task).",
    Command.MOVE_BINARIES: "Move uploaded binaries (external task).",
    Command.PURGE_VERSION: "Purge every platform of --version from the CDN cache.",
    Command.DEPLOY: "Build, zip, upload, optionally --commit, then check downloads.",
}


@dataclass(frozen=True, slots=True)
class _Globals:
    config: Path | None


def _configure_logging(debug: bool) -> None:
    if debug or os.environ.get(DEBUG_ENV_VAR):
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s %(message)s")


def run_command(command: Command, argv: list[str], *, config_path: Path | None) -> None:
    ctx = build_context(config_path)
    result = dispatch(command, argv, ctx)
    if isinstance(result, Err):
        print_release_error(result.error, ctx.console)
        raise typer.Exit(code=release_error_exit_code(result.error))


def _command(command: Command) -> Callable[[typer.Context], None]:
    def handler(ctx: typer.Context) -> None:
        globals_: _Globals | None = ctx.obj
        run_command(command, list(ctx.args), config_path=globals_.config if globals_ else None)

    handler.__doc__ = _HELP[command]
    handler.__name__ = command.value.replace("-", "_")
    return handler


for _cmd in Command:
    app.command(_cmd.value, context_settings=_PASSTHROUGH)(_command(_cmd))


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    config: Path | None = typer.Option(
        None, "--config", help="Path to binrel.toml (default: $BINREL_CONFIG or ./binrel.toml)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Log diagnostics to stderr."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)
    _configure_logging(debug)
    ctx.obj = _Globals(config=config)


def main() -> None:
    app()
