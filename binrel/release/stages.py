"""Build, zip and upload stages.

Each stage resolves the options it needs (asking for missing ones), performs
one unit of work through a collaborator and returns the same options record,
possibly with derived fields filled in. The first ``Err`` ends the pipeline.
"""

from __future__ import annotations

import logging
from pathlib import Path

from binrel.core.result import Err, Ok, Result
from binrel.platform.cwd import preserved_cwd
from binrel.platform.detection import Platform
from binrel.release import layout
from binrel.release.context import ReleaseContext
from binrel.release.errors import CollaboratorFailure, PreconditionViolation, ReleaseError
from binrel.release.options import ReleaseOptions
from binrel.release.resolver import ask_missing_options

__all__ = ["build_stage", "upload_stage", "zip_stage"]

log = logging.getLogger(__name__)

StageResult = Result[ReleaseOptions, ReleaseError]


def _require_platform(options: ReleaseOptions) -> Result[Platform, ReleaseError]:
    platform = options.known_platform
    if platform is None:
        return Err(
            PreconditionViolation(
                field="platform",
                message=f"unknown platform: {options.platform}",
                hint="use one of linux, darwin (mac), win32 (win, windows)",
            )
        )
    return Ok(platform)


def build_stage(options: ReleaseOptions, ctx: ReleaseContext) -> StageResult:
    """Build the binary for ``options.platform`` at ``options.version``."""
    ctx.console.header("#build")
    resolved = ask_missing_options(options, ["version", "platform"], ctx.prompter, ctx.config)
    if isinstance(resolved, Err):
        return resolved
    checked = _require_platform(options)
    if isinstance(checked, Err):
        return checked
    platform = checked.value

    version = options.version or ""
    log.debug("building binary: platform %s version %s", platform.value, version)

    # the build tool may chdir; later stages resolve paths from the original cwd
    with preserved_cwd():
        result = ctx.builder.build(platform.value, version, options)

    if isinstance(result, Err):
        error = result.error
        return Err(
            CollaboratorFailure(
                stage="build",
                message=f"build failed for {platform.value} v{version}",
                returncode=error.returncode,
                hint=error.stderr.strip() or None,
            )
        )
    return Ok(options)


def zip_stage(options: ReleaseOptions, ctx: ReleaseContext) -> StageResult:
    """Zip the platform build directory and record the zip path in ``options.zip``."""
    ctx.console.header("#zip")
    resolved = ask_missing_options(options, ["platform"], ctx.prompter, ctx.config)
    if isinstance(resolved, Err):
        return resolved
    checked = _require_platform(options)
    if isinstance(checked, Err):
        return checked
    platform = checked.value

    source = layout.zip_dir(ctx.config, platform)
    ctx.console.print(f"directory to zip {source}")
    if not source.is_dir():
        return Err(
            PreconditionViolation(
                field="platform",
                message=f"build output not found: {source}",
                hint=f"build first: binrel build {platform.value} <version>",
            )
        )

    dest = layout.zip_path(ctx.config, platform)
    zipped = ctx.archiver.zip(source, dest)
    if isinstance(zipped, Err):
        return Err(CollaboratorFailure(stage="zip", message=zipped.error))

    options.zip = str(zipped.value.resolve())
    return Ok(options)


def upload_stage(options: ReleaseOptions, ctx: ReleaseContext) -> StageResult:
    """Upload the zip for ``options.platform`` / ``options.version`` to storage."""
    ctx.console.header("#upload")
    resolved = ask_missing_options(
        options, ["version", "platform", "zip"], ctx.prompter, ctx.config
    )
    if isinstance(resolved, Err):
        return resolved

    if options.is_missing("zip"):
        return Err(
            PreconditionViolation(
                field="zip",
                message="missing zipped filename",
                hint="pass --zip <file> or run the zip stage first",
            )
        )
    checked = _require_platform(options)
    if isinstance(checked, Err):
        return checked
    platform = checked.value

    zip_file = Path(options.zip or "").expanduser().resolve()
    options.zip = str(zip_file)
    version = options.version or ""

    ctx.console.print(f"Need to upload file {zip_file}")
    ctx.console.print(f"for platform {platform.value} version {version}")

    uploaded = ctx.storage.upload_binary(
        zip_file=zip_file, version=version, platform=platform.value
    )
    if isinstance(uploaded, Err):
        return Err(
            CollaboratorFailure(
                stage="upload",
                message=f"upload of {zip_file.name} failed",
                returncode=uploaded.error.returncode,
                hint=uploaded.error.stderr.strip() or None,
            )
        )
    return Ok(options)
