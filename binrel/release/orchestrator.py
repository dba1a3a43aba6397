"""Release flows: deploy, release, ensure, bump and the standalone stages.

``deploy`` drives the full pipeline as a small state machine. A failing
stage moves straight to ``FAILED`` (nothing after it runs, availability is
not checked); a completed release always ends with an availability check,
whose gaps are reported separately from release failures.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from binrel.core.result import Err, Ok, Result
from binrel.release.availability import (
    AvailabilityReport,
    availability_gap,
    check_downloads,
    verify_availability,
)
from binrel.release.context import ReleaseContext
from binrel.release.errors import (
    CollaboratorFailure,
    PreconditionViolation,
    ReleaseError,
    UnknownTask,
)
from binrel.release.options import ReleaseOptions, apply_positional, parse_options
from binrel.release.questions import ensure_version, which_bump_task, which_version
from binrel.release.resolver import ask_missing, ask_missing_options
from binrel.release.stages import build_stage, upload_stage, zip_stage

__all__ = [
    "DeployOutcome",
    "DeployState",
    "build",
    "bump",
    "commit_message",
    "deploy",
    "ensure",
    "purge_version",
    "release",
    "run_deploy",
    "run_external_task",
    "upload",
    "zip_build",
]

RELEASE_COMPLETE = "Release Complete"
RELEASE_FAILED = "Release Failed"


def commit_message(version: str) -> str:
    return f"release {version} [skip ci]"


def commit_version(version: str, ctx: ReleaseContext) -> Result[None, ReleaseError]:
    """Record the release in git; empty commits are allowed so every release is tagged."""
    committed = ctx.vcs.commit(commit_message(version), allow_empty=True)
    if isinstance(committed, Err):
        return Err(
            CollaboratorFailure(
                stage="commit",
                message=committed.error.message,
                returncode=committed.error.returncode,
            )
        )
    return Ok(None)


def _check(version: str, ctx: ReleaseContext) -> Result[AvailabilityReport, ReleaseError]:
    return verify_availability(version, http=ctx.http, console=ctx.console, config=ctx.config)


# -----------------------------------------------------------------------------
# Deploy state machine
# -----------------------------------------------------------------------------


class DeployState(StrEnum):
    RESOLVING_OPTIONS = "resolving_options"
    BUILDING = "building"
    ZIPPING = "zipping"
    UPLOADING = "uploading"
    COMMITTING = "committing"
    VERIFYING_AVAILABILITY = "verifying_availability"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_TERMINAL = frozenset({DeployState.SUCCEEDED, DeployState.FAILED})


def _no_states() -> list[DeployState]:
    return []


@dataclass(slots=True)
class _DeployRun:
    options: ReleaseOptions
    ctx: ReleaseContext
    state: DeployState = DeployState.RESOLVING_OPTIONS
    visited: list[DeployState] = field(default_factory=_no_states)
    report: AvailabilityReport | None = None
    error: ReleaseError | None = None


@dataclass(frozen=True, slots=True)
class DeployOutcome:
    """Where a deploy ended and what it saw on the way."""

    options: ReleaseOptions
    visited: tuple[DeployState, ...]
    report: AvailabilityReport | None
    error: ReleaseError | None

    @property
    def released(self) -> bool:
        return self.visited[-1] == DeployState.SUCCEEDED

    @property
    def available(self) -> bool:
        return self.report is not None and self.report.all_satisfied


StepHandler = Callable[[_DeployRun], Result[DeployState, ReleaseError]]


def _resolve_step(run: _DeployRun) -> Result[DeployState, ReleaseError]:
    resolved = ask_missing_options(
        run.options, ["version", "platform"], run.ctx.prompter, run.ctx.config
    )
    return resolved.map(lambda _: DeployState.BUILDING)


def _build_step(run: _DeployRun) -> Result[DeployState, ReleaseError]:
    return build_stage(run.options, run.ctx).map(lambda _: DeployState.ZIPPING)


def _zip_step(run: _DeployRun) -> Result[DeployState, ReleaseError]:
    return zip_stage(run.options, run.ctx).map(lambda _: DeployState.UPLOADING)


def _upload_step(run: _DeployRun) -> Result[DeployState, ReleaseError]:
    after = DeployState.COMMITTING if run.options.commit else DeployState.VERIFYING_AVAILABILITY
    return upload_stage(run.options, run.ctx).map(lambda _: after)


def _commit_step(run: _DeployRun) -> Result[DeployState, ReleaseError]:
    committed = commit_version(run.options.version or "", run.ctx)
    return committed.map(lambda _: DeployState.VERIFYING_AVAILABILITY)


def _verify_step(run: _DeployRun) -> Result[DeployState, ReleaseError]:
    ctx = run.ctx
    ctx.console.banner(RELEASE_COMPLETE, ok=True)
    report = check_downloads(
        run.options.version or "", http=ctx.http, console=ctx.console, config=ctx.config
    )
    run.report = report
    if not report.all_satisfied:
        # the release itself stands; deploy() reports the gap
        run.error = availability_gap(report, ctx.config)
    return Ok(DeployState.SUCCEEDED)


_DEPLOY_STEPS: Mapping[DeployState, StepHandler] = {
    DeployState.RESOLVING_OPTIONS: _resolve_step,
    DeployState.BUILDING: _build_step,
    DeployState.ZIPPING: _zip_step,
    DeployState.UPLOADING: _upload_step,
    DeployState.COMMITTING: _commit_step,
    DeployState.VERIFYING_AVAILABILITY: _verify_step,
}


def run_deploy(options: ReleaseOptions, ctx: ReleaseContext) -> DeployOutcome:
    """Run build -> zip -> upload -> (commit) -> verify on ``options``."""
    run = _DeployRun(options=options, ctx=ctx)

    while run.state not in _TERMINAL:
        run.visited.append(run.state)
        step = _DEPLOY_STEPS[run.state](run)
        match step:
            case Ok(next_state):
                run.state = next_state
            case Err(error):
                ctx.console.banner(RELEASE_FAILED, ok=False)
                run.error = error
                run.state = DeployState.FAILED
    run.visited.append(run.state)

    return DeployOutcome(
        options=run.options,
        visited=tuple(run.visited),
        report=run.report,
        error=run.error,
    )


def deploy(argv: list[str], ctx: ReleaseContext) -> Result[object, ReleaseError]:
    outcome = run_deploy(parse_options(argv, host=ctx.host), ctx)
    if outcome.error is not None:
        return Err(outcome.error)
    return Ok(outcome)


# -----------------------------------------------------------------------------
# Other flows
# -----------------------------------------------------------------------------


def release(argv: list[str], ctx: ReleaseContext) -> Result[object, ReleaseError]:
    """Publish the manifest for a version, optionally commit, then verify downloads."""
    options = parse_options(argv, host=ctx.host)
    resolved = ask_missing_options(options, ["version"], ctx.prompter, ctx.config)
    if isinstance(resolved, Err):
        return resolved
    version = options.version or ""

    published = _publish(version, commit=bool(options.commit), ctx=ctx)
    if isinstance(published, Err):
        ctx.console.banner(RELEASE_FAILED, ok=False)
        return published
    ctx.console.banner(RELEASE_COMPLETE, ok=True)

    return _check(version, ctx)


def _publish(version: str, *, commit: bool, ctx: ReleaseContext) -> Result[None, ReleaseError]:
    uploaded = ctx.storage.upload_manifest(version)
    if isinstance(uploaded, Err):
        return Err(
            CollaboratorFailure(
                stage="manifest",
                message=f"manifest upload failed for v{version}",
                returncode=uploaded.error.returncode,
                hint=uploaded.error.stderr.strip() or None,
            )
        )
    if commit:
        return commit_version(version, ctx)
    return Ok(None)


def ensure(argv: list[str], ctx: ReleaseContext) -> Result[object, ReleaseError]:
    """Check that a version is downloadable for every target."""
    options = parse_options(argv, host=ctx.host)
    resolved = ask_missing(options, [("version", ensure_version)], ctx.prompter, ctx.config)
    if isinstance(resolved, Err):
        return resolved
    return _check(options.version or "", ctx)


def build(argv: list[str], ctx: ReleaseContext) -> Result[object, ReleaseError]:
    options = apply_positional(parse_options(argv, host=ctx.host), ("platform", "version"))
    return build_stage(options, ctx)


def zip_build(argv: list[str], ctx: ReleaseContext) -> Result[object, ReleaseError]:
    return zip_stage(parse_options(argv, host=ctx.host), ctx)


def upload(argv: list[str], ctx: ReleaseContext) -> Result[object, ReleaseError]:
    return upload_stage(parse_options(argv, host=ctx.host), ctx)


def run_external_task(
    name: str, args: list[str], ctx: ReleaseContext
) -> Result[None, ReleaseError]:
    """Run a task that lives entirely outside the pipeline (npm upload, test projects...)."""
    if not ctx.tasks.has_task(name):
        return Err(UnknownTask(task=name, hint=f"configure it under [tasks] as {name} = [...]"))
    ran = ctx.tasks.run_task(name, args)
    if isinstance(ran, Err):
        return Err(
            CollaboratorFailure(
                stage="task",
                message=f"{name} failed",
                returncode=ran.error.returncode,
                hint=ran.error.stderr.strip() or None,
            )
        )
    return Ok(None)


def bump(argv: list[str], ctx: ReleaseContext) -> Result[object, ReleaseError]:
    """Either run the test projects or bump them to a new version."""
    task = ctx.prompter.ask(which_bump_task())
    if isinstance(task, Err):
        return task

    match task.value:
        case "run":
            return run_external_task("run-test-projects", [], ctx)
        case "version":
            version = ctx.prompter.ask(which_version(ctx.config))
            if isinstance(version, Err):
                return version
            return run_external_task("bump-version", [str(version.value)], ctx)
        case other:
            return Err(UnknownTask(task=str(other)))


def purge_version(argv: list[str], ctx: ReleaseContext) -> Result[object, ReleaseError]:
    """Purge every platform of one desktop version from the CDN cache."""
    options = parse_options(argv, host=ctx.host)
    if options.is_missing("version"):
        return Err(
            PreconditionViolation(
                field="version",
                message="missing app version to purge",
                hint="pass --version <x.y.z>",
            )
        )
    version = options.version or ""
    purged = ctx.storage.purge_version(version)
    if isinstance(purged, Err):
        return Err(
            CollaboratorFailure(
                stage="purge",
                message=f"purge failed for v{version}",
                returncode=purged.error.returncode,
                hint=purged.error.stderr.strip() or None,
            )
        )
    ctx.console.success(f"purged v{version}")
    return Ok(None)
