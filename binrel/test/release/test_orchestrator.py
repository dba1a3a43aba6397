"""Tests for the deploy state machine and the other release flows."""

from __future__ import annotations

from pathlib import Path

from binrel.core.config import ProductConfig, ReleaseConfig
from binrel.core.errors import ErrorCode
from binrel.core.result import Err, Ok
from binrel.git.repository import GitError
from binrel.net.http import MockHttpClient
from binrel.output.console import MockConsole
from binrel.output.errors import release_error_exit_code
from binrel.platform.detection import Platform
from binrel.platform.process import ProcessError
from binrel.release import orchestrator
from binrel.release.availability import TARGETS, download_url
from binrel.release.collaborators import (
    MockArchiver,
    MockBuilder,
    MockStorage,
    MockTaskRunner,
    MockVersionControl,
)
from binrel.release.context import ReleaseContext, mock_context
from binrel.release.errors import (
    AvailabilityGap,
    CollaboratorFailure,
    PreconditionViolation,
    UnknownTask,
)
from binrel.release.options import parse_options
from binrel.release.orchestrator import DeployOutcome, DeployState, commit_message
from binrel.release.questions import MockPrompter


def _available(config: ReleaseConfig, version: str, *missing: str) -> MockHttpClient:
    http = MockHttpClient()
    for target in TARGETS:
        if str(target) not in missing:
            http.set_status(download_url(config, version, target), 200)
    return http


def _deploy_ctx(tmp_path: Path, **overrides: object) -> ReleaseContext:
    bundle = tmp_path / "build" / "linux" / "Cypress"
    bundle.mkdir(parents=True)
    config = ReleaseConfig(root=tmp_path)
    overrides.setdefault("http", _available(config, "5.0.0"))
    return mock_context(config, **overrides)


def _console(ctx: ReleaseContext) -> MockConsole:
    assert isinstance(ctx.console, MockConsole)
    return ctx.console


def test_commit_message() -> None:
    assert commit_message("5.0.0") == "release 5.0.0 [skip ci]"


class TestDeploy:
    def test_happy_path_with_commit(self, tmp_path: Path) -> None:
        builder, archiver = MockBuilder(), MockArchiver()
        storage, vcs = MockStorage(), MockVersionControl()
        ctx = _deploy_ctx(tmp_path, builder=builder, archiver=archiver, storage=storage, vcs=vcs)

        result = orchestrator.deploy(["--version", "5.0.0", "--platform", "linux", "--commit"], ctx)

        assert isinstance(result, Ok)
        outcome = result.value
        assert isinstance(outcome, DeployOutcome)
        assert outcome.visited == (
            DeployState.RESOLVING_OPTIONS,
            DeployState.BUILDING,
            DeployState.ZIPPING,
            DeployState.UPLOADING,
            DeployState.COMMITTING,
            DeployState.VERIFYING_AVAILABILITY,
            DeployState.SUCCEEDED,
        )
        assert outcome.released and outcome.available
        assert builder.calls == [("linux", "5.0.0")]
        assert len(archiver.calls) == 1
        assert storage.binaries == [((tmp_path / "cypress.zip").resolve(), "5.0.0", "linux")]
        assert vcs.commits == [("release 5.0.0 [skip ci]", True)]
        assert _console(ctx).banners() == [("Release Complete", True)]

    def test_no_commit_still_verifies(self, tmp_path: Path) -> None:
        vcs = MockVersionControl()
        http = _available(ReleaseConfig(root=tmp_path), "5.0.0")
        ctx = _deploy_ctx(tmp_path, vcs=vcs, http=http)

        result = orchestrator.deploy(
            ["--version", "5.0.0", "--platform", "linux", "--no-commit"], ctx
        )

        assert isinstance(result, Ok)
        assert vcs.commits == []
        assert DeployState.COMMITTING not in result.value.visited  # type: ignore[attr-defined]
        assert len(http.calls) == 3

    def test_build_failure_stops_pipeline(self, tmp_path: Path) -> None:
        builder = MockBuilder(error=ProcessError(("yarn",), 1, "", "boom"))
        archiver, storage, vcs = MockArchiver(), MockStorage(), MockVersionControl()
        http = MockHttpClient()
        ctx = _deploy_ctx(
            tmp_path, builder=builder, archiver=archiver, storage=storage, vcs=vcs, http=http
        )
        opts = parse_options(
            ["--version", "5.0.0", "--platform", "linux", "--commit"], host=Platform.LINUX
        )

        outcome = orchestrator.run_deploy(opts, ctx)

        assert outcome.visited == (
            DeployState.RESOLVING_OPTIONS,
            DeployState.BUILDING,
            DeployState.FAILED,
        )
        assert not outcome.released
        assert isinstance(outcome.error, CollaboratorFailure)
        assert release_error_exit_code(outcome.error) != 0
        assert archiver.calls == []
        assert storage.binaries == []
        assert vcs.commits == []
        assert http.calls == []
        assert _console(ctx).banners() == [("Release Failed", False)]

    def test_upload_failure_skips_commit(self, tmp_path: Path) -> None:
        storage = MockStorage()
        storage.fail("upload_binary", returncode=1)
        vcs = MockVersionControl()
        ctx = _deploy_ctx(tmp_path, storage=storage, vcs=vcs)

        result = orchestrator.deploy(["-v", "5.0.0", "-p", "linux", "--commit"], ctx)

        assert isinstance(result, Err)
        assert isinstance(result.error, CollaboratorFailure)
        assert result.error.stage == "upload"
        assert release_error_exit_code(result.error) == int(ErrorCode.NETWORK_ERROR)
        assert vcs.commits == []

    def test_commit_failure(self, tmp_path: Path) -> None:
        vcs = MockVersionControl(
            error=GitError(command="commit", message="not a repo", returncode=128)
        )
        ctx = _deploy_ctx(tmp_path, vcs=vcs)

        result = orchestrator.deploy(["-v", "5.0.0", "-p", "linux", "--commit"], ctx)

        assert result == Err(
            CollaboratorFailure(stage="commit", message="not a repo", returncode=128)
        )
        assert _console(ctx).banners() == [("Release Failed", False)]

    def test_availability_gap_after_release(self, tmp_path: Path) -> None:
        http = _available(ReleaseConfig(root=tmp_path), "5.0.0", "darwin-x64")
        ctx = _deploy_ctx(tmp_path, http=http)
        opts = parse_options(["-v", "5.0.0", "-p", "linux"], host=Platform.LINUX)

        outcome = orchestrator.run_deploy(opts, ctx)

        assert outcome.released
        assert not outcome.available
        assert isinstance(outcome.error, AvailabilityGap)
        assert outcome.error.missing == ("darwin-x64",)
        assert _console(ctx).banners() == [("Release Complete", True)]
        assert "yarn binary-purge --version 5.0.0" in _console(ctx).text

    def test_missing_options_are_asked(self, tmp_path: Path) -> None:
        prompter = MockPrompter({"version": "5.0.0"})
        ctx = _deploy_ctx(tmp_path, prompter=prompter)

        result = orchestrator.deploy([], ctx)

        assert isinstance(result, Ok)
        assert prompter.asked_names == ["version"]


class TestRelease:
    def _ctx(self, **overrides: object) -> ReleaseContext:
        config = ReleaseConfig()
        overrides.setdefault("http", _available(config, "5.0.0"))
        return mock_context(config, **overrides)

    def test_publishes_manifest_and_commits(self) -> None:
        storage, vcs = MockStorage(), MockVersionControl()
        ctx = self._ctx(storage=storage, vcs=vcs)

        result = orchestrator.release(["--version", "5.0.0", "--commit"], ctx)

        assert isinstance(result, Ok)
        assert storage.manifests == ["5.0.0"]
        assert vcs.commits == [("release 5.0.0 [skip ci]", True)]
        assert _console(ctx).banners() == [("Release Complete", True)]

    def test_without_commit(self) -> None:
        vcs = MockVersionControl()
        ctx = self._ctx(vcs=vcs)

        assert isinstance(orchestrator.release(["--version", "5.0.0"], ctx), Ok)
        assert vcs.commits == []

    def test_manifest_failure(self) -> None:
        storage = MockStorage()
        storage.fail("upload_manifest", returncode=255, stderr="denied")
        http = MockHttpClient()
        ctx = self._ctx(storage=storage, http=http)

        result = orchestrator.release(["--version", "5.0.0"], ctx)

        assert isinstance(result, Err)
        assert isinstance(result.error, CollaboratorFailure)
        assert result.error.stage == "manifest"
        assert http.calls == []
        assert _console(ctx).banners() == [("Release Failed", False)]

    def test_gap_is_reported(self) -> None:
        ctx = self._ctx(http=_available(ReleaseConfig(), "5.0.0", "win32-x64"))

        result = orchestrator.release(["--version", "5.0.0"], ctx)

        assert isinstance(result, Err)
        assert isinstance(result.error, AvailabilityGap)
        assert release_error_exit_code(result.error) == int(ErrorCode.USER_ERROR)


class TestEnsure:
    def test_uses_given_version(self) -> None:
        config = ReleaseConfig()
        http = _available(config, "5.0.0")
        ctx = mock_context(config, http=http)

        assert isinstance(orchestrator.ensure(["--version", "5.0.0"], ctx), Ok)
        assert len(http.calls) == 3

    def test_asks_which_version(self) -> None:
        config = ReleaseConfig(product=ProductConfig(current_version="4.12.1"))
        prompter = MockPrompter()
        ctx = mock_context(config, prompter=prompter, http=_available(config, "4.12.1"))

        assert isinstance(orchestrator.ensure([], ctx), Ok)
        assert prompter.asked[0].message == "Which version to ensure exists?"


class TestStandaloneStages:
    def test_build_positional_arguments(self) -> None:
        builder = MockBuilder()
        ctx = mock_context(builder=builder, host=Platform.DARWIN)

        assert isinstance(orchestrator.build(["win", "5.0.0"], ctx), Ok)
        assert builder.calls == [("win32", "5.0.0")]

    def test_upload_requires_zip(self) -> None:
        storage = MockStorage()
        ctx = mock_context(storage=storage, prompter=MockPrompter({"zip": ""}))

        result = orchestrator.upload(["--version", "5.0.0", "--platform", "linux"], ctx)

        assert isinstance(result, Err)
        assert isinstance(result.error, PreconditionViolation)
        assert storage.binaries == []

    def test_zip_build(self, tmp_path: Path) -> None:
        (tmp_path / "build" / "linux" / "Cypress").mkdir(parents=True)
        archiver = MockArchiver()
        ctx = mock_context(ReleaseConfig(root=tmp_path), archiver=archiver)

        assert isinstance(orchestrator.zip_build(["--platform", "linux"], ctx), Ok)
        assert len(archiver.calls) == 1


class TestBump:
    def test_run_task(self) -> None:
        tasks = MockTaskRunner(tasks=("run-test-projects",))
        ctx = mock_context(tasks=tasks, prompter=MockPrompter({"task": "run"}))

        assert orchestrator.bump([], ctx) == Ok(None)
        assert tasks.calls == [("run-test-projects", [])]

    def test_version_task(self) -> None:
        tasks = MockTaskRunner(tasks=("bump-version",))
        prompter = MockPrompter({"task": "version", "version": "5.0.0"})
        ctx = mock_context(tasks=tasks, prompter=prompter)

        assert orchestrator.bump([], ctx) == Ok(None)
        assert tasks.calls == [("bump-version", ["5.0.0"])]

    def test_unknown_answer(self) -> None:
        tasks = MockTaskRunner(tasks=("run-test-projects", "bump-version"))
        ctx = mock_context(tasks=tasks, prompter=MockPrompter({"task": "dance"}))

        result = orchestrator.bump([], ctx)

        assert result == Err(UnknownTask(task="dance"))
        assert tasks.calls == []

    def test_unconfigured_task(self) -> None:
        ctx = mock_context(prompter=MockPrompter({"task": "run"}))

        result = orchestrator.bump([], ctx)

        assert isinstance(result, Err)
        assert isinstance(result.error, UnknownTask)
        assert result.error.task == "run-test-projects"

    def test_task_failure(self) -> None:
        tasks = MockTaskRunner(failing=("run-test-projects",))
        ctx = mock_context(tasks=tasks, prompter=MockPrompter({"task": "run"}))

        result = orchestrator.bump([], ctx)

        assert isinstance(result, Err)
        assert isinstance(result.error, CollaboratorFailure)
        assert result.error.stage == "task"
        assert result.error.hint == "run-test-projects exploded"


class TestPurgeVersion:
    def test_missing_version(self) -> None:
        storage = MockStorage()
        ctx = mock_context(storage=storage)

        for argv in ([], ["--version"], ["--version", ""]):
            result = orchestrator.purge_version(argv, ctx)
            assert isinstance(result, Err)
            assert isinstance(result.error, PreconditionViolation)
            assert result.error.message == "missing app version to purge"
        assert storage.purged == []

    def test_purges(self) -> None:
        storage = MockStorage()
        ctx = mock_context(storage=storage)

        assert orchestrator.purge_version(["--version", "5.0.0"], ctx) == Ok(None)
        assert storage.purged == ["5.0.0"]
        assert "OK purged v5.0.0" in _console(ctx).messages

    def test_failure(self) -> None:
        storage = MockStorage()
        storage.fail("purge_version", returncode=2)
        ctx = mock_context(storage=storage)

        result = orchestrator.purge_version(["--version", "5.0.0"], ctx)

        assert isinstance(result, Err)
        assert isinstance(result.error, CollaboratorFailure)
        assert result.error.stage == "purge"
