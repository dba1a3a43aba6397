"""Tests for git/repository.py."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from binrel.core.result import Err, Ok, Result
from binrel.git import repository as repo_mod
from binrel.git.repository import Repository
from binrel.platform.process import ProcessError


class _Recorder:
    def __init__(self, result: Result[str, ProcessError]) -> None:
        self.result = result
        self.calls: list[list[str]] = []

    def __call__(
        self, cmd: list[str], *, cwd: Path, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        del cwd, timeout
        self.calls.append(cmd)
        return self.result


def test_commit_builds_command(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = _Recorder(Ok("[main abc123] release 5.0.0 [skip ci]\n"))
    monkeypatch.setattr(repo_mod, "run_process", fake)

    result = Repository(tmp_path).commit("release 5.0.0 [skip ci]", allow_empty=True)

    assert result == Ok("[main abc123] release 5.0.0 [skip ci]")
    assert fake.calls == [
        [
            "git",
            "-C",
            str(tmp_path),
            "commit",
            "-m",
            "release 5.0.0 [skip ci]",
            "--allow-empty",
        ]
    ]


def test_commit_without_allow_empty(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = _Recorder(Ok(""))
    monkeypatch.setattr(repo_mod, "run_process", fake)

    Repository(tmp_path).commit("msg")

    assert "--allow-empty" not in fake.calls[0]


def test_commit_failure_maps_to_git_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    fake = _Recorder(Err(ProcessError(("git",), 128, "", "fatal: not a git repository\n")))
    monkeypatch.setattr(repo_mod, "run_process", fake)

    result = Repository(tmp_path).commit("msg")

    assert isinstance(result, Err)
    assert result.error.command == "commit"
    assert result.error.returncode == 128
    assert result.error.message == "fatal: not a git repository"


def test_commit_failure_falls_back_to_stdout(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    fake = _Recorder(Err(ProcessError(("git",), 1, "nothing to commit\n", "")))
    monkeypatch.setattr(repo_mod, "run_process", fake)

    result = Repository(tmp_path).commit("msg")

    assert isinstance(result, Err)
    assert result.error.message == "nothing to commit"


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
def test_empty_commit_in_real_repo(tmp_path: Path) -> None:
    subprocess.run(["git", "init", "-q", str(tmp_path)], check=True)
    git = ["git", "-C", str(tmp_path)]
    subprocess.run([*git, "config", "user.email", "ci@example.com"], check=True)
    subprocess.run([*git, "config", "user.name", "CI"], check=True)
    subprocess.run([*git, "config", "commit.gpgsign", "false"], check=True)
    repo = Repository(tmp_path)

    result = repo.commit("release 5.0.0 [skip ci]", allow_empty=True)

    assert isinstance(result, Ok)
    log = subprocess.run(
        [*git, "log", "--format=%s"], check=True, capture_output=True, text=True
    )
    assert log.stdout.strip() == "release 5.0.0 [skip ci]"
