"""Git repository abstraction.

The release pipeline only needs to record a release commit, so this wraps
the handful of git commands involved and reports failures as ``GitError``.

Usage:
    repo = Repository(Path.cwd())
    match repo.commit("release 5.0.0 [skip ci]", allow_empty=True):
        case Ok(output):
            print(output)
        case Err(e):
            print(f"commit failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from binrel.core.result import Err, Ok, Result
from binrel.platform.process import ProcessError
from binrel.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

__all__ = ["GitError", "Repository"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class Repository:
    """A git working tree.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def commit(self, message: str, *, allow_empty: bool = False) -> Result[str, GitError]:
        """Commit the staged changes.

        Args:
            message: Commit message.
            allow_empty: Record the commit even when nothing is staged.

        Returns:
            Ok(git output) on success, Err(GitError) on failure.
        """
        args = ["commit", "-m", message]
        if allow_empty:
            args.append("--allow-empty")
        match self._run(args):
            case Err(e):
                return Err(
                    GitError(
                        command="commit",
                        message=e.stderr.strip() or e.stdout.strip() or "git commit failed",
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok(stdout.strip())

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        return run_process(
            ["git", "-C", str(self.path), *args], cwd=self.path, timeout=_GIT_TIMEOUT_SECONDS
        )
