"""Subprocess execution with Result-based error handling.

Build, upload and purge collaborators are external programs; this wrapper
turns their exit status into ``Ok``/``Err`` so a failing command becomes a
pipeline failure instead of an exception.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from binrel.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_silent"]

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that could not be started or exited non-zero.

    Attributes:
        command: The command that was executed.
        returncode: Exit code, or -1 if the process never ran.
        stdout: Captured standard output (empty when streamed).
        stderr: Captured standard error, or the OS error text.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and capture its output.

    Returns:
        Ok(stdout) on exit 0, Err(ProcessError) otherwise.
    """
    log.debug("run %s (cwd=%s)", cmd, cwd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        stdout = e.stdout if isinstance(e.stdout, str) else ""
        return Err(ProcessError(tuple(cmd), -1, stdout, f"Command timed out after {timeout}s"))
    except OSError as e:
        return Err(ProcessError(tuple(cmd), -1, "", str(e)))

    if proc.returncode != 0:
        return Err(ProcessError(tuple(cmd), proc.returncode, proc.stdout, proc.stderr))
    return Ok(proc.stdout)


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command with output streamed to the terminal.

    Used for long-running collaborators (builds, uploads) whose progress
    the operator should see live.
    """
    log.debug("run (streamed) %s (cwd=%s)", cmd, cwd)
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=False)
    except OSError as e:
        return Err(ProcessError(tuple(cmd), -1, "", str(e)))

    if proc.returncode != 0:
        return Err(ProcessError(tuple(cmd), proc.returncode, "", ""))
    return Ok(None)
