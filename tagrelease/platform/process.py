"""Subprocess execution with Result-based error handling.

All external commands (currently only git) go through ``run`` so callers get
a ``ProcessError`` value instead of an exception.

Usage:
    match run(["git", "tag", "--points-at", sha], cwd=workspace):
        case Ok(stdout):
            ...
        case Err(error):
            console.error(error.stderr)
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from tagrelease.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that could not start, timed out, or exited non-zero.

    Attributes:
        command: argv as executed.
        returncode: Exit code, -1 when the process never completed.
        stdout: Captured standard output (may be empty).
        stderr: Captured standard error, or the reason the process never ran.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"


def _failure(
    cmd: Sequence[str],
    returncode: int,
    *,
    stdout: str = "",
    stderr: str = "",
) -> Err[ProcessError]:
    return Err(
        ProcessError(command=tuple(cmd), returncode=returncode, stdout=stdout, stderr=stderr)
    )


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run ``cmd`` in ``cwd`` and capture its text output.

    ``env=None`` inherits the current environment; ``timeout=None`` waits
    forever.
    """
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
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return _failure(cmd, -1, stdout=partial, stderr=f"Command timed out after {timeout}s")
    except OSError as e:
        return _failure(cmd, -1, stderr=str(e))

    if proc.returncode != 0:
        return _failure(cmd, proc.returncode, stdout=proc.stdout, stderr=proc.stderr)
    return Ok(proc.stdout)
