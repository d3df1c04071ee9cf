"""Git repository abstraction.

CI checkouts are usually shallow and come without tags, so tag lookup is a
two-step affair: fetch tag refs, then ask which tags point at the commit.
All operations return Result types.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from tagrelease.core.result import Err, Ok, Result
from tagrelease.platform.process import ProcessError
from tagrelease.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

__all__ = [
    "GitError",
    "Repository",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class Repository:
    """A local git checkout.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def fetch_tags(self) -> Result[str, GitError]:
        """Fetch tag refs from the remote.

        Runs ``git fetch -t --depth=1``; the depth keeps shallow clones shallow.
        """
        result = self._run(["fetch", "-t", "--depth=1"])
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command="fetch -t --depth=1",
                        message=e.stderr.strip() or "fetch failed",
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok(stdout.strip())

    def tags_at(self, sha: str) -> Result[list[str], GitError]:
        """List tags pointing at a commit, in git's order.

        Returns:
            Ok([]) when the commit is not tagged
            Err(GitError) when git reports a failure
        """
        result = self._run(["tag", "--points-at", sha])
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command="tag --points-at",
                        message=e.stderr.strip() or e.stdout.strip() or "tag query failed",
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok([ln.strip() for ln in stdout.splitlines() if ln.strip()])

    def head_sha(self) -> Result[str, GitError]:
        """Full sha of HEAD."""
        result = self._run(["rev-parse", "HEAD"])
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command="rev-parse HEAD",
                        message=e.stderr.strip() or "rev-parse failed",
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok(stdout.strip())

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = _GIT_NETWORK_TIMEOUT_SECONDS if command == "fetch" else _GIT_TIMEOUT_SECONDS
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)
