"""Process exit codes.

These values are used as process exit codes and should remain stable:
- 0: Success (including "commit is not tagged, nothing to do")
- 1: User error (missing input, invalid variables JSON)
- 2: Environment error (git unavailable, tag query failed)
- 4: Network error (release API or artifact download failed)
- 5: I/O error (template unreadable, output file not writable)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
