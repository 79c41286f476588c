"""Error codes for CLI exit status.

These values are used as process exit codes and should remain stable:
- 0: Success
- 1: User error (bad version, bad option, nothing to show)
- 2: Plan error (no tag satisfies a constraint, dependency cycle)
- 3: I/O error (manifest, plan file or git tag listing failed)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    PLAN_ERROR = 2
    IO_ERROR = 3

