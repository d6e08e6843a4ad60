"""Error codes for CLI exit status.

Every failure surfaced by the CLI maps to one of these codes so scripts (and
CI jobs invoking `distplan generate --check`) can tell failures apart.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (invalid release plan, bad arguments)
    - 2: Config error (unreadable config, missing required key)
    - 3: Template error (defect in a shipped template)
    - 5: I/O error (cannot read or write a file)
    - 6: Generated files are out of date (--check)
    """

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    TEMPLATE_ERROR = 3
    IO_ERROR = 5
    OUTDATED = 6

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
