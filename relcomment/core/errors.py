"""Error codes for CLI exit status.

Each failure class of a release-comment run maps to one stable exit code so
that pipelines can tell a misconfiguration from a forge outage.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success (including dry runs)
    - 1: Configuration error (missing repository, bad options)
    - 2: Release boundary could not be resolved
    - 3: A git or gh invocation failed
    - 4: gh returned a payload with an unexpected shape
    - 5: One or more notification commands failed
    """

    OK = 0
    CONFIG_ERROR = 1
    RESOLVE_ERROR = 2
    COMMAND_ERROR = 3
    SHAPE_ERROR = 4
    NOTIFY_ERROR = 5

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
