"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relcomment.core.config import ConfigError
from relcomment.core.errors import ErrorCode
from relcomment.output.console import Style
from relcomment.release.errors import ReleaseError

if TYPE_CHECKING:
    from relcomment.output.console import ConsoleProtocol

__all__ = ["print_release_error", "print_config_error", "release_error_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def print_config_error(error: ConfigError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.path is not None:
        console.print(f"config: {error.path}", Style.DIM)


def release_error_code(error: ReleaseError) -> int:
    match error.kind:
        case (
            "invalid_version"
            | "invalid_prerelease"
            | "no_previous_release"
            | "prior_prerelease_missing"
            | "empty_range"
        ):
            return int(ErrorCode.RESOLVE_ERROR)
        case "command_failed":
            return int(ErrorCode.COMMAND_ERROR)
        case "invalid_shape":
            return int(ErrorCode.SHAPE_ERROR)
        case "notify_failed":
            return int(ErrorCode.NOTIFY_ERROR)
