from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from relcomment.platform.process import ProcessError

ReleaseErrorKind = Literal[
    "invalid_version",
    "invalid_prerelease",
    "no_previous_release",
    "prior_prerelease_missing",
    "empty_range",
    "command_failed",
    "invalid_shape",
    "notify_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None


def command_failed(error: ProcessError, *, message: str) -> ReleaseError:
    """Wrap a failed git/gh invocation; stderr becomes the hint."""
    return ReleaseError(kind="command_failed", message=message, hint=error.detail)


def invalid_shape(message: str, *, hint: str | None = None) -> ReleaseError:
    return ReleaseError(kind="invalid_shape", message=message, hint=hint)
