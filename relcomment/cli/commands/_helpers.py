"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn, TypeVar

import typer

from relcomment.core.result import Err, Result
from relcomment.output.console import ConsoleProtocol
from relcomment.output.errors import print_release_error, release_error_code
from relcomment.release.errors import ReleaseError

T = TypeVar("T")


def exit_with_code(code: int) -> NoReturn:
    """Exit with given code. Explicit helper for clarity."""
    raise typer.Exit(code=code)


def unwrap_or_exit(result: Result[T, ReleaseError], console: ConsoleProtocol) -> T:
    """Return the value, or print the error and exit with its mapped code."""
    if isinstance(result, Err):
        print_release_error(result.error, console)
        exit_with_code(release_error_code(result.error))
    return result.value
