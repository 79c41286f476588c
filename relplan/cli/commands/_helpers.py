"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn, TypeVar

import typer

from relplan.core.errors import ErrorCode
from relplan.core.result import Err, Result
from relplan.output.console import ConsoleProtocol, Style
from relplan.services.release.errors import ReleaseError

T = TypeVar("T")

_USER_ERRORS = frozenset({"invalid_version", "invalid_branching", "upgrade_only"})
_PLAN_ERRORS = frozenset({"invalid_constraint", "no_matching_tag", "dependency_cycle"})


def exit_code_for(error: ReleaseError) -> ErrorCode:
    if error.kind in _USER_ERRORS:
        return ErrorCode.USER_ERROR
    if error.kind in _PLAN_ERRORS:
        return ErrorCode.PLAN_ERROR
    return ErrorCode.IO_ERROR


def print_release_error(console: ConsoleProtocol, error: ReleaseError) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def exit_on_error(result: Result[T, ReleaseError], console: ConsoleProtocol) -> T:
    """Return the Ok value, or print the error and exit with its mapped code."""
    if isinstance(result, Err):
        print_release_error(console, result.error)
        raise typer.Exit(code=int(exit_code_for(result.error)))
    return result.value


def exit_with_code(code: ErrorCode) -> NoReturn:
    raise typer.Exit(code=int(code))
