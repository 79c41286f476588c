from __future__ import annotations

import pytest
import typer

from relplan.cli.commands._helpers import exit_code_for, exit_on_error
from relplan.core.errors import ErrorCode
from relplan.core.result import Err, Ok
from relplan.output.console import MockConsole
from relplan.services.release.errors import ReleaseError, ReleaseErrorKind


@pytest.mark.parametrize(
    ("kind", "code"),
    [
        ("invalid_version", ErrorCode.USER_ERROR),
        ("invalid_branching", ErrorCode.USER_ERROR),
        ("upgrade_only", ErrorCode.USER_ERROR),
        ("no_matching_tag", ErrorCode.PLAN_ERROR),
        ("dependency_cycle", ErrorCode.PLAN_ERROR),
        ("invalid_constraint", ErrorCode.PLAN_ERROR),
        ("invalid_manifest", ErrorCode.IO_ERROR),
        ("invalid_config", ErrorCode.IO_ERROR),
        ("tags_failed", ErrorCode.IO_ERROR),
        ("plan_io_failed", ErrorCode.IO_ERROR),
    ],
)
def test_exit_code_for(kind: ReleaseErrorKind, code: ErrorCode) -> None:
    assert exit_code_for(ReleaseError(kind=kind, message="x")) is code


def test_exit_on_error_returns_value() -> None:
    console = MockConsole()
    assert exit_on_error(Ok(3), console) == 3
    assert console.outputs == []


def test_exit_on_error_prints_and_exits() -> None:
    console = MockConsole()
    error = ReleaseError(kind="tags_failed", message="git missing", hint="install git")

    with pytest.raises(typer.Exit) as exc:
        exit_on_error(Err(error), console)

    assert exc.value.exit_code == int(ErrorCode.IO_ERROR)
    assert console.messages == ["error: git missing", "hint: install git"]

