"""Tests for relplan.output.console module."""

from __future__ import annotations

import pytest

from relplan.output.console import (
    ConsoleProtocol,
    MockConsole,
    OutputRecord,
    RichConsole,
    Style,
)


class TestStyle:
    """Test Style enum."""

    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.NEW) == "new"
        assert str(Style.DEFAULT) == "default"

    def test_plan_styles_exist(self) -> None:
        names = {s.name for s in Style}
        assert {"NEW", "EXISTING", "HEADER", "DIM"} <= names


class TestMockConsole:
    """Test MockConsole for testing purposes."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs == [OutputRecord("hello", Style.DEFAULT)]

    def test_print_with_style(self) -> None:
        console = MockConsole()
        console.print("acme/app (4.1.0) new tag", Style.NEW)
        assert console.outputs[0].style == Style.NEW

    def test_prefixed_helpers(self) -> None:
        console = MockConsole()
        console.success("saved")
        console.error("failed")
        console.warning("careful")
        console.info("loading")
        assert console.messages == [
            "OK saved",
            "error: failed",
            "warning: careful",
            "info: loading",
        ]

    def test_has_error(self) -> None:
        console = MockConsole()
        console.info("fine")
        assert not console.has_error()
        console.error("broken")
        assert console.has_error()

    def test_find_and_count(self) -> None:
        console = MockConsole()
        console.header("plan")
        console.print("a", Style.NEW)
        console.print("b", Style.NEW)
        console.newline()
        assert console.count(Style.NEW) == 2
        assert [o.message for o in console.find("a")] == ["a"]
        assert "plan" in console.text

    def test_clear(self) -> None:
        console = MockConsole()
        console.print("x")
        console.clear()
        assert console.outputs == []

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.print("ok")


class TestRichConsole:
    def test_text_is_not_interpreted_as_markup(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.print("[continue] accept this plan", Style.BOLD)
        console.error("bad [red]value[/red]")

        out = capsys.readouterr().out
        assert "[continue] accept this plan" in out
        assert "[red]value[/red]" in out
