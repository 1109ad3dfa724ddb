"""Tests for wr.output.console module."""

from __future__ import annotations

import pytest

from wr.output.console import ConsoleProtocol, MockConsole, OutputRecord, RichConsole, Style


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.DEBUG) == "debug"
        assert str(Style.DEFAULT) == "default"

    def test_all_styles_exist(self) -> None:
        expected = {"DEFAULT", "SUCCESS", "ERROR", "WARNING", "INFO", "DIM", "DEBUG", "HEADER"}
        assert {s.name for s in Style} == expected


class TestMockConsole:
    """Test MockConsole for testing purposes."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs == [OutputRecord("hello", Style.DEFAULT)]

    def test_prefixes(self) -> None:
        console = MockConsole()
        console.success("done")
        console.error("broken")
        console.warning("careful")
        console.info("fyi")
        assert console.messages == ["OK done", "error: broken", "warning: careful", "info: fyi"]

    def test_debug_is_captured(self) -> None:
        console = MockConsole()
        console.debug("[Setup] Checking for git.")
        assert console.outputs[0].style == Style.DEBUG

    def test_has_error_and_warning(self) -> None:
        console = MockConsole()
        assert not console.has_error()
        console.warning("w")
        assert console.has_warning()
        assert not console.has_error()
        console.error("e")
        assert console.has_error()

    def test_find_and_text(self) -> None:
        console = MockConsole()
        console.info("[Deploy] Fetching latest pipeline.")
        console.header("Release")
        assert len(console.find("[Deploy]")) == 1
        assert console.text == "info: [Deploy] Fetching latest pipeline.\nRelease"

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.info("x")


class TestRichConsole:
    def test_debug_hidden_unless_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().debug("hidden detail")
        RichConsole(verbose=True).debug("shown detail")
        out = capsys.readouterr().out
        assert "hidden detail" not in out
        assert "shown detail" in out

    def test_messages_are_not_markup(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().info("[Deploy] Playing job.")
        out = capsys.readouterr().out
        assert "info:" in out
        assert "[Deploy] Playing job." in out

    def test_error_prefix(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().error("push rejected")
        assert "error: push rejected" in capsys.readouterr().out
