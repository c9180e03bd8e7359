"""Tests for the output formatting system.

Covers format resolution, NO_COLOR handling, stdout/stderr discipline,
quiet/verbose rules, the JSON/plain/table renderers and the global
instance helpers used as interceptor log sinks.
"""

from __future__ import annotations

import json

import pytest

from postfetch import output as output_module
from postfetch.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("postfetch.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("postfetch.output._is_tty", lambda: True)


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.RICH

    def test_auto_resolves_to_plain_when_tty_but_no_color(self, tty):
        assert OutputManager(format=OutputFormat.AUTO, no_color=True).format == OutputFormat.PLAIN


class TestColorDisabling:
    def test_no_color_env_disables_color(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


class TestStreamDiscipline:
    def test_data_to_stdout_diagnostics_to_stderr(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True, verbose=True)
        mgr.format_response({"id": 7})
        mgr.info("info line")
        mgr.error("boom")
        mgr.debug("--> GET https://api.example.com/posts/7")

        captured = capfd.readouterr()
        assert json.loads(captured.out) == {"id": 7}
        assert "info line" in captured.err
        assert "Error: boom" in captured.err
        assert "[debug] --> GET https://api.example.com/posts/7" in captured.err

    def test_quiet_suppresses_info_not_warning_or_error(self, capfd, non_tty):
        mgr = OutputManager(no_color=True, quiet=True)
        mgr.info("hidden")
        mgr.success("hidden too")
        mgr.warning("kept")
        mgr.error("shown")
        captured = capfd.readouterr()
        assert "hidden" not in captured.err
        assert "Warning: kept" in captured.err
        assert "Error: shown" in captured.err

    def test_debug_hidden_by_default(self, capfd, non_tty):
        OutputManager(no_color=True).debug("secret")
        assert capfd.readouterr().err == ""

    def test_rich_debug_escapes_markup(self, capfd, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        OutputManager(verbose=True).debug("[bold]Set-Cookie[/bold]")
        assert "[bold]Set-Cookie[/bold]" in capfd.readouterr().err


class TestRenderers:
    def test_plain_dict_as_key_value(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN).format_response({"id": 7, "title": "T"})
        assert capfd.readouterr().out == "id\t7\ntitle\tT\n"

    def test_plain_list_of_dicts_as_rows(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN).format_response([{"id": 1, "title": "a"}])
        assert capfd.readouterr().out == "1\ta\n"

    def test_table_json(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).print_table(["id", "title"], [["1", "a"]])
        assert json.loads(capfd.readouterr().out) == [{"id": "1", "title": "a"}]

    def test_table_plain(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN).print_table(["id", "title"], [["1", "a"]])
        assert capfd.readouterr().out == "id\ttitle\n1\ta\n"


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        reset_output()
        assert isinstance(get_output(), OutputManager)

    def test_set_output_installs_instance(self):
        mgr = OutputManager(quiet=True)
        set_output(mgr)
        assert get_output() is mgr

    def test_debug_sink_follows_current_instance(self, capfd, non_tty):
        sink = output_module.debug
        set_output(OutputManager(no_color=True, verbose=False))
        sink("first")
        set_output(OutputManager(no_color=True, verbose=True))
        sink("second")
        err = capfd.readouterr().err
        assert "first" not in err
        assert "[debug] second" in err
