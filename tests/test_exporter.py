"""test_exporter.py - Unit tests for HistoryExporter and path simplification.

Covers:
    - Selection by namespace, wildcard and count
    - full / prefix-only / message-only / custom formats
    - Strip flags remove only the fields they name
    - Status strings for empty selections, bad options, missing templates
    - Clipboard failures are logged, not raised
    - Invalid counts become status strings
    - simplify_paths for POSIX, Windows (either separator), escaped Windows,
      UNC and relative paths
"""

import logging
from datetime import datetime

import pytest

from helpers import FailingClipboard, RecordingClipboard

from prefixlog.buffer import LogEntry, LogHistory
from prefixlog.exporter import ExportFormat, ExportOptions, HistoryExporter, simplify_paths
from prefixlog.levels import Severity
from prefixlog.state import LoggerState

TS = datetime(2024, 1, 15, 12, 34, 56, 789000)


def _entry(message, namespace="app", class_name="Worker", method_name="run", level=Severity.INFO):
    prefix = f"[{namespace}] {class_name}.{method_name}:"
    return LogEntry(
        level,
        namespace,
        message,
        f"{prefix} {message}" if message else prefix,
        class_name=class_name,
        method_name=method_name,
        timestamp=TS,
    )


# ---------------------------------------------------------------------------
# ExportOptions
# ---------------------------------------------------------------------------


class TestExportOptions:
    def test_export_options_defaults(self):
        opts = ExportOptions()
        assert opts.count == 50
        assert opts.format is ExportFormat.FULL
        assert opts.simplify_paths is True
        assert not (opts.strip_namespace or opts.strip_class or opts.strip_method)
        assert not (opts.strip_timestamp or opts.strip_log_level)

    def test_export_options_accepts_camel_case(self):
        opts = ExportOptions.build({"stripLogLevel": True, "customTemplate": "{message}"}, format="custom")
        assert opts.strip_log_level is True
        assert opts.custom_template == "{message}"
        assert opts.format is ExportFormat.CUSTOM

    def test_export_options_rejects_unknown_keys(self):
        with pytest.raises(TypeError):
            ExportOptions.build(colour="red")

    def test_export_options_rejects_unknown_format(self):
        with pytest.raises(ValueError):
            ExportOptions.build(format="xml")

    def test_export_options_count_from_string(self):
        """A count typed at a console as text is accepted."""
        assert ExportOptions.build(count=" 5").count == 5

    @pytest.mark.parametrize("count", ["five", True, 2.5, None])
    def test_export_options_rejects_bad_count(self, count):
        with pytest.raises((TypeError, ValueError)):
            ExportOptions.build(count=count)

    def test_export_options_instance_plus_keywords(self):
        """Keywords override fields of an existing ExportOptions."""
        opts = ExportOptions.build(ExportOptions(count=5), strip_class=True)
        assert (opts.count, opts.strip_class) == (5, True)


# ---------------------------------------------------------------------------
# Selection and status strings
# ---------------------------------------------------------------------------


class TestHistoryExporterCopy:
    def setup_method(self):
        self.history = LogHistory()
        self.clipboard = RecordingClipboard()
        self.exporter = HistoryExporter(self.history, LoggerState("app"), self.clipboard)

    def test_exporter_message_only_last_two(self):
        """message-only with count 2 over a..e copies exactly 'd\\ne'."""
        for text in "abcde":
            self.history.push(_entry(text))
        status = self.exporter.copy(count=2, format="message-only")
        assert self.clipboard.texts == ["d\ne"]
        assert status == "Copied 2 log entries (3 characters) to clipboard"

    def test_exporter_defaults_to_current_namespace(self):
        self.history.push(_entry("mine"))
        self.history.push(_entry("theirs", namespace="other"))
        self.exporter.copy(format="message-only")
        assert self.clipboard.texts == ["mine"]

    def test_exporter_wildcard_namespace(self):
        self.history.push(_entry("mine"))
        self.history.push(_entry("theirs", namespace="other"))
        self.exporter.copy(namespace="*", format="message-only")
        assert self.clipboard.texts == ["mine\ntheirs"]

    def test_exporter_empty_selection(self):
        """No matching entries: a status string and no clipboard write."""
        assert self.exporter.copy(namespace="ghost") == 'No logs found for namespace "ghost"'
        assert self.clipboard.texts == []

    def test_exporter_custom_without_template(self):
        self.history.push(_entry("x"))
        status = self.exporter.copy(format="custom")
        assert status == "Custom format requires a custom template (custom_template)"
        assert self.clipboard.texts == []

    def test_exporter_invalid_options(self):
        status = self.exporter.copy(colour="red")
        assert status.startswith("Invalid export options:")

    def test_exporter_invalid_count_returns_status(self):
        self.history.push(_entry("x"))
        status = self.exporter.copy(count="many")
        assert status.startswith("Invalid export options: count must be an integer")
        assert self.clipboard.texts == []

    def test_exporter_clipboard_failure_is_logged(self, caplog):
        """A failing clipboard is reported as a warning; copy still returns."""
        self.history.push(_entry("x"))
        exporter = HistoryExporter(self.history, LoggerState("app"), FailingClipboard())
        with caplog.at_level(logging.WARNING, logger="prefixlog.exporter"):
            status = exporter.copy(format="message-only")
        assert status == "Copied 1 log entries (1 characters) to clipboard"
        assert "Failed to copy logs to clipboard" in caplog.text

    def test_exporter_render_does_not_touch_clipboard(self):
        self.history.push(_entry("x"))
        assert self.exporter.render(format="message-only") == "x"
        assert self.clipboard.texts == []

    def test_exporter_render_custom_without_template_raises(self):
        with pytest.raises(ValueError):
            self.exporter.render(format="custom")


# ---------------------------------------------------------------------------
# Formats
# ---------------------------------------------------------------------------


class TestHistoryExporterFormats:
    def setup_method(self):
        self.history = LogHistory()
        self.history.push(_entry("hello"))
        self.exporter = HistoryExporter(self.history, LoggerState("app"), RecordingClipboard())

    def _render(self, **kwargs):
        return self.exporter.render(**kwargs)

    def test_exporter_full_format(self):
        assert self._render() == "2024-01-15 12:34:56.789 [INFO] [app] Worker.run: hello"

    def test_exporter_full_strip_timestamp(self):
        assert self._render(strip_timestamp=True) == "[INFO] [app] Worker.run: hello"

    def test_exporter_full_strip_level_and_namespace(self):
        text = self._render(strip_log_level=True, strip_namespace=True)
        assert text == "2024-01-15 12:34:56.789 Worker.run: hello"

    def test_exporter_full_strip_class(self):
        assert self._render(strip_timestamp=True, strip_class=True) == "[INFO] [app] run: hello"

    def test_exporter_full_strip_method(self):
        assert self._render(strip_timestamp=True, strip_method=True) == "[INFO] [app] Worker: hello"

    def test_exporter_strip_class_leaves_message_alone(self):
        """Names are stripped from the prefix, never from the message body."""
        self.history.clear()
        self.history.push(_entry("Worker.run finished"))
        text = self._render(strip_timestamp=True, strip_log_level=True, strip_class=True)
        assert text == "[app] run: Worker.run finished"

    def test_exporter_strip_class_keeps_method_containing_it(self):
        """Only the qualified class token is removed, not substrings of the method."""
        self.history.clear()
        self.history.push(_entry("hi", class_name="Run", method_name="Runner"))
        text = self._render(strip_class=True, strip_timestamp=True, strip_log_level=True)
        assert text == "[app] Runner: hi"

    def test_exporter_strip_method_keeps_class_containing_it(self):
        self.history.clear()
        self.history.push(_entry("hi", class_name="Runner", method_name="Run"))
        text = self._render(strip_method=True, strip_timestamp=True, strip_log_level=True)
        assert text == "[app] Runner: hi"

    def test_exporter_strip_class_in_callback_line(self):
        self.history.clear()
        self.history.push(
            LogEntry(
                Severity.INFO,
                "app",
                "done",
                "[app] Worker (callback): done",
                class_name="Worker",
                timestamp=TS,
            )
        )
        text = self._render(strip_class=True, strip_timestamp=True, strip_log_level=True)
        assert text == "[app] (callback): done"

    def test_exporter_prefix_only(self):
        assert self._render(format="prefix-only") == "[app] Worker.run"

    def test_exporter_prefix_only_stripped(self):
        assert self._render(format="prefix-only", strip_namespace=True, strip_method=True) == "Worker"

    def test_exporter_custom_template(self):
        text = self._render(format="custom", custom_template="{level}|{namespace}|{class}|{method}|{message}")
        assert text == "INFO|app|Worker|run|hello"

    def test_exporter_custom_template_timestamp_and_strip(self):
        text = self._render(
            format="custom", custom_template="{timestamp} {class}: {message}", strip_class=True
        )
        assert text == "2024-01-15 12:34:56.789 : hello"

    def test_exporter_simplifies_paths_by_default(self):
        self.history.clear()
        self.history.push(_entry("failed at /home/user/project/src/file.py"))
        assert self._render(format="message-only") == "failed at .../src/file.py"

    def test_exporter_simplify_paths_disabled(self):
        self.history.clear()
        self.history.push(_entry("failed at /home/user/project/src/file.py"))
        text = self._render(format="message-only", simplify_paths=False)
        assert text == "failed at /home/user/project/src/file.py"


# ---------------------------------------------------------------------------
# Path simplification
# ---------------------------------------------------------------------------


class TestSimplifyPaths:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("/home/user/project/src/file.ts", ".../src/file.ts"),
            ("Error in /app/src/worker.py:42", "Error in .../src/worker.py:42"),
            (r"C:\Users\me\proj\main.py", ".../proj/main.py"),
            (r"C:\\Users\\me\\proj\\main.py", ".../proj/main.py"),
            ("C:/Users/me/proj/main.py", ".../proj/main.py"),
            (r"\\server\share\logs\app.log", ".../logs/app.log"),
            ("../lib/util/helpers.py", ".../util/helpers.py"),
            ("./src/main.py", ".../src/main.py"),
        ],
    )
    def test_simplify_paths_collapses(self, raw, expected):
        assert simplify_paths(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["/file.ts", "./main.py", "see https://example.com/docs/page", "ratio 3/4", "no paths here"],
    )
    def test_simplify_paths_leaves_short_paths_and_urls(self, raw):
        assert simplify_paths(raw) == raw

    @pytest.mark.parametrize(
        "raw",
        [
            "/home/user/project/src/file.ts",
            r"C:\Users\me\proj\main.py",
            r"C:\\Users\\me\\proj\\main.py",
            "C:/Users/me/proj/main.py",
            r"\\server\share\logs\app.log",
            "../lib/util/helpers.py",
        ],
    )
    def test_simplify_paths_is_idempotent(self, raw):
        once = simplify_paths(raw)
        assert simplify_paths(once) == once

    def test_simplify_paths_multiple_paths(self):
        text = "copy /a/b/c.txt to /x/y/z.txt"
        assert simplify_paths(text) == "copy .../b/c.txt to .../y/z.txt"
