"""test_handler.py - Unit and integration tests for PrefixLogHandler.

Covers:
    - Level mapping from stdlib records to severities
    - The PrefixLogger gate still applies to forwarded records
    - Exception information is appended to the message
    - The prefix names the code that called the stdlib logger
    - Faults are routed to handleError(), never raised
    - Integration: a stdlib logger with the handler attached
    - A root-logger handler never re-forwards prefixlog's own output
"""

import logging
import sys

import pytest

from helpers import make_logger

from prefixlog.handler import PrefixLogHandler
from prefixlog.levels import Severity
from prefixlog.sinks import LoggingSink


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_record(msg: str, level: int = logging.INFO, exc_info=None, args=()) -> logging.LogRecord:
    """Create a minimal LogRecord for testing."""
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=args,
        exc_info=exc_info,
    )


class Service:
    def __init__(self, stdlib_logger):
        self.stdlib_logger = stdlib_logger

    def start(self):
        self.stdlib_logger.info("service %s started", "api")


# ---------------------------------------------------------------------------
# emit()
# ---------------------------------------------------------------------------


class TestPrefixLogHandlerEmit:
    def setup_method(self):
        self.log, self.sink, _ = make_logger(level="debug")
        self.handler = PrefixLogHandler(self.log)

    @pytest.mark.parametrize(
        "levelno,expected",
        [
            (logging.CRITICAL, Severity.ERROR),
            (logging.ERROR, Severity.ERROR),
            (logging.WARNING, Severity.WARN),
            (logging.INFO, Severity.INFO),
            (logging.DEBUG, Severity.DEBUG),
        ],
    )
    def test_handler_maps_levels(self, levelno, expected):
        """Each stdlib level lands in history with the matching severity."""
        self.handler.handle(_make_record("x", levelno))
        assert self.log.history.snapshot()[-1].level is expected

    def test_handler_formats_record_arguments(self):
        self.handler.handle(_make_record("loaded %d rows", args=(3,)))
        assert self.log.history.snapshot()[-1].message == "loaded 3 rows"

    def test_handler_prefix_names_calling_method(self):
        """Frames of the handler and the logging package are skipped."""
        self.handler.handle(_make_record("hello"))
        assert self.sink.lines == [
            "[test-app] TestPrefixLogHandlerEmit.test_handler_prefix_names_calling_method: hello"
        ]

    def test_handler_appends_exception(self):
        try:
            raise ValueError("bad row")
        except ValueError:
            record = _make_record("import failed", logging.ERROR, exc_info=sys.exc_info())
        self.handler.handle(record)
        assert self.log.history.snapshot()[-1].message == "import failed (ValueError: bad row)"

    def test_handler_respects_logger_gate(self):
        """A disabled PrefixLogger only accepts forwarded errors."""
        log, sink, _ = make_logger()
        handler = PrefixLogHandler(log)
        handler.handle(_make_record("quiet", logging.INFO))
        handler.handle(_make_record("loud", logging.ERROR))
        assert [e.message for e in log.history.snapshot()] == ["loud"]

    def test_handler_fault_goes_to_handle_error(self, monkeypatch):
        """Exceptions inside emit() are passed to handleError, not raised."""
        seen = []

        def explode(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(self.log, "log_call", explode)
        monkeypatch.setattr(self.handler, "handleError", lambda record: seen.append(record))
        record = _make_record("x")
        self.handler.handle(record)
        assert seen == [record]


# ---------------------------------------------------------------------------
# Integration with a stdlib logger
# ---------------------------------------------------------------------------


class TestPrefixLogHandlerIntegration:
    def setup_method(self):
        self.log, self.sink, _ = make_logger(level="debug")
        self.handler = PrefixLogHandler(self.log)
        self.stdlib_logger = logging.getLogger("bridge.tests")
        self.stdlib_logger.setLevel(logging.DEBUG)
        self.stdlib_logger.propagate = False
        self.stdlib_logger.addHandler(self.handler)

    def teardown_method(self):
        self.stdlib_logger.removeHandler(self.handler)

    def test_handler_stdlib_call_from_method(self):
        """logger.info() inside a method is prefixed with that class and method."""
        Service(self.stdlib_logger).start()
        assert self.sink.lines == ["[test-app] Service.start: service api started"]

    def test_handler_stdlib_levels_filter_first(self):
        """Records below the stdlib logger's level never reach the handler."""
        self.stdlib_logger.setLevel(logging.WARNING)
        self.stdlib_logger.info("dropped")
        self.stdlib_logger.warning("kept")
        assert [e.message for e in self.log.history.snapshot()] == ["kept"]


# ---------------------------------------------------------------------------
# Root-logger handler with a logging-backed console
# ---------------------------------------------------------------------------


class TestPrefixLogHandlerOnRoot:
    def setup_method(self):
        self.root = logging.getLogger()
        self.saved_level = self.root.level
        self.root.setLevel(logging.DEBUG)
        self.handlers = []

    def teardown_method(self):
        for handler in self.handlers:
            self.root.removeHandler(handler)
        self.root.setLevel(self.saved_level)

    def _attach(self, console):
        log, _, _ = make_logger(level="debug", console=console)
        handler = PrefixLogHandler(log)
        self.root.addHandler(handler)
        self.handlers.append(handler)
        return log

    def test_handler_root_with_logging_sink_forwards_once(self):
        """Lines written to prefixlog.console are not fed back into history."""
        log = self._attach(LoggingSink())
        logging.getLogger("bridge.app").warning("hello")
        assert [e.message for e in log.history.snapshot()] == ["hello"]

    def test_handler_root_with_host_console_logger(self):
        """A console delegate outside prefixlog.* is still not re-forwarded."""
        log = self._attach(LoggingSink(logging.getLogger("bridge.console")))
        logging.getLogger("bridge.app").warning("hello")
        assert [e.message for e in log.history.snapshot()] == ["hello"]

    def test_handler_ignores_prefixlog_records(self):
        log = self._attach(LoggingSink())
        logging.getLogger("prefixlog.exporter").warning("Failed to copy logs to clipboard: x")
        assert log.history.snapshot() == []
