"""helpers.py - In-memory sinks and a logger factory shared by the test modules."""

from typing import List, Tuple

from rich.text import Text

from prefixlog.logger import PrefixLogger
from prefixlog.registry import ClassRegistry
from prefixlog.sinks import ClipboardSink, ConsoleSink


class ListSink(ConsoleSink):
    """Collects (level, Text) pairs instead of printing."""

    def __init__(self) -> None:
        self.records: List[Tuple[str, Text]] = []

    @property
    def lines(self) -> List[str]:
        return [text.plain for _, text in self.records]

    @property
    def levels(self) -> List[str]:
        return [level for level, _ in self.records]

    def error(self, text: Text) -> None:
        self.records.append(("error", text))

    def warn(self, text: Text) -> None:
        self.records.append(("warn", text))

    def info(self, text: Text) -> None:
        self.records.append(("info", text))

    def debug(self, text: Text) -> None:
        self.records.append(("debug", text))


class RecordingClipboard(ClipboardSink):
    def __init__(self) -> None:
        self.texts: List[str] = []

    def write_text(self, text: str) -> None:
        self.texts.append(text)


class FailingClipboard(ClipboardSink):
    def write_text(self, text: str) -> None:
        raise RuntimeError("clipboard unavailable")


def make_logger(namespace: str = "test-app", level=None, **kwargs):
    """Return (logger, sink, clipboard) with a private class registry.

    ``level`` enables logging at that severity; ``None`` leaves it disabled.
    """
    sink = kwargs.pop("console", None) or ListSink()
    clipboard = kwargs.pop("clipboard", None) or RecordingClipboard()
    kwargs.setdefault("registry", ClassRegistry())
    log = PrefixLogger(namespace, console=sink, clipboard=clipboard, **kwargs)
    if level is not None:
        log.state.enable(level)
    return log, sink, clipboard
