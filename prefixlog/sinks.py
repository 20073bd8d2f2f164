"""sinks.py - Output destinations for prefixlog.

Two collaborators sit at the edge of the package:

    ConsoleSink    receives every accepted log line, split into a prefix and a
                   message span that are styled independently.
    ClipboardSink  receives exported history text.

Both are abstract base classes so hosts can swap the destination without
touching any other code. Defaults:

    RichConsoleSink  prints styled ``rich.text.Text`` to stderr.
    LoggingSink      forwards plain text to a stdlib ``logging.Logger``.
    TkClipboard      writes through a hidden tkinter root on a daemon thread.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional

from rich.console import Console
from rich.text import Text

from .levels import Severity, SeverityLike

_logger = logging.getLogger(__name__)


def build_line(prefix: str, message: str, prefix_style: str, message_style: str) -> Text:
    """Assemble the two-span console line; the message span is omitted when empty."""
    if not message:
        return Text(prefix, style=prefix_style)
    if not prefix:
        return Text(message, style=message_style)
    return Text.assemble((prefix, prefix_style), " ", (message, message_style))


class ConsoleSink(ABC):
    """Abstract base class for console destinations.

    Subclasses implement one method per severity. Each receives a
    ``rich.text.Text`` whose spans carry the prefix and message styles;
    ``text.plain`` is the unstyled line.

    Example:
        >>> class ListSink(ConsoleSink):
        ...     def __init__(self):
        ...         self.lines = []
        ...     def error(self, text): self.lines.append(text.plain)
        ...     def warn(self, text): self.lines.append(text.plain)
        ...     def info(self, text): self.lines.append(text.plain)
        ...     def debug(self, text): self.lines.append(text.plain)
    """

    def write(self, level: SeverityLike, text: Text) -> None:
        """Route ``text`` to the method matching ``level``."""
        getattr(self, Severity.parse(level).label)(text)

    @abstractmethod
    def error(self, text: Text) -> None:
        """Write an error line."""

    @abstractmethod
    def warn(self, text: Text) -> None:
        """Write a warning line."""

    @abstractmethod
    def info(self, text: Text) -> None:
        """Write an info line."""

    @abstractmethod
    def debug(self, text: Text) -> None:
        """Write a debug line."""


class RichConsoleSink(ConsoleSink):
    """Print styled lines through a ``rich`` Console (default: stderr).

    Attributes:
        console (Console): The rich console that receives every line.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(stderr=True, highlight=False, soft_wrap=True)

    def _print(self, text: Text) -> None:
        self.console.print(text, markup=False, emoji=False)

    def error(self, text: Text) -> None:
        self._print(text)

    def warn(self, text: Text) -> None:
        self._print(text)

    def info(self, text: Text) -> None:
        self._print(text)

    def debug(self, text: Text) -> None:
        self._print(text)


class LoggingSink(ConsoleSink):
    """Forward plain-text lines to a stdlib ``logging.Logger``.

    Useful when the host already routes ``logging`` output somewhere and the
    styled console is not wanted.
    """

    def __init__(self, delegate: Optional[logging.Logger] = None) -> None:
        self.delegate = delegate or logging.getLogger("prefixlog.console")

    def error(self, text: Text) -> None:
        self.delegate.error(text.plain)

    def warn(self, text: Text) -> None:
        self.delegate.warning(text.plain)

    def info(self, text: Text) -> None:
        self.delegate.info(text.plain)

    def debug(self, text: Text) -> None:
        self.delegate.debug(text.plain)


class ClipboardSink(ABC):
    """Abstract base class for clipboard destinations.

    ``write_text`` is best-effort and should not block the caller. Exceptions
    it raises are caught by the exporter and logged as warnings.
    """

    @abstractmethod
    def write_text(self, text: str) -> None:
        """Place ``text`` on the clipboard."""


class TkClipboard(ClipboardSink):
    """Clipboard writes through a hidden ``tkinter`` root window.

    Each write runs on its own daemon thread, so a missing display or a slow
    clipboard owner never delays the caller. Failures are logged as warnings.
    """

    def write_text(self, text: str) -> None:
        thread = threading.Thread(
            target=self._write, args=(text,), name="prefixlog-clipboard", daemon=True
        )
        thread.start()

    @staticmethod
    def _write(text: str) -> None:
        try:
            import tkinter

            root = tkinter.Tk()
            try:
                root.withdraw()
                root.clipboard_clear()
                root.clipboard_append(text)
                root.update()
            finally:
                root.destroy()
        except Exception as exc:
            _logger.warning("Failed to copy logs to clipboard: %s", exc)
