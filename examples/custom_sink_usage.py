"""examples/custom_sink_usage.py - Implement and plug in custom sinks.

Shows how to subclass ConsoleSink and ClipboardSink to send prefixlog output
anywhere: an in-memory collector (useful for testing), the stdlib logging
tree, and a clipboard replacement that writes exports to a file.

Run:
    python examples/custom_sink_usage.py
"""

import logging
import tempfile
from pathlib import Path
from typing import List, Tuple

from rich.text import Text

from prefixlog import ClipboardSink, ConsoleSink, LoggingSink, PrefixLogger


# ---------------------------------------------------------------------------
# Custom sink 1: in-memory collector (great for unit tests)
# ---------------------------------------------------------------------------


class MemorySink(ConsoleSink):
    """Stores every line in memory.

    Attributes:
        lines: (level, plain text) pairs in emission order.

    Example:
        >>> sink = MemorySink()
        >>> log = PrefixLogger("demo", console=sink)
        >>> log.error("Loader", "load", "disk full")
        >>> sink.lines[0]
        ('error', '[demo] Loader.load: disk full')
    """

    def __init__(self) -> None:
        self.lines: List[Tuple[str, str]] = []

    def error(self, text: Text) -> None:
        self.lines.append(("error", text.plain))

    def warn(self, text: Text) -> None:
        self.lines.append(("warn", text.plain))

    def info(self, text: Text) -> None:
        self.lines.append(("info", text.plain))

    def debug(self, text: Text) -> None:
        self.lines.append(("debug", text.plain))


# ---------------------------------------------------------------------------
# Custom sink 2: export to a file instead of the clipboard
# ---------------------------------------------------------------------------


class FileClipboard(ClipboardSink):
    """Writes each export to a file, replacing the previous one.

    Args:
        path: Destination file.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def write_text(self, text: str) -> None:
        self.path.write_text(text + "\n", encoding="utf-8")


class Importer:
    def __init__(self, log: PrefixLogger) -> None:
        self.log = log

    def run(self, rows: int) -> None:
        self.log.info(self, f"importing {rows} rows from /var/data/incoming/batch-7/rows.csv")
        if rows > 1000:
            self.log.error(self, "row limit exceeded", {"rows": rows, "limit": 1000})


# ---------------------------------------------------------------------------
# Demo
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # --- Demo 1: MemorySink ---
    print("=" * 60)
    print("Demo 1: MemorySink (lines captured in memory)")
    print("=" * 60)
    sink = MemorySink()
    log = PrefixLogger("importer", console=sink)
    log.state.enable("debug")
    Importer(log).run(5_000)
    for level, line in sink.lines:
        print(f"  {level:5} {line}")

    print()

    # --- Demo 2: LoggingSink + FileClipboard ---
    print("=" * 60)
    print("Demo 2: LoggingSink and exports written to a file")
    print("=" * 60)
    target = Path(tempfile.gettempdir()) / "prefixlog-export.txt"
    log = PrefixLogger("importer", console=LoggingSink(), clipboard=FileClipboard(target))
    log.state.enable("info")
    Importer(log).run(2_000)
    print(log.copy_logs(strip_timestamp=True))
    print(target.read_text(encoding="utf-8"))
