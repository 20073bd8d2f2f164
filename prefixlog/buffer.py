"""buffer.py - Bounded log history for prefixlog.

LogHistory keeps the most recent log entries of every namespace that shares
it, so that developer tooling can export them later (see ``exporter.py``).
Entries are never persisted; they live until evicted, cleared, or the process
ends.

Design decisions:
    - ``collections.deque(maxlen=N)`` provides O(1) append with automatic
      eviction of the oldest entry once capacity is reached, so the capacity
      invariant holds after every individual ``push()``.
    - Namespace-scoped ``clear()`` rebuilds the deque with the same ``maxlen``
      rather than removing entries one by one.
"""

from collections import deque
from datetime import datetime
from typing import Any, List, Optional, Sequence

from .levels import Severity

MAX_LOG_ENTRIES = 1000
WILDCARD = "*"


class LogEntry:
    """One accepted log call, as stored in a LogHistory.

    Attributes:
        timestamp (datetime): Wall-clock time of the call.
        level (Severity): Severity of the call.
        namespace (str): Namespace active when the call was made.
        class_name (Optional[str]): Class segment of the rendered prefix.
        method_name (Optional[str]): Method segment of the rendered prefix.
        message (str): Message body, already converted to text.
        formatted_message (str): Prefix and message as written to the console.
        raw_args (tuple): The message arguments exactly as passed by the caller.
    """

    __slots__ = (
        "timestamp",
        "level",
        "namespace",
        "class_name",
        "method_name",
        "message",
        "formatted_message",
        "raw_args",
    )

    def __init__(
        self,
        level: Severity,
        namespace: str,
        message: str,
        formatted_message: str,
        class_name: Optional[str] = None,
        method_name: Optional[str] = None,
        raw_args: Sequence[Any] = (),
        timestamp: Optional[datetime] = None,
    ) -> None:
        self.timestamp = timestamp or datetime.now()
        self.level = level
        self.namespace = namespace
        self.class_name = class_name
        self.method_name = method_name
        self.message = message
        self.formatted_message = formatted_message
        self.raw_args = tuple(raw_args)

    def __repr__(self) -> str:  # pragma: no cover
        return f"LogEntry({self.level.label}, {self.formatted_message!r})"


class LogHistory:
    """Fixed-capacity, insertion-ordered store of LogEntry objects.

    When the store is full the oldest entry is dropped on the next ``push()``
    (FIFO eviction), which keeps memory bounded in long-running processes
    while preserving the most recent context.

    Example:
        >>> history = LogHistory(capacity=2)
        >>> for text in ("a", "b", "c"):
        ...     history.push(LogEntry(Severity.INFO, "app", text, text))
        >>> [e.message for e in history.snapshot()]
        ['b', 'c']
    """

    def __init__(self, capacity: int = MAX_LOG_ENTRIES) -> None:
        """Initialise the store.

        Args:
            capacity: Maximum number of entries retained. Defaults to 1000.

        Raises:
            ValueError: If ``capacity`` is not positive.
        """
        if capacity <= 0:
            raise ValueError(f"capacity must be > 0, got {capacity}")
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen

    def push(self, entry: LogEntry) -> None:
        """Append an entry, evicting the oldest one if the store is full."""
        self._entries.append(entry)

    def snapshot(self, namespace: Optional[str] = None) -> List[LogEntry]:
        """Return entries oldest-first, optionally limited to one namespace.

        ``None`` and ``"*"`` both select every namespace.
        """
        if namespace is None or namespace == WILDCARD:
            return list(self._entries)
        return [e for e in self._entries if e.namespace == namespace]

    def select(self, namespace: Optional[str] = None, count: Optional[int] = None) -> List[LogEntry]:
        """Return the most recent ``count`` matching entries, oldest-first.

        A ``count`` of ``None`` returns every match; ``0`` or less returns none.
        """
        entries = self.snapshot(namespace)
        if count is None:
            return entries
        if count <= 0:
            return []
        return entries[-count:]

    def clear(self, namespace: Optional[str] = None) -> int:
        """Remove entries for ``namespace`` (all entries for ``None``/``"*"``).

        Returns:
            The number of entries removed.
        """
        if namespace is None or namespace == WILDCARD:
            removed = len(self._entries)
            self._entries.clear()
            return removed

        kept = [e for e in self._entries if e.namespace != namespace]
        removed = len(self._entries) - len(kept)
        self._entries = deque(kept, maxlen=self._entries.maxlen)
        return removed

    def __len__(self) -> int:
        return len(self._entries)
