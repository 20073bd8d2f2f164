"""context.py - Explicit callback scope tracking.

Stack heuristics can only guess whether a log call comes from a callback.
CallbackScope lets code say so outright: while the scope depth is above zero,
the resolver reports callback context no matter what the frames look like.

The depth is stored in a ``contextvars.ContextVar``, which isolates it across
threads and asyncio Tasks without explicit locking. A depth counter rather
than a flag keeps nested scopes correct.
"""

import contextvars
from contextlib import contextmanager
from typing import Iterator


class CallbackScope:
    """Thin facade over the module-level callback depth ContextVar.

    Multiple instances share the same ContextVar, so a scope entered through
    one instance is visible through every other one.

    Example:
        >>> scope = CallbackScope()
        >>> scope.is_active()
        False
        >>> with scope.active():
        ...     scope.is_active()
        True
    """

    _depth: contextvars.ContextVar[int] = contextvars.ContextVar(
        "prefixlog_callback_depth", default=0
    )

    def get_depth(self) -> int:
        return self._depth.get()

    def is_active(self) -> bool:
        return self._depth.get() > 0

    def enter(self) -> None:
        self._depth.set(self._depth.get() + 1)

    def exit(self) -> None:
        """Leave one scope level, clamped at zero."""
        current = self._depth.get()
        if current > 0:
            self._depth.set(current - 1)

    @contextmanager
    def active(self) -> Iterator[None]:
        self.enter()
        try:
            yield
        finally:
            self.exit()


_scope = CallbackScope()


def callback_scope():
    """Context manager marking log calls inside it as callback context."""
    return _scope.active()


def in_callback_scope() -> bool:
    return _scope.is_active()
