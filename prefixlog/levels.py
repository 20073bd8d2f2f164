"""levels.py - Severity ordering for prefixlog.

Severities are ordered by verbosity: a lower value is always more important.
``ERROR`` is emitted regardless of configuration; everything else is compared
against the current level of the owning logger.
"""

import logging
from enum import IntEnum
from typing import Union


class Severity(IntEnum):
    """Ordered log severities. Lower value = always shown, higher = more verbose."""

    ERROR = 0
    WARN = 1
    INFO = 2
    DEBUG = 3

    @property
    def label(self) -> str:
        """Lower-case name used by the control surface (``"warn"``)."""
        return self.name.lower()

    @property
    def stdlib_level(self) -> int:
        """Equivalent ``logging`` level constant."""
        return _TO_STDLIB[self]

    @classmethod
    def parse(cls, value: "SeverityLike") -> "Severity":
        """Coerce a name, number or Severity into a Severity.

        Accepts ``"warning"`` as an alias of ``"warn"``.

        Raises:
            ValueError: If ``value`` does not name a known severity.
        """
        if isinstance(value, Severity):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key == "warning":
                key = "warn"
            for member in cls:
                if member.label == key:
                    return member
            raise ValueError(f"Unknown log level {value!r}")
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass
        raise ValueError(f"Unknown log level {value!r}")

    @classmethod
    def from_stdlib(cls, levelno: int) -> "Severity":
        """Map a ``logging`` level number onto the closest Severity."""
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARN
        if levelno >= logging.INFO:
            return cls.INFO
        return cls.DEBUG


SeverityLike = Union[Severity, str, int]

_TO_STDLIB = {
    Severity.ERROR: logging.ERROR,
    Severity.WARN: logging.WARNING,
    Severity.INFO: logging.INFO,
    Severity.DEBUG: logging.DEBUG,
}
