"""handler.py - Bridge from the standard ``logging`` module into prefixlog.

PrefixLogHandler lets code that already logs through ``logging.getLogger``
gain contextual prefixes and land in the exportable history, with one line
added to the existing setup::

    import logging
    from prefixlog import PrefixLogHandler, init_logger

    log = init_logger("my-app")
    logging.getLogger().addHandler(PrefixLogHandler(log))

Level mapping: ``>= ERROR`` to error, ``>= WARNING`` to warn, ``>= INFO`` to
info, everything else to debug. The PrefixLogger's own gate still applies, so
a disabled namespace only lets errors through.

Frames inside the ``logging`` package are skipped by the resolver, so the
prefix names the function that called ``logger.info(...)``, not the handler.

Records from prefixlog's own loggers (``prefixlog.*``, which includes the
default LoggingSink target) and records raised while a forward is already in
progress are dropped, so a handler on the root logger cannot feed its own
output back into itself.
"""

import contextvars
import logging

from .levels import Severity
from .logger import LogCall, PrefixLogger

INTERNAL_LOGGER = "prefixlog"

_forwarding: contextvars.ContextVar[bool] = contextvars.ContextVar("prefixlog_forwarding", default=False)


def _is_internal(name: str) -> bool:
    return name == INTERNAL_LOGGER or name.startswith(INTERNAL_LOGGER + ".")


class PrefixLogHandler(logging.Handler):
    """A logging.Handler that forwards records to a PrefixLogger.

    Thread-safety:
        ``logging.Handler.handle`` serialises calls to ``emit()`` with the
        handler lock.

    Attributes:
        logger (PrefixLogger): Destination of forwarded records.
    """

    def __init__(self, logger: PrefixLogger, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.logger = logger

    def emit(self, record: logging.LogRecord) -> None:
        """Forward one record; faults go to ``handleError``, never to the caller."""
        if _forwarding.get() or _is_internal(record.name):
            return
        token = _forwarding.set(True)
        try:
            severity = Severity.from_stdlib(record.levelno)
            if not self.logger.should_log(severity):
                return
            message = record.getMessage()
            if record.exc_info and record.exc_info[1] is not None:
                exc = record.exc_info[1]
                message = f"{message} ({type(exc).__name__}: {exc})"
            self.logger.log_call(severity, LogCall((message,)))
        except Exception:
            self.handleError(record)
        finally:
            _forwarding.reset(token)
