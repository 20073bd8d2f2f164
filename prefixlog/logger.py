"""logger.py - Public logging entry points for one prefixlog namespace.

PrefixLogger ties the pieces together for every accepted call:

    severity gate -> caller resolution -> prefix formatting
        -> history append -> styled console write

Calls can be made two ways:

    Variadic, with the leading arguments sniffed at runtime::

        log.debug("message")                      # plain
        log.debug(self, "message")                # context instance
        log.debug("Loader", "message text")       # component override
        log.debug("Loader", "load", "message")    # component + method

    Explicit, with nothing inferred from argument shapes::

        log.log_with_component("debug", "Loader", "message", method="load")
        log.log_with_instance("info", self, "message")
        log.bind(instance=self).warn("message")

Logging never raises into the host: a fault while building the prefix
degrades to the bare message, and a failing console sink is reported through
the stdlib ``logging`` module.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple

from .buffer import LogEntry, LogHistory
from .exporter import HistoryExporter
from .formatter import PrefixFormatter
from .levels import Severity, SeverityLike
from .registry import ClassRegistry, get_class_registry
from .serialize import is_scalar, safe_repr
from .sinks import ClipboardSink, ConsoleSink, RichConsoleSink, build_line
from .state import LoggerState

_logger = logging.getLogger(__name__)

# Built-in containers are message content, never a context instance.
_CONTAINER_TYPES = (list, tuple, dict, set, frozenset)


@dataclass(frozen=True)
class LogCall:
    """One log call with its context made explicit.

    Attributes:
        parts: Message arguments, converted to text at dispatch.
        component: Component (class) name override.
        instance: Context instance whose registered name is the class.
        method: Explicit method name; bypasses stack inspection.
    """

    parts: Tuple[Any, ...] = ()
    component: Optional[str] = None
    instance: Any = None
    method: Optional[str] = None


def _is_component_name(value: Any) -> bool:
    return isinstance(value, str) and bool(value) and not any(c.isspace() for c in value)


def parse_log_args(args: Sequence[Any]) -> LogCall:
    """Turn variadic logging arguments into a LogCall.

    With more than one argument, a leading whitespace-free string is a
    component override and a leading non-scalar object is a context
    instance. After a component, an identifier-shaped string is taken as
    the method name.
    """
    args = tuple(args)
    component = None
    instance = None
    parts = args

    if len(args) > 1:
        first = args[0]
        if _is_component_name(first):
            component, parts = first, args[1:]
        elif not is_scalar(first) and not isinstance(first, _CONTAINER_TYPES):
            instance, parts = first, args[1:]

    method = None
    if component and parts and isinstance(parts[0], str) and parts[0].isidentifier():
        method, parts = parts[0], parts[1:]

    return LogCall(parts, component, instance, method)


class PrefixLogger:
    """Contextual logger bound to one namespace.

    Attributes:
        state (LoggerState): Enablement, levels, colours and templates.
        registry (ClassRegistry): Display names for context instances.
        history (LogHistory): Bounded store of accepted calls.
        console (ConsoleSink): Destination of styled lines.
        formatter (PrefixFormatter): Prefix builder.
        exporter (HistoryExporter): Clipboard export of history.

    Example:
        >>> log = PrefixLogger("my-app")
        >>> log.state.enable("debug")
        >>> log.info("ready")   # "[my-app] <Class>.<method>: ready"
    """

    def __init__(
        self,
        namespace: Optional[str] = None,
        *,
        state: Optional[LoggerState] = None,
        registry: Optional[ClassRegistry] = None,
        history: Optional[LogHistory] = None,
        console: Optional[ConsoleSink] = None,
        clipboard: Optional[ClipboardSink] = None,
        host_identity: Optional[str] = None,
    ) -> None:
        self.state = state if state is not None else LoggerState(namespace, host_identity)
        self.registry = registry if registry is not None else get_class_registry()
        self.history = history if history is not None else LogHistory()
        self.console = console if console is not None else RichConsoleSink()
        self.formatter = PrefixFormatter(self.state, self.registry)
        self.exporter = HistoryExporter(self.history, self.state, clipboard)

    @property
    def namespace(self) -> str:
        return self.state.namespace

    def should_log(self, level: SeverityLike) -> bool:
        return self.state.should_log(level)

    # ---------------------------------------------------------------------- #
    # Variadic entry points
    # ---------------------------------------------------------------------- #

    def emit(self, level: SeverityLike, *args: Any) -> None:
        severity = Severity.parse(level)
        if not self.state.should_log(severity):
            return
        self._dispatch(severity, parse_log_args(args))

    def error(self, *args: Any) -> None:
        self.emit(Severity.ERROR, *args)

    def warn(self, *args: Any) -> None:
        self.emit(Severity.WARN, *args)

    warning = warn

    def info(self, *args: Any) -> None:
        self.emit(Severity.INFO, *args)

    def debug(self, *args: Any) -> None:
        self.emit(Severity.DEBUG, *args)

    # ---------------------------------------------------------------------- #
    # Explicit entry points
    # ---------------------------------------------------------------------- #

    def log_plain(self, level: SeverityLike, *parts: Any) -> None:
        self.log_call(level, LogCall(parts))

    def log_with_component(
        self, level: SeverityLike, component: str, *parts: Any, method: Optional[str] = None
    ) -> None:
        self.log_call(level, LogCall(parts, component=component, method=method))

    def log_with_instance(self, level: SeverityLike, instance: Any, *parts: Any) -> None:
        self.log_call(level, LogCall(parts, instance=instance))

    def log_call(self, level: SeverityLike, call: LogCall) -> None:
        severity = Severity.parse(level)
        if not self.state.should_log(severity):
            return
        self._dispatch(severity, call)

    def bind(
        self,
        component: Optional[str] = None,
        instance: Any = None,
        method: Optional[str] = None,
    ) -> "BoundLogger":
        """Return a logger that adds the given context to every call."""
        return BoundLogger(self, component=component, instance=instance, method=method)

    # ---------------------------------------------------------------------- #
    # Registry and history helpers
    # ---------------------------------------------------------------------- #

    def register(self, instance: Any, display_name: str) -> None:
        self.registry.register(instance, display_name)

    def copy_logs(self, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> str:
        return self.exporter.copy(options, **kwargs)

    def clear_logs(self, namespace: Optional[str] = None) -> int:
        return self.history.clear(namespace)

    # ---------------------------------------------------------------------- #
    # Private helpers
    # ---------------------------------------------------------------------- #

    def _dispatch(self, level: Severity, call: LogCall) -> None:
        message = self._message_text(call.parts)
        class_name = method_name = None
        try:
            if call.method:
                component = call.component or self._instance_name(call.instance)
                resolved = self.formatter.resolve(component, call.method)
            else:
                resolved = self.formatter.resolve(call.component, call.instance)
            prefix = self.formatter.render(resolved)
            class_name, method_name = resolved.class_name, resolved.method_name
        except Exception:
            _logger.debug("Prefix formatting failed; logging bare message", exc_info=True)
            prefix = ""

        formatted = " ".join(s for s in (prefix, message) if s)
        self.history.push(
            LogEntry(
                level,
                self.state.namespace,
                message,
                formatted,
                class_name=class_name,
                method_name=method_name,
                raw_args=call.parts,
            )
        )

        try:
            line = build_line(
                prefix,
                message,
                f"bold {self.state.color_for(level)}",
                self.state.message_color,
            )
            self.console.write(level, line)
        except Exception:
            _logger.warning("Console sink failed to write a %s line", level.label, exc_info=True)

    def _message_text(self, parts: Sequence[Any]) -> str:
        return " ".join(
            str(p) if is_scalar(p) else safe_repr(p, self.registry) for p in parts
        )

    def _instance_name(self, instance: Any) -> Optional[str]:
        if instance is None:
            return None
        return self.registry.resolve(instance) or type(instance).__name__


class BoundLogger:
    """Severity methods that log with a fixed component/instance/method.

    Example:
        >>> log = PrefixLogger("my-app").bind(component="Loader", method="load")
        >>> log.info("3 files")   # "[my-app] Loader.load: 3 files"
    """

    def __init__(
        self,
        logger: PrefixLogger,
        component: Optional[str] = None,
        instance: Any = None,
        method: Optional[str] = None,
    ) -> None:
        self._logger = logger
        self._component = component
        self._instance = instance
        self._method = method

    def log(self, level: SeverityLike, *parts: Any) -> None:
        self._logger.log_call(
            level,
            LogCall(parts, component=self._component, instance=self._instance, method=self._method),
        )

    def error(self, *parts: Any) -> None:
        self.log(Severity.ERROR, *parts)

    def warn(self, *parts: Any) -> None:
        self.log(Severity.WARN, *parts)

    warning = warn

    def info(self, *parts: Any) -> None:
        self.log(Severity.INFO, *parts)

    def debug(self, *parts: Any) -> None:
        self.log(Severity.DEBUG, *parts)
