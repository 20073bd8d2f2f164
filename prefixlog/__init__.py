"""prefixlog/__init__.py - Public API for the prefixlog package.

prefixlog is a contextual diagnostic logger. Every line is prefixed with the
namespace, class and method that made the call, recovered from the call
stack (or from registered display names), and the most recent lines are kept
in a bounded history that developer tooling can export to the clipboard.

Quick start:
    import prefixlog

    # 1. Initialise once at start-up with the host's identity
    log = prefixlog.init_logger("my-app", host_identity="my_app/")

    # 2. Log; errors always show, other levels once enabled
    class Worker:
        def run(self):
            prefixlog.debug(self, "starting")   # [my-app] Worker.run: starting

    # 3. Name classes explicitly where stack names are unreliable
    prefixlog.register_logger_class(worker, "Worker")

    # 4. Reconfigure at runtime through the control surface
    prefixlog.get_debug_registry().enable("my-app", "debug")
    prefixlog.copy_logs(count=20, format="message-only")

    # 5. Tear down (tests, plugin unload)
    prefixlog.shutdown_logger()

Before ``init_logger()`` the module-level functions log through a fallback
logger with namespace ``"app"`` and no control surface.
"""

from typing import Any, Mapping, Optional

from .buffer import LogEntry, LogHistory
from .context import callback_scope
from .control import DebugController, DebugRegistry
from .exporter import ExportFormat, ExportOptions, HistoryExporter, simplify_paths
from .formatter import PrefixFormatter
from .handler import PrefixLogHandler
from .instrument import as_callback, display_name
from .levels import Severity
from .logger import BoundLogger, LogCall, PrefixLogger
from .registry import ClassRegistry, get_class_registry
from .serialize import safe_repr
from .sinks import ClipboardSink, ConsoleSink, LoggingSink, RichConsoleSink, TkClipboard
from .stack import CallerContext, capture_caller, resolve_trace
from .state import LoggerState

__all__ = [
    "BoundLogger",
    "CallerContext",
    "ClassRegistry",
    "ClipboardSink",
    "ConsoleSink",
    "DebugController",
    "DebugRegistry",
    "ExportFormat",
    "ExportOptions",
    "HistoryExporter",
    "LogCall",
    "LogEntry",
    "LogHistory",
    "LoggerState",
    "LoggingSink",
    "PrefixFormatter",
    "PrefixLogHandler",
    "PrefixLogger",
    "RichConsoleSink",
    "Severity",
    "TkClipboard",
    "as_callback",
    "callback_scope",
    "capture_caller",
    "clear_logs",
    "copy_logs",
    "debug",
    "display_name",
    "error",
    "get_class_registry",
    "get_debug_registry",
    "get_logger",
    "info",
    "init_logger",
    "register_logger_class",
    "resolve_trace",
    "safe_repr",
    "set_callback_format_template",
    "set_colors",
    "set_default_level",
    "set_format_template",
    "set_message_color",
    "set_namespace_override",
    "shutdown_logger",
    "simplify_paths",
    "warn",
]
__version__ = "0.1.0"

_default_logger: Optional[PrefixLogger] = None
_default_controller: Optional[DebugController] = None
_installed_in: Optional[DebugRegistry] = None
_debug_registry = DebugRegistry()


# ---------------------------------------------------------------------------
# Process default: explicit initialisation and teardown
# ---------------------------------------------------------------------------


def init_logger(
    namespace: str,
    *,
    host_identity: Optional[str] = None,
    registry: Optional[DebugRegistry] = None,
    environ: Optional[Mapping[str, str]] = None,
    **logger_kwargs: Any,
) -> PrefixLogger:
    """Create the process-default logger and install its control surface.

    Calling it again replaces the previous default (which is uninstalled).

    Args:
        namespace: The host's identity string.
        host_identity: Substring of the host's source paths, used to keep
            the host's own lambdas and exec'd code when resolving callers.
        registry: Control registry to install into; defaults to the one
            returned by ``get_debug_registry()``.
        environ: Environment mapping for ``PREFIXLOG_DEBUG``; defaults to
            ``os.environ``.
        **logger_kwargs: Passed to PrefixLogger (``console``, ``clipboard``,
            ``history``, ...).
    """
    global _default_logger, _default_controller, _installed_in
    shutdown_logger()

    logger = PrefixLogger(namespace, host_identity=host_identity, **logger_kwargs)
    logger.state.apply_environment(environ)
    _installed_in = registry if registry is not None else _debug_registry
    _default_controller = _installed_in.install(logger)
    _default_logger = logger
    return logger


def shutdown_logger() -> None:
    """Uninstall the default logger's control surface and forget it."""
    global _default_logger, _default_controller, _installed_in
    if _default_controller is not None and _installed_in is not None:
        _installed_in.uninstall(_default_controller)
    _default_logger = None
    _default_controller = None
    _installed_in = None


def get_logger() -> PrefixLogger:
    """Return the default logger, creating the fallback one if needed."""
    global _default_logger
    if _default_logger is None:
        _default_logger = PrefixLogger()
    return _default_logger


def get_debug_registry() -> DebugRegistry:
    return _debug_registry


# ---------------------------------------------------------------------------
# Module-level shortcuts on the default logger
# ---------------------------------------------------------------------------


def error(*args: Any) -> None:
    get_logger().error(*args)


def warn(*args: Any) -> None:
    get_logger().warn(*args)


def info(*args: Any) -> None:
    get_logger().info(*args)


def debug(*args: Any) -> None:
    get_logger().debug(*args)


def register_logger_class(instance: Any, name: str) -> None:
    get_logger().register(instance, name)


def copy_logs(options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> str:
    return get_logger().copy_logs(options, **kwargs)


def clear_logs(namespace: Optional[str] = None) -> int:
    return get_logger().clear_logs(namespace)


def set_namespace_override(namespace: Optional[str]) -> None:
    get_logger().state.set_namespace_override(namespace)


def set_colors(colors: Mapping[Any, str]) -> None:
    get_logger().state.set_colors(colors)


def set_message_color(color: str) -> None:
    get_logger().state.set_message_color(color)


def set_format_template(template: str) -> None:
    get_logger().state.set_format_template(template)


def set_callback_format_template(template: str) -> None:
    get_logger().state.set_callback_format_template(template)


def set_default_level(level: Any) -> None:
    get_logger().state.set_default_level(level)
