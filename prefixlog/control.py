"""control.py - Runtime control surface for prefixlog namespaces.

Operators (a REPL, a debug console, an admin endpoint) reconfigure logging
through a DebugRegistry without code changes::

    registry = get_debug_registry()
    registry.enable("my-app", "debug")
    registry.copy_logs("my-app", count=20, format="message-only")
    registry.clear_logs("*")

Each logger contributes one DebugController. Controllers installed into the
same registry form a chain: a controller answers for its own namespace (and
for the ``"*"`` wildcard) and forwards every other namespace to the
controller installed before it. Several independent hosts can therefore
share one registry without colliding.

Every operation returns a plain status value and never raises for operator
input.
"""

import logging
from typing import Any, List, Optional

from .buffer import WILDCARD
from .levels import Severity, SeverityLike
from .logger import PrefixLogger

_logger = logging.getLogger(__name__)


def _unknown_level(level: Any) -> str:
    names = ", ".join(s.label for s in Severity)
    return f'Unknown log level "{level}" (expected one of: {names})'


class DebugController:
    """Control operations for one PrefixLogger.

    Attributes:
        logger (PrefixLogger): The logger this controller reconfigures.
        fallback (Optional[DebugController]): Previously installed controller
            that receives namespaces this one does not own.
    """

    def __init__(self, logger: PrefixLogger, fallback: Optional["DebugController"] = None) -> None:
        self.logger = logger
        self.fallback = fallback

    @property
    def namespace(self) -> str:
        return self.logger.namespace

    def owns(self, ns: str) -> bool:
        return ns == self.namespace or ns == WILDCARD

    # ---------------------------------------------------------------------- #
    # Operations
    # ---------------------------------------------------------------------- #

    def enable(self, ns: str, level: SeverityLike = Severity.DEBUG) -> str:
        if not self.owns(ns):
            return self._forward("enable", ns, level)
        try:
            severity = Severity.parse(level)
        except ValueError:
            return _unknown_level(level)
        self.logger.state.enable(severity)
        self._broadcast("enable", ns, severity)
        return f'Debug enabled for "{ns}" at level: {severity.label.upper()}'

    def disable(self, ns: str) -> str:
        if not self.owns(ns):
            return self._forward("disable", ns)
        self.logger.state.disable()
        self._broadcast("disable", ns)
        return f'Debug disabled for "{ns}" (errors still visible)'

    def enabled(self, ns: str) -> bool:
        if not self.owns(ns):
            return self._forward("enabled", ns)
        return self.logger.state.enabled

    def set_level(self, ns: str, level: SeverityLike) -> str:
        if not self.owns(ns):
            return self._forward("set_level", ns, level)
        try:
            severity = Severity.parse(level)
        except ValueError:
            return _unknown_level(level)
        self.logger.state.set_level(severity)
        self._broadcast("set_level", ns, severity)
        return f'Log level set to {severity.label.upper()} for "{ns}"'

    def get_level(self, ns: str) -> Optional[str]:
        """Current level name, or None while logging is disabled."""
        if not self.owns(ns):
            return self._forward("get_level", ns)
        state = self.logger.state
        return state.current_level.label if state.enabled else None

    def copy_logs(self, ns: str, options: Optional[dict] = None, **kwargs: Any) -> str:
        if not self.owns(ns):
            return self._forward("copy_logs", ns, options, **kwargs)
        opts = dict(options or {})
        opts.update(kwargs)
        if "namespace" not in opts:
            opts["namespace"] = ns
        return self.logger.copy_logs(opts)

    def clear_logs(self, ns: str) -> str:
        if not self.owns(ns):
            return self._forward("clear_logs", ns)
        removed = self.logger.clear_logs(ns)
        self._broadcast("clear_logs", ns)
        scope = "all namespaces" if ns == WILDCARD else f'"{ns}"'
        return f"Cleared {removed} log entries for {scope}"

    # ---------------------------------------------------------------------- #
    # Private helpers
    # ---------------------------------------------------------------------- #

    def _forward(self, op: str, ns: str, *args: Any, **kwargs: Any) -> Any:
        if self.fallback is None:
            return _UNHANDLED[op](ns)
        return getattr(self.fallback, op)(ns, *args, **kwargs)

    def _broadcast(self, op: str, ns: str, *args: Any) -> None:
        # Wildcard changes reach every controller in the chain.
        if ns == WILDCARD and self.fallback is not None:
            getattr(self.fallback, op)(ns, *args)


_UNHANDLED = {
    "enable": lambda ns: f'No logger registered for namespace "{ns}"',
    "disable": lambda ns: f'No logger registered for namespace "{ns}"',
    "enabled": lambda ns: False,
    "set_level": lambda ns: f'No logger registered for namespace "{ns}"',
    "get_level": lambda ns: None,
    "copy_logs": lambda ns: f'No logger registered for namespace "{ns}"',
    "clear_logs": lambda ns: f'No logger registered for namespace "{ns}"',
}


class DebugRegistry:
    """Shared slot through which operators reach every installed controller.

    The registry holds the most recently installed controller; older ones
    are reached through each controller's ``fallback`` link.
    """

    def __init__(self) -> None:
        self._head: Optional[DebugController] = None

    def install(self, logger: PrefixLogger) -> DebugController:
        """Create and install a controller for ``logger``, chaining the previous one."""
        controller = DebugController(logger, fallback=self._head)
        self._head = controller
        _logger.debug("Installed debug controller for %r", logger.namespace)
        return controller

    def uninstall(self, controller: DebugController) -> bool:
        """Unlink ``controller`` from the chain. Returns False if not installed."""
        previous = None
        node = self._head
        while node is not None:
            if node is controller:
                if previous is None:
                    self._head = node.fallback
                else:
                    previous.fallback = node.fallback
                node.fallback = None
                return True
            previous, node = node, node.fallback
        return False

    def namespaces(self) -> List[str]:
        """Namespaces of installed controllers, newest first."""
        names = []
        node = self._head
        while node is not None:
            names.append(node.namespace)
            node = node.fallback
        return names

    def _call(self, op: str, ns: str, *args: Any, **kwargs: Any) -> Any:
        if self._head is None:
            return _UNHANDLED[op](ns)
        return getattr(self._head, op)(ns, *args, **kwargs)

    def enable(self, ns: str, level: SeverityLike = Severity.DEBUG) -> str:
        return self._call("enable", ns, level)

    def disable(self, ns: str) -> str:
        return self._call("disable", ns)

    def enabled(self, ns: str) -> bool:
        return self._call("enabled", ns)

    def set_level(self, ns: str, level: SeverityLike) -> str:
        return self._call("set_level", ns, level)

    def get_level(self, ns: str) -> Optional[str]:
        return self._call("get_level", ns)

    def copy_logs(self, ns: str, options: Optional[dict] = None, **kwargs: Any) -> str:
        return self._call("copy_logs", ns, options, **kwargs)

    def clear_logs(self, ns: str = WILDCARD) -> str:
        return self._call("clear_logs", ns)
