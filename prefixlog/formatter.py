"""formatter.py - Render a caller context into a display prefix.

The formatter combines caller-supplied overrides, the class registry and the
stack-derived CallerContext into a class and method name, then substitutes
them into one of two templates:

    direct template    ``[{namespace}] {class}.{method}: {message}``
    callback template  ``[{namespace}] {class} (callback): {message}``

Resolution precedence, highest first:
    1. Component and method given as strings: used verbatim, no stack capture.
    2. Context instance: class from the registry (stack class only when the
       instance is unregistered); method from the stack unless the call was
       classified as a callback.
    3. Component string only: class = component, method from the stack.
    4. Nothing: class and method both from the stack.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .registry import ClassRegistry
from .stack import CallerContext, capture_caller, has_callback_name
from .state import LoggerState

PLACEHOLDER = re.compile(r"\{(namespace|class|method|message)\}")
_MULTISPACE = re.compile(r"\s{2,}")


@dataclass(frozen=True)
class ResolvedPrefix:
    """Names chosen for one log call, plus the template choice."""

    class_name: Optional[str]
    method_name: Optional[str]
    is_callback: bool


def apply_template(template: str, values: Dict[str, Optional[str]]) -> str:
    """Substitute placeholders in a single pass and normalise whitespace.

    Substituted text is never rescanned, so a class name that happens to
    contain ``{message}`` is left alone. Absent values become empty strings
    and unknown placeholders are kept literally.
    """

    def _sub(m: "re.Match[str]") -> str:
        key = m.group(1)
        if key not in values:
            return m.group(0)
        return values[key] or ""

    return _MULTISPACE.sub(" ", PLACEHOLDER.sub(_sub, template)).strip()


class PrefixFormatter:
    """Builds log prefixes for one LoggerState.

    Attributes:
        state (LoggerState): Supplies namespace, templates and host identity.
        registry (ClassRegistry): Display names that override stack names.
    """

    def __init__(
        self,
        state: LoggerState,
        registry: ClassRegistry,
        resolver: Optional[Callable[..., CallerContext]] = None,
    ) -> None:
        self.state = state
        self.registry = registry
        self._resolver = resolver or capture_caller

    # ---------------------------------------------------------------------- #
    # Public interface
    # ---------------------------------------------------------------------- #

    def format_with_message(
        self,
        component: Optional[str] = None,
        target: Any = None,
        message: Optional[str] = None,
        caller: Optional[CallerContext] = None,
    ) -> str:
        """Render the full line: prefix with ``{message}`` substituted.

        Args:
            component: Component (class) name override.
            target: A context instance, or a method name string when
                ``component`` is also given (static call sites).
            message: Message text for the ``{message}`` placeholder.
            caller: Pre-resolved caller context; captured from the stack
                when omitted and needed.
        """
        resolved = self.resolve(component, target, caller)
        return self.render(resolved, message or "")

    def format_prefix_only(
        self,
        component: Optional[str] = None,
        target: Any = None,
        caller: Optional[CallerContext] = None,
    ) -> str:
        """Render the prefix alone, with ``{message}`` substituted as empty."""
        resolved = self.resolve(component, target, caller)
        return self.render(resolved, None)

    def render(self, resolved: ResolvedPrefix, message: Optional[str] = None) -> str:
        template = self.state.callback_template if resolved.is_callback else self.state.format_template
        return apply_template(
            template,
            {
                "namespace": self.state.namespace,
                "class": resolved.class_name,
                "method": resolved.method_name,
                "message": message,
            },
        )

    def resolve(
        self,
        component: Optional[str] = None,
        target: Any = None,
        caller: Optional[CallerContext] = None,
    ) -> ResolvedPrefix:
        """Pick class and method names according to the precedence rules."""
        if component and isinstance(target, str):
            return self._finish(component, target, False)

        if caller is None:
            caller = self._resolver(self.state.host_identity)

        if isinstance(target, str):
            # Method override without a component: keep the stack's class.
            return self._finish(caller.class_name, target or caller.method_name, caller.is_callback)

        if target is not None:
            class_name = self.registry.resolve(target) or caller.class_name
            if class_name is None:
                class_name = type(target).__name__
            method_name = None if caller.is_callback else caller.method_name
        elif component:
            class_name = component
            method_name = caller.method_name
        else:
            class_name = caller.class_name
            method_name = caller.method_name

        return self._finish(class_name, method_name, caller.is_callback)

    # ---------------------------------------------------------------------- #
    # Private helpers
    # ---------------------------------------------------------------------- #

    @staticmethod
    def _finish(
        class_name: Optional[str],
        method_name: Optional[str],
        is_callback: bool,
    ) -> ResolvedPrefix:
        # "Outer.method" given as a component: split it like a qualified frame.
        if class_name and not method_name and "." in class_name:
            class_name, method_name = class_name.rsplit(".", 1)
        if has_callback_name(None, method_name):
            is_callback = True
        return ResolvedPrefix(class_name or None, method_name or None, is_callback)
