"""state.py - In-memory configuration container for one prefixlog instance.

LoggerState is plain guarded storage: enablement, the current and default
severity, colours, the two prefix templates and the namespace. It has no
persistence; a fresh process always starts from the defaults below, optionally
adjusted once from the ``PREFIXLOG_DEBUG`` environment variable.

Namespace resolution:
    An explicit override wins, then the host identity supplied at
    initialisation, then ``DEFAULT_NAMESPACE``.
"""

import os
from typing import Dict, Mapping, Optional

from .levels import Severity, SeverityLike

DEFAULT_NAMESPACE = "app"
ENV_VAR = "PREFIXLOG_DEBUG"

DEFAULT_COLORS: Dict[Severity, str] = {
    Severity.DEBUG: "#7B68EE",
    Severity.INFO: "#4169E1",
    Severity.WARN: "#FF8C00",
    Severity.ERROR: "#DC143C",
}
DEFAULT_MESSAGE_COLOR = "#FFFFFF"
DEFAULT_FORMAT_TEMPLATE = "[{namespace}] {class}.{method}: {message}"
DEFAULT_CALLBACK_TEMPLATE = "[{namespace}] {class} (callback): {message}"

_TRUTHY = ("1", "true", "yes", "on")


class LoggerState:
    """Mutable configuration for one logging namespace.

    Attributes:
        enabled (bool): Whether non-error severities may be emitted at all.
        current_level (Severity): Most verbose severity currently emitted.
        default_level (Severity): Level restored when logging is disabled.
        host_identity (Optional[str]): Substring identifying the host's own
            source files; used by the resolver to tell host inline frames
            (lambdas, exec'd code) apart from foreign ones.
    """

    def __init__(
        self,
        namespace: Optional[str] = None,
        host_identity: Optional[str] = None,
    ) -> None:
        self._global_namespace = namespace or None
        self._namespace_override: Optional[str] = None
        self.host_identity = host_identity
        self.enabled = False
        self.default_level = Severity.ERROR
        self.current_level = Severity.ERROR
        self._colors: Dict[Severity, str] = dict(DEFAULT_COLORS)
        self._message_color = DEFAULT_MESSAGE_COLOR
        self._format_template = DEFAULT_FORMAT_TEMPLATE
        self._callback_template = DEFAULT_CALLBACK_TEMPLATE

    # ---------------------------------------------------------------------- #
    # Namespace
    # ---------------------------------------------------------------------- #

    @property
    def namespace(self) -> str:
        if self._namespace_override:
            return self._namespace_override
        return self._global_namespace or DEFAULT_NAMESPACE

    def set_namespace(self, namespace: Optional[str]) -> None:
        """Set the host-supplied namespace (normally once, at start-up)."""
        self._global_namespace = namespace or None

    def set_namespace_override(self, namespace: Optional[str]) -> None:
        """Override the namespace at runtime; ``None`` removes the override."""
        self._namespace_override = namespace or None

    def set_host_identity(self, identity: Optional[str]) -> None:
        self.host_identity = identity or None

    # ---------------------------------------------------------------------- #
    # Levels
    # ---------------------------------------------------------------------- #

    def enable(self, level: SeverityLike = Severity.DEBUG) -> None:
        self.enabled = True
        self.current_level = Severity.parse(level)

    def disable(self) -> None:
        """Disable logging; errors remain visible."""
        self.enabled = False
        self.current_level = Severity.ERROR

    def set_level(self, level: SeverityLike) -> None:
        """Set the current level, enabling logging for anything above error."""
        severity = Severity.parse(level)
        self.current_level = severity
        if not self.enabled and severity is not Severity.ERROR:
            self.enabled = True

    def set_default_level(self, level: SeverityLike) -> None:
        """Set the default level; while disabled it also becomes current."""
        self.default_level = Severity.parse(level)
        if not self.enabled:
            self.current_level = self.default_level

    def should_log(self, level: SeverityLike) -> bool:
        severity = Severity.parse(level)
        if severity is Severity.ERROR:
            return True
        if not self.enabled:
            return False
        return severity <= self.current_level

    # ---------------------------------------------------------------------- #
    # Presentation
    # ---------------------------------------------------------------------- #

    def set_colors(self, colors: Mapping[SeverityLike, str]) -> None:
        """Merge per-severity colours into the current map."""
        for level, color in colors.items():
            self._colors[Severity.parse(level)] = color

    def get_colors(self) -> Dict[Severity, str]:
        return dict(self._colors)

    def color_for(self, level: SeverityLike) -> str:
        return self._colors[Severity.parse(level)]

    @property
    def message_color(self) -> str:
        return self._message_color

    def set_message_color(self, color: str) -> None:
        self._message_color = color

    @property
    def format_template(self) -> str:
        return self._format_template

    def set_format_template(self, template: str) -> None:
        self._format_template = template

    @property
    def callback_template(self) -> str:
        return self._callback_template

    def set_callback_format_template(self, template: str) -> None:
        self._callback_template = template

    # ---------------------------------------------------------------------- #
    # Environment bootstrap
    # ---------------------------------------------------------------------- #

    def apply_environment(self, environ: Optional[Mapping[str, str]] = None) -> bool:
        """Enable logging from ``PREFIXLOG_DEBUG`` if it names this namespace.

        The variable holds a comma-separated list of ``namespace[:level]``
        items. ``*`` matches every namespace and ``1``/``true`` mean "the
        current namespace". Unknown level names fall back to ``debug``.

        Returns:
            True if the environment enabled logging for this namespace.
        """
        if environ is None:
            environ = os.environ
        raw = environ.get(ENV_VAR, "").strip()
        if not raw:
            return False

        for item in raw.split(","):
            name, _, level = item.strip().partition(":")
            name = name.strip()
            if not name:
                continue
            if name == "*" or name == self.namespace or name.lower() in _TRUTHY:
                try:
                    severity = Severity.parse(level) if level.strip() else Severity.DEBUG
                except ValueError:
                    severity = Severity.DEBUG
                self.enable(severity)
                return True
        return False
