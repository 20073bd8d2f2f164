"""exporter.py - Reformat buffered history for developer tooling.

HistoryExporter selects recent entries from a LogHistory, rewrites them in one
of four formats, optionally collapses filesystem paths, and hands the text to
a ClipboardSink. Export never raises for operator input: an empty selection or
a missing custom template yields a descriptive status string instead.

Formats:
    ``full``          ``2024-01-15 12:34:56.789 [INFO] [my-app] Worker.run: msg``
    ``prefix-only``   ``[my-app] Worker.run``
    ``message-only``  ``msg``
    ``custom``        caller template with ``{timestamp}``, ``{level}``,
                      ``{namespace}``, ``{class}``, ``{method}``, ``{message}``

Typical usage::

    exporter = HistoryExporter(history, state, clipboard=TkClipboard())
    exporter.copy(count=20, strip_timestamp=True)
"""

import logging
import re
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .buffer import WILDCARD, LogEntry, LogHistory
from .sinks import ClipboardSink, TkClipboard
from .state import LoggerState

_logger = logging.getLogger(__name__)

DEFAULT_COUNT = 50


class ExportFormat(str, Enum):
    FULL = "full"
    PREFIX_ONLY = "prefix-only"
    MESSAGE_ONLY = "message-only"
    CUSTOM = "custom"


@dataclass
class ExportOptions:
    """Selection and rewriting options for one export.

    Attributes:
        namespace: Namespace to export; ``None`` means the current one and
            ``"*"`` means every namespace.
        count: Number of most recent matching entries to export.
        strip_*: Suppress the corresponding field in the output.
        simplify_paths: Collapse embedded paths to ``.../<parent>/<file>``.
        format: One of ExportFormat (or its string value).
        custom_template: Per-entry template, required for ``custom``.
    """

    namespace: Optional[str] = None
    count: int = DEFAULT_COUNT
    strip_namespace: bool = False
    strip_class: bool = False
    strip_method: bool = False
    strip_timestamp: bool = False
    strip_log_level: bool = False
    simplify_paths: bool = True
    format: ExportFormat = ExportFormat.FULL
    custom_template: Optional[str] = None

    def __post_init__(self) -> None:
        self.format = ExportFormat(self.format)
        self.count = _coerce_count(self.count)

    @classmethod
    def build(cls, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "ExportOptions":
        """Build options from a mapping and/or keywords.

        Keys may be snake_case or camelCase (``stripLogLevel``), so options
        typed by an operator in tooling map directly.

        Raises:
            TypeError: On an unknown option name.
            ValueError: On an unknown format.
        """
        if isinstance(options, ExportOptions):
            if not kwargs:
                return options
            options = {f.name: getattr(options, f.name) for f in fields(options)}
        known = {f.name for f in fields(cls)}
        merged: Dict[str, Any] = {}
        for key, value in {**dict(options or {}), **kwargs}.items():
            name = _snake_case(key)
            if name not in known:
                raise TypeError(f"Unknown export option {key!r}")
            merged[name] = value
        return cls(**merged)


def _snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _coerce_count(value: Any) -> int:
    """Accept ints and integer strings (``"5"`` typed at a console).

    Raises:
        TypeError: For booleans and non-numeric types.
        ValueError: For strings that are not integers.
    """
    if isinstance(value, bool):
        raise TypeError(f"count must be an integer, got {value!r}")
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise ValueError(f"count must be an integer, got {value!r}") from None
    if not isinstance(value, int):
        raise TypeError(f"count must be an integer, got {value!r}")
    return value


# ---------------------------------------------------------------------------
# Path simplification
# ---------------------------------------------------------------------------

_WIN_SEG = r"[^\\/\s\"'<>|:*?()\[\]{},;]+"
_POSIX_SEG = r"[^/\s\"'<>|:*?()\[\]{},;]+"

# Applied in order; each grammar is matched and replaced independently.
PATH_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("escaped_windows", re.compile(r"(?<![\w.])[A-Za-z]:(?:\\\\" + _WIN_SEG + r")+")),
    ("windows", re.compile(
        r"(?<![\w.\\/])(?:[A-Za-z]:(?:[\\/]" + _WIN_SEG + r")+|\\\\" + _WIN_SEG + r"(?:\\" + _WIN_SEG + r")+)"
    )),
    ("posix", re.compile(r"(?<![\w.:/~\\-])(?:/" + _POSIX_SEG + r")+")),
    ("relative", re.compile(r"(?<![\w./\\-])\.{1,2}(?:/" + _POSIX_SEG + r")+")),
)

_DRIVE = re.compile(r"[A-Za-z]:")
_SPLIT = re.compile(r"[\\/]+")


def _collapse(m: "re.Match[str]") -> str:
    path = m.group(0)
    segments = [
        s for s in _SPLIT.split(path) if s and s not in (".", "..") and not _DRIVE.fullmatch(s)
    ]
    if len(segments) < 2:
        return path
    return ".../" + "/".join(segments[-2:])


def simplify_paths(text: str) -> str:
    """Collapse every embedded filesystem path to its last two segments.

    Handles escaped Windows paths (``C:\\\\a\\\\b.py`` as they appear in
    reprs), raw Windows and UNC paths, POSIX absolute paths and ``./`` or
    ``../`` relative paths. Paths with fewer than two segments are kept.

        >>> simplify_paths("failed at /home/user/project/src/file.ts")
        'failed at .../src/file.ts'
    """
    for _name, pattern in PATH_PATTERNS:
        text = pattern.sub(_collapse, text)
    return text


# ---------------------------------------------------------------------------
# Exporter
# ---------------------------------------------------------------------------

TIMESTAMP_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2}(?:[.,]\d+)?(?:Z|[+-]\d{2}:?\d{2})?\s*"
)
LEVEL_TAG_RE = re.compile(r"^\[(?:ERROR|WARN|WARNING|INFO|DEBUG)\]\s*", re.IGNORECASE)
BRACKET_TAG_RE = re.compile(r"^\[[^\]]*\]\s*")
_CUSTOM_PLACEHOLDER = re.compile(r"\{(timestamp|level|namespace|class|method|message)\}")
_MULTISPACE = re.compile(r"[ \t]{2,}")
_NAME_START = r"(?<![\w.])"
_NAME_END = r"(?![\w])"


def format_timestamp(entry: LogEntry) -> str:
    return entry.timestamp.isoformat(sep=" ", timespec="milliseconds")


class HistoryExporter:
    """Select, rewrite and copy history entries.

    Attributes:
        history (LogHistory): Source of entries.
        state (LoggerState): Supplies the current namespace default.
        clipboard (ClipboardSink): Receives the exported text.
    """

    def __init__(
        self,
        history: LogHistory,
        state: LoggerState,
        clipboard: Optional[ClipboardSink] = None,
    ) -> None:
        self.history = history
        self.state = state
        self.clipboard = clipboard or TkClipboard()

    # ---------------------------------------------------------------------- #
    # Public interface
    # ---------------------------------------------------------------------- #

    def select(self, options: ExportOptions) -> List[LogEntry]:
        namespace = options.namespace or self.state.namespace
        return self.history.select(namespace, options.count)

    def render(self, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> str:
        """Return the export text for the selected entries (no clipboard).

        Raises:
            ValueError: If the custom format is requested without a template.
        """
        opts = ExportOptions.build(options, **kwargs)
        if opts.format is ExportFormat.CUSTOM and not opts.custom_template:
            raise ValueError("custom export format requires custom_template")
        return self._render_entries(self.select(opts), opts)

    def copy(self, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> str:
        """Export selected entries to the clipboard and return a status line."""
        try:
            opts = ExportOptions.build(options, **kwargs)
        except (TypeError, ValueError) as exc:
            return f"Invalid export options: {exc}"

        namespace = opts.namespace or self.state.namespace
        entries = self.select(opts)
        if not entries:
            return f'No logs found for namespace "{namespace}"'
        if opts.format is ExportFormat.CUSTOM and not opts.custom_template:
            return "Custom format requires a custom template (custom_template)"

        text = self._render_entries(entries, opts)
        try:
            self.clipboard.write_text(text)
        except Exception as exc:
            _logger.warning("Failed to copy logs to clipboard: %s", exc)
        return f"Copied {len(entries)} log entries ({len(text)} characters) to clipboard"

    # ---------------------------------------------------------------------- #
    # Private helpers
    # ---------------------------------------------------------------------- #

    def _render_entries(self, entries: List[LogEntry], opts: ExportOptions) -> str:
        render = {
            ExportFormat.FULL: self._full,
            ExportFormat.PREFIX_ONLY: self._prefix_only,
            ExportFormat.MESSAGE_ONLY: self._message_only,
            ExportFormat.CUSTOM: self._custom,
        }[opts.format]
        text = "\n".join(render(entry, opts) for entry in entries)
        if opts.simplify_paths:
            text = simplify_paths(text)
        return text

    @staticmethod
    def _message_only(entry: LogEntry, opts: ExportOptions) -> str:
        return entry.message

    @staticmethod
    def _prefix_only(entry: LogEntry, opts: ExportOptions) -> str:
        parts = []
        if not opts.strip_namespace:
            parts.append(f"[{entry.namespace}]")
        names = [
            name
            for name, stripped in (
                (entry.class_name, opts.strip_class),
                (entry.method_name, opts.strip_method),
            )
            if name and not stripped
        ]
        if names:
            parts.append(".".join(names))
        return " ".join(parts)

    @staticmethod
    def _custom(entry: LogEntry, opts: ExportOptions) -> str:
        values = {
            "timestamp": "" if opts.strip_timestamp else format_timestamp(entry),
            "level": "" if opts.strip_log_level else entry.level.label.upper(),
            "namespace": "" if opts.strip_namespace else entry.namespace,
            "class": "" if opts.strip_class else (entry.class_name or ""),
            "method": "" if opts.strip_method else (entry.method_name or ""),
            "message": entry.message,
        }
        return _CUSTOM_PLACEHOLDER.sub(lambda m: values[m.group(1)], opts.custom_template or "")

    @staticmethod
    def _full(entry: LogEntry, opts: ExportOptions) -> str:
        rest = f"{format_timestamp(entry)} [{entry.level.label.upper()}] {entry.formatted_message}"
        kept = []
        for pattern, stripped in (
            (TIMESTAMP_RE, opts.strip_timestamp),
            (LEVEL_TAG_RE, opts.strip_log_level),
            (BRACKET_TAG_RE, opts.strip_namespace),
        ):
            m = pattern.match(rest)
            if m is None:
                continue
            if not stripped:
                kept.append(m.group(0).strip())
            rest = rest[m.end():]

        if opts.strip_class or opts.strip_method:
            rest = _strip_names(rest, entry, opts)
        line = " ".join(kept + [rest]) if rest else " ".join(kept)
        return _MULTISPACE.sub(" ", line).strip()


def _strip_names(text: str, entry: LogEntry, opts: ExportOptions) -> str:
    """Remove class/method names from the prefix part of ``text`` only."""
    message = entry.message
    if message and text.endswith(message):
        prefix, body = text[: -len(message)], message
    else:
        prefix, body = text, ""

    if opts.strip_class and entry.class_name:
        prefix = _remove_name(prefix, entry.class_name, qualified=rf"{_NAME_START}{re.escape(entry.class_name)}\.")
    if opts.strip_method and entry.method_name:
        prefix = _remove_name(prefix, entry.method_name, qualified=rf"\.{re.escape(entry.method_name)}{_NAME_END}")
    return prefix + body


def _remove_name(prefix: str, name: str, qualified: str) -> str:
    """Drop the first ``Class.`` or ``.method`` token, else the bare name as a whole word."""
    stripped, n = re.subn(qualified, "", prefix, count=1)
    if n:
        return stripped
    return re.sub(_NAME_START + re.escape(name) + _NAME_END, "", prefix, count=1)
