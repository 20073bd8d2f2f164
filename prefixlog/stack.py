"""stack.py - Caller-context inference from the call stack.

Given the frames between a log call and the program entry point, work out
which class and method made the call and whether it ran as a callback
(event handler, deferred dispatch, inline lambda) rather than as a direct
synchronous call. The formatter picks its template from that flag.

Two inputs share one classifier:
    ``capture_caller()``  walks the live interpreter frames, nearest first.
    ``resolve_trace()``   parses Python traceback text, e.g. from a log file.

Classification is heuristic. The rules live in the tables below (deny-list,
callback name patterns, dispatch patterns) so they can be tuned without
touching callers. Nothing here ever raises: a failed capture yields an empty
CallerContext and the formatter renders empty prefix segments.
"""

import inspect
import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Sequence, Tuple

from .context import in_callback_scope

_logger = logging.getLogger(__name__)

MAX_FRAMES = 64

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
_LOGGING_DIR = os.path.dirname(os.path.abspath(logging.__file__))

# Frames from these directories belong to the logging machinery itself.
INTERNAL_PATHS: Tuple[str, ...] = (_PACKAGE_DIR + os.sep, _LOGGING_DIR + os.sep)

INTERNAL_NAMES: Pattern[str] = re.compile(
    r"^(?:PrefixLogger|BoundLogger|PrefixFormatter|PrefixLogHandler)\."
    r"|^(?:capture_caller|capture_frames|resolve_frames|resolve_trace)$"
)

INLINE_NAMES = frozenset({"<lambda>", "<genexpr>", "<listcomp>", "<dictcomp>", "<setcomp>"})
CONSTRUCTOR_NAMES = frozenset({"__init__", "__new__"})

# Names that carry no information about the caller (compared lower-cased).
DENYLIST = frozenset(
    {
        "eval",
        "exec",
        "anonymous",
        "apply",
        "call",
        "constructor",
        "object",
        "__call__",
        "__init__",
        "__new__",
        "<module>",
    }
    | INLINE_NAMES
)

CALLBACK_NAME_PATTERNS: Dict[str, Pattern[str]] = {
    "callback": re.compile(r"callback", re.IGNORECASE),
    "private_handler": re.compile(r"^_on(?=[_A-Z])"),
}

DISPATCH_PATTERNS: Dict[str, Pattern[str]] = {
    "emit": re.compile(r"(?:^|\.)emit$", re.IGNORECASE),
    "dispatch": re.compile(r"dispatch", re.IGNORECASE),
    "asyncio_handle": re.compile(r"^Handle\._run$"),
    "timer": re.compile(r"^Timer\.run$"),
    "future_callbacks": re.compile(r"^Future\._invoke_callbacks$"),
}

_TRACE_LINE = re.compile(r'^\s*File "(?P<filename>[^"]*)", line (?P<lineno>\d+), in (?P<name>.+?)\s*$')


@dataclass(frozen=True)
class Frame:
    """One stack frame: source file, line, and qualified function name."""

    filename: str
    lineno: int
    name: str

    @property
    def leaf(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    @property
    def is_eval(self) -> bool:
        """True for code compiled from a string (``exec``/``eval``)."""
        return self.filename.startswith("<string")

    @property
    def is_inline(self) -> bool:
        return self.is_eval or self.leaf in INLINE_NAMES


@dataclass(frozen=True)
class CallerContext:
    """Classified caller of a log call. Both names may be absent."""

    class_name: Optional[str] = None
    method_name: Optional[str] = None
    is_callback: bool = False


@dataclass(frozen=True)
class FrameMatch:
    kind: str  # "constructor", "qualified" or "function"
    class_name: Optional[str]
    method_name: Optional[str]


EMPTY_CONTEXT = CallerContext()


# ---------------------------------------------------------------------------
# Frame classification
# ---------------------------------------------------------------------------


def split_qualname(name: str) -> Tuple[Optional[str], str]:
    """Split a qualified name into (owner, member).

    Closure scopes are collapsed onto the enclosing class:

        >>> split_qualname("Worker.run")
        ('Worker', 'run')
        >>> split_qualname("Worker.start.<locals>.on_done")
        ('Worker', 'on_done')
        >>> split_qualname("helper")
        (None, 'helper')
    """
    scope, _, path = name.rpartition(".<locals>.")
    if "." in path:
        owner, member = path.rsplit(".", 1)
        return owner, member

    owner = None
    if scope:
        enclosing = scope.rpartition(".<locals>.")[2]
        if "." in enclosing:
            owner = enclosing.rsplit(".", 1)[0]
    return owner, path


def is_meaningful(name: Optional[str]) -> bool:
    return bool(name) and name.lower() not in DENYLIST


def classify_frame(frame: Frame) -> Optional[FrameMatch]:
    """Return the class/method a frame names, or None if it names nothing useful."""
    owner, member = split_qualname(frame.name)

    if owner and member in CONSTRUCTOR_NAMES:
        if is_meaningful(owner):
            return FrameMatch("constructor", owner, "__init__")
        return None

    if owner:
        class_name = owner if is_meaningful(owner) else None
        method_name = member if is_meaningful(member) else None
        if class_name or method_name:
            return FrameMatch("qualified", class_name, method_name)
        return None

    if is_meaningful(member):
        return FrameMatch("function", None, member)
    return None


def is_internal(frame: Frame, internal_paths: Sequence[str] = INTERNAL_PATHS) -> bool:
    filename = frame.filename
    if not filename.startswith("<"):
        filename = os.path.abspath(filename)
    if any(filename.startswith(path) for path in internal_paths):
        return True
    return bool(INTERNAL_NAMES.search(frame.name))


def has_callback_name(class_name: Optional[str], method_name: Optional[str]) -> bool:
    if method_name and any(p.search(method_name) for p in CALLBACK_NAME_PATTERNS.values()):
        return True
    return bool(class_name) and bool(CALLBACK_NAME_PATTERNS["callback"].search(class_name))


def is_dispatch_frame(frame: Frame) -> bool:
    return any(p.search(frame.name) for p in DISPATCH_PATTERNS.values())


def _is_host(frame: Frame, host_identity: Optional[str]) -> bool:
    return bool(host_identity) and host_identity in frame.filename


def resolve_frames(
    frames: Sequence[Frame],
    host_identity: Optional[str] = None,
    internal_paths: Sequence[str] = INTERNAL_PATHS,
    forced_callback: bool = False,
) -> CallerContext:
    """Classify the nearest meaningful frame of ``frames`` (nearest first).

    Args:
        frames: Stack frames ordered from the log call outwards.
        host_identity: Substring of the host's own source paths. Inline
            frames (lambdas, exec'd code) outside it are discarded as noise.
        internal_paths: Path prefixes of frames belonging to the logging
            machinery, skipped entirely.
        forced_callback: Report callback context regardless of the frames.

    Returns:
        The CallerContext of the first frame that yields a class or method.
    """
    candidates = [f for f in frames if not is_internal(f, internal_paths)]
    saw_inline = False

    for index, frame in enumerate(candidates):
        if frame.is_inline and not _is_host(frame, host_identity):
            saw_inline = True
            continue

        match = classify_frame(frame)
        if match is None:
            if frame.is_inline:
                # A host lambda with no enclosing class: callback, but nameless.
                return CallerContext(is_callback=True)
            continue

        caller = candidates[index + 1] if index + 1 < len(candidates) else None
        is_callback = (
            forced_callback
            or saw_inline
            or frame.is_inline
            or has_callback_name(match.class_name, match.method_name)
            or is_dispatch_frame(frame)
            or (caller is not None and is_dispatch_frame(caller))
        )
        return CallerContext(match.class_name, match.method_name, is_callback)

    return CallerContext(is_callback=forced_callback or saw_inline)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


def capture_frames(limit: int = MAX_FRAMES) -> List[Frame]:
    """Snapshot the live call stack, nearest caller first."""
    frames: List[Frame] = []
    current = inspect.currentframe()
    try:
        frame = current.f_back if current is not None else None
        while frame is not None and len(frames) < limit:
            code = frame.f_code
            frames.append(Frame(code.co_filename, frame.f_lineno or 0, code.co_qualname))
            frame = frame.f_back
    finally:
        # Frame objects reference each other; drop ours promptly.
        del current
    return frames


def capture_caller(
    host_identity: Optional[str] = None,
    internal_paths: Sequence[str] = INTERNAL_PATHS,
) -> CallerContext:
    """Resolve the caller of the current log call from the live stack."""
    forced = in_callback_scope()
    try:
        frames = capture_frames()
        if not frames:
            return CallerContext(is_callback=forced)
        return resolve_frames(frames, host_identity, internal_paths, forced)
    except Exception:
        _logger.debug("Caller context capture failed", exc_info=True)
        return CallerContext(is_callback=forced)


def parse_trace(raw_trace: str) -> List[Frame]:
    """Parse Python traceback text into frames, nearest caller first.

    Tracebacks list the outermost call first ("most recent call last"), so
    the parsed order is reversed. Source lines and other text are ignored.
    """
    frames = []
    for line in raw_trace.splitlines():
        m = _TRACE_LINE.match(line)
        if m:
            frames.append(Frame(m.group("filename"), int(m.group("lineno")), m.group("name")))
    frames.reverse()
    return frames


def format_trace(frames: Sequence[Frame]) -> str:
    """Render frames (nearest first) in traceback order, outermost first."""
    return "\n".join(
        f'  File "{f.filename}", line {f.lineno}, in {f.name}' for f in reversed(frames)
    )


def resolve_trace(
    raw_trace: str,
    host_identity: Optional[str] = None,
    internal_paths: Sequence[str] = INTERNAL_PATHS,
) -> CallerContext:
    """Classify the caller recorded in a traceback string."""
    try:
        frames = parse_trace(raw_trace or "")
        if not frames:
            return EMPTY_CONTEXT
        return resolve_frames(frames, host_identity, internal_paths)
    except Exception:
        _logger.debug("Could not resolve caller from trace text", exc_info=True)
        return EMPTY_CONTEXT
