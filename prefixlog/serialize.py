"""serialize.py - Bounded, cycle-safe text rendering of arbitrary objects.

``safe_repr`` turns log arguments into short display text. It never raises:
a value that fails to render becomes a placeholder and the rest of the
message is unaffected.

Limits:
    - Depth: containers nested deeper than ``max_depth`` collapse to
      ``[...]`` (sequences) or ``{...}`` (mappings and objects).
    - Sequences show at most 5 items followed by ``...N more``.
    - Mappings and attribute dumps show at most 5 keys followed by ``...``.
    - Named objects show at most 3 simple properties.
"""

from collections.abc import Mapping, Set
from collections import deque
from typing import Any, List, Optional

from .registry import ClassRegistry

MAX_DEPTH = 3
MAX_ITEMS = 5
MAX_KEYS = 5
MAX_KEY_PROPS = 3

CIRCULAR = "[Circular]"
ERROR = "[Error]"
UNRENDERABLE = "[Object]"

KEY_PROPS = ("name", "id", "type", "status", "length")
SCALAR_TYPES = (str, int, float, bool, complex, bytes)
GENERIC_TYPE_NAMES = frozenset({"object", "dict", "SimpleNamespace", "type", "function"})
_SEQUENCE_TYPES = (list, tuple, Set, deque)


def is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, SCALAR_TYPES)


def safe_repr(value: Any, registry: Optional[ClassRegistry] = None, max_depth: int = MAX_DEPTH) -> str:
    """Render ``value`` for display without recursing forever or raising."""
    return _Renderer(registry, max_depth).render(value, 0)


class _Renderer:
    def __init__(self, registry: Optional[ClassRegistry], max_depth: int) -> None:
        self.registry = registry
        self.max_depth = max_depth
        self._active: set = set()

    def render(self, value: Any, depth: int) -> str:
        if is_scalar(value):
            return str(value)

        key = id(value)
        if key in self._active:
            return CIRCULAR
        self._active.add(key)
        try:
            return self._render_container(value, depth)
        except Exception:
            return UNRENDERABLE
        finally:
            self._active.discard(key)

    def _render_container(self, value: Any, depth: int) -> str:
        if isinstance(value, _SEQUENCE_TYPES):
            if depth >= self.max_depth:
                return "[...]"
            items = list(value)
            shown = [self.render(item, depth + 1) for item in items[:MAX_ITEMS]]
            extra = len(items) - MAX_ITEMS
            if extra > 0:
                shown.append(f"...{extra} more")
            return "[" + ", ".join(shown) + "]"

        tag = _dom_summary(value)
        if tag is not None:
            return tag

        if isinstance(value, BaseException):
            return f"{type(value).__name__}: {value}"

        if callable(value) and hasattr(value, "__qualname__") and not isinstance(value, type):
            return f"<function {value.__qualname__}>"

        if depth >= self.max_depth:
            return "{...}"

        if not isinstance(value, Mapping):
            name = self.registry.resolve(value) if self.registry is not None else None
            if name is None:
                type_name = type(value).__name__
                if type_name not in GENERIC_TYPE_NAMES:
                    name = type_name
            if name is not None:
                return _named_summary(name, value)

        return self._dump(value, depth)

    def _dump(self, value: Any, depth: int) -> str:
        if isinstance(value, Mapping):
            pairs = list(value.items())
        else:
            pairs = list(getattr(value, "__dict__", {}).items())
        if not pairs:
            return "{}"

        props: List[str] = []
        for key, item in pairs[:MAX_KEYS]:
            label = key if isinstance(key, str) and key.isidentifier() else repr(key)
            try:
                props.append(f"{label}: {self.render(item, depth + 1)}")
            except Exception:
                props.append(f"{label}: {ERROR}")
        ellipsis = ", ..." if len(pairs) > MAX_KEYS else ""
        return "{" + ", ".join(props) + ellipsis + "}"


def _named_summary(name: str, value: Any) -> str:
    props = []
    for key in KEY_PROPS:
        if len(props) >= MAX_KEY_PROPS:
            break
        try:
            attr = getattr(value, key)
        except Exception:
            continue
        if is_scalar(attr):
            props.append(f"{key}: {attr}")
    if not props:
        return name
    return f"{name} {{{', '.join(props)}}}"


def _dom_summary(value: Any) -> Optional[str]:
    """Compact ``<tag id=".." class="..">`` for DOM / ElementTree nodes."""
    node_name = getattr(value, "nodeName", None)
    if getattr(value, "nodeType", None) is not None and isinstance(node_name, str):
        get_attr = getattr(value, "getAttribute", None)
        attrs = {}
        if callable(get_attr):
            attrs = {"id": get_attr("id"), "class": get_attr("class")}
        return _tag(node_name.lower(), attrs)

    tag = getattr(value, "tag", None)
    attrib = getattr(value, "attrib", None)
    if isinstance(tag, str) and isinstance(attrib, Mapping):
        return _tag(tag, {"id": attrib.get("id"), "class": attrib.get("class")})
    return None


def _tag(name: str, attrs) -> str:
    parts = [name] + [f'{k}="{v}"' for k, v in attrs.items() if v]
    return "<" + " ".join(parts) + ">"
