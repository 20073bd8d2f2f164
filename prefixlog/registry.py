"""registry.py - Display names for live objects and their classes.

A registered name survives refactors, obfuscation and wrapper classes that a
stack-derived name does not, so the formatter always prefers it.

The registry never owns what it names. Entries are keyed by ``id()`` and hold
a ``weakref.ref`` whose callback drops the entry once the object is collected,
so a lookup on a dead object reports "no association". Identity keys also mean
unhashable objects (classes defining ``__eq__`` without ``__hash__``) can be
registered.
"""

import logging
import weakref
from typing import Any, Dict, Optional, Tuple

_logger = logging.getLogger(__name__)


class ClassRegistry:
    """Identity-keyed, weak association from objects to display names."""

    def __init__(self) -> None:
        self._names: Dict[int, Tuple[weakref.ref, str]] = {}

    def register(self, instance: Any, display_name: Optional[str]) -> None:
        """Associate ``instance`` (and its class) with ``display_name``.

        Registering a class names every instance of it. Registering an
        instance also names its class unless the two are the same object.
        A missing instance or empty name is a no-op.
        """
        if instance is None or not display_name:
            return

        if not self._store(instance, display_name):
            # Instances without a __weakref__ slot can only be named via their class.
            _logger.debug(
                "%s instances are not weak-referenceable; registering the class only",
                type(instance).__qualname__,
            )

        owner = instance if isinstance(instance, type) else type(instance)
        if owner is not instance:
            self._store(owner, display_name)

    def resolve(self, instance: Any) -> Optional[str]:
        """Return the direct association, else the class association, else None."""
        if instance is None:
            return None
        name = self._lookup(instance)
        if name is not None:
            return name
        if not isinstance(instance, type):
            return self._lookup(type(instance))
        return None

    def __contains__(self, instance: Any) -> bool:
        return self.resolve(instance) is not None

    def __len__(self) -> int:
        return len(self._names)

    # ---------------------------------------------------------------------- #
    # Private helpers
    # ---------------------------------------------------------------------- #

    def _store(self, obj: Any, display_name: str) -> bool:
        key = id(obj)
        try:
            ref = weakref.ref(obj, self._make_reaper(key))
        except TypeError:
            return False
        self._names[key] = (ref, display_name)
        return True

    def _lookup(self, obj: Any) -> Optional[str]:
        slot = self._names.get(id(obj))
        if slot is None:
            return None
        ref, name = slot
        # id() values are reused after collection; only trust a live match.
        if ref() is not obj:
            return None
        return name

    def _make_reaper(self, key: int):
        names = self._names

        def _reap(ref: weakref.ref) -> None:
            slot = names.get(key)
            if slot is not None and slot[0] is ref:
                del names[key]

        return _reap


_default_registry = ClassRegistry()


def get_class_registry() -> ClassRegistry:
    """Return the process-wide registry shared by default-constructed loggers."""
    return _default_registry
