"""instrument.py - Decorators that feed context to prefixlog.

``@display_name`` registers a class in the class registry, so every instance
is shown under a stable name no matter how the class is wrapped or renamed::

    @display_name("SettingsManager")
    class _Mgr:
        ...

``@as_callback`` marks a function as a callback: log calls made while it
runs use the callback template even when the stack gives no hint (for
example a handler passed to a C extension)::

    button.on_click(as_callback(self.refresh))
"""

from functools import wraps
from typing import Callable, Optional, TypeVar

from .context import callback_scope
from .registry import ClassRegistry, get_class_registry

T = TypeVar("T", bound=type)


def display_name(name: str, registry: Optional[ClassRegistry] = None) -> Callable[[T], T]:
    """Class decorator registering the decorated class under ``name``.

    Args:
        name: Display name shown in log prefixes.
        registry: Registry to use; defaults to the process-wide registry.
    """

    def decorator(cls: T) -> T:
        (registry if registry is not None else get_class_registry()).register(cls, name)
        return cls

    return decorator


def as_callback(func: Callable) -> Callable:
    """Wrap ``func`` so that log calls inside it render in callback context.

    The wrapped callable keeps the name, docstring and signature of ``func``.
    Exceptions propagate unchanged.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        with callback_scope():
            return func(*args, **kwargs)

    return wrapper
