"""
Backend registry.

Adapter classes register themselves under a store kind ("redis", "memory").
Construction resolves each configured kind here, so a new store needs a new
adapter class and nothing else.
"""

from typing import Callable, TypeVar

from queuehub.backends.base import BackendAdapter

A = TypeVar("A", bound=type[BackendAdapter])

# store kind -> adapter class
_BACKEND_REGISTRY: dict[str, type[BackendAdapter]] = {}


def register_backend(kind: str) -> Callable[[A], A]:
    """
    Class decorator registering an adapter under `kind`.

    Kinds are case-insensitive. Registering a kind twice replaces the
    earlier adapter.
    """
    if not kind or not kind.strip():
        raise ValueError("Backend kind cannot be blank")
    normalized = kind.strip().lower()

    def decorator(cls: A) -> A:
        if not (isinstance(cls, type) and issubclass(cls, BackendAdapter)):
            raise TypeError(f"{cls!r} is not a BackendAdapter")
        cls.kind = normalized
        _BACKEND_REGISTRY[normalized] = cls
        return cls

    return decorator


def unregister_backend(kind: str) -> None:
    _BACKEND_REGISTRY.pop(kind.strip().lower(), None)


def get_backend_class(kind: str) -> type[BackendAdapter] | None:
    """Adapter class registered for `kind`, or None."""
    return _BACKEND_REGISTRY.get(kind.strip().lower())


def available_backends() -> list[str]:
    return sorted(_BACKEND_REGISTRY)


__all__ = [
    "register_backend",
    "unregister_backend",
    "get_backend_class",
    "available_backends",
]
