"""
Store backends.

Every adapter implements BackendAdapter and registers itself under a store
kind. Importing this package registers the built-in kinds.

Usage:
    from queuehub.backends import get_backend_class

    adapter_cls = get_backend_class("redis")
"""

from queuehub.backends.base import BackendAdapter
from queuehub.backends.memory import MemoryBackend, MemoryConnector
from queuehub.backends.redis_backend import RedisBackend, RedisConnector
from queuehub.backends.registry import (
    available_backends,
    get_backend_class,
    register_backend,
    unregister_backend,
)

__all__ = [
    "BackendAdapter",
    "RedisBackend",
    "RedisConnector",
    "MemoryBackend",
    "MemoryConnector",
    "register_backend",
    "unregister_backend",
    "get_backend_class",
    "available_backends",
]
