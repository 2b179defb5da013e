"""
In-process backend.

Keeps hashes in a module-level dict keyed by namespace, so every adapter
configured with the same namespace sees the same data for the life of the
process. Meant for local development and tests.
"""

import copy
from typing import Any, Optional

from pydantic import BaseModel, Field

from queuehub.backends.base import BackendAdapter
from queuehub.backends.registry import register_backend
from queuehub.config import Settings

# namespace -> group -> field -> value
_NAMESPACES: dict[str, dict[str, dict[str, Any]]] = {}


class MemoryConnector(BaseModel):
    namespace: str = Field(default="default", min_length=1)


@register_backend("memory")
class MemoryBackend(BackendAdapter):
    """Dict-backed hashes. Values are deep-copied on the way in and out."""

    connector_model = MemoryConnector

    def __init__(self, namespace: str = "default"):
        self.namespace = namespace

    @classmethod
    def from_connector(cls, connector: MemoryConnector, settings: Settings) -> "MemoryBackend":
        return cls(namespace=connector.namespace)

    @classmethod
    def reset(cls, namespace: Optional[str] = None) -> None:
        """Drop one namespace, or all of them."""
        if namespace is None:
            _NAMESPACES.clear()
        else:
            _NAMESPACES.pop(namespace, None)

    @property
    def _groups(self) -> dict[str, dict[str, Any]]:
        return _NAMESPACES.setdefault(self.namespace, {})

    async def get_field(self, group: str, field: str) -> Optional[Any]:
        value = self._groups.get(group, {}).get(field)
        return copy.deepcopy(value)

    async def set_field(self, group: str, field: str, value: Any) -> bool:
        self._groups.setdefault(group, {})[field] = copy.deepcopy(value)
        return True

    async def delete_field(self, group: str, field: str) -> int:
        fields = self._groups.get(group)
        if not fields or field not in fields:
            return 0
        del fields[field]
        if not fields:
            del self._groups[group]
        return 1

    async def list_fields(self, group: str) -> list[str]:
        return list(self._groups.get(group, {}))

    def __repr__(self) -> str:
        return f"<MemoryBackend namespace={self.namespace!r}>"
