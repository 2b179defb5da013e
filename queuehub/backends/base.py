"""Backend adapter interface."""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Optional

from pydantic import BaseModel

from queuehub.config import Settings


class BackendAdapter(ABC):
    """
    Hash-style access to one physical store.

    A group is a named hash; a field is one entry inside it. Adapters raise
    BackendError for every driver failure and never interpret values.

    Usage:
        @register_backend("mystore")
        class MyStoreBackend(BackendAdapter):
            connector_model = MyStoreConnector

            @classmethod
            def from_connector(cls, connector, settings):
                return cls(...)
    """

    kind: ClassVar[str] = ""
    connector_model: ClassVar[type[BaseModel]]

    @classmethod
    @abstractmethod
    def from_connector(cls, connector: BaseModel, settings: Settings) -> "BackendAdapter":
        """Build an adapter from validated connector params."""

    @abstractmethod
    async def get_field(self, group: str, field: str) -> Optional[Any]:
        """Value of `field` in `group`, or None when absent."""

    @abstractmethod
    async def set_field(self, group: str, field: str, value: Any) -> bool:
        """Write `value` under `field` in `group`."""

    @abstractmethod
    async def delete_field(self, group: str, field: str) -> int:
        """Remove `field` from `group`; returns how many fields were removed."""

    @abstractmethod
    async def list_fields(self, group: str) -> list[str]:
        """Field names of `group`, empty when the group does not exist."""

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        """Release connections. Safe to call more than once."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} kind={self.kind!r}>"
