"""
Redis backend.

Stores every queue group as a Redis hash:
- HGET / HSET / HDEL / HKEYS for field access
- Connection pooling (configurable max connections)
- JSON serialization for structured values
"""

import json
from typing import Any, Optional

import redis.asyncio as redis
from pydantic import BaseModel, Field, field_validator
from redis.exceptions import RedisError

from queuehub.backends.base import BackendAdapter
from queuehub.backends.registry import register_backend
from queuehub.config import Settings
from queuehub.exceptions import BackendError
from queuehub.logging import get_logger

logger = get_logger("backends.redis")


class RedisConnector(BaseModel):
    """Connection params of one Redis store."""

    host: str = Field(min_length=1)
    port: int = Field(gt=0, lt=65536)
    password: Optional[str] = None
    db: int = Field(default=0, ge=0)

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("host cannot be blank")
        return v.strip()

    @field_validator("password")
    @classmethod
    def empty_password_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


@register_backend("redis")
class RedisBackend(BackendAdapter):
    """
    Redis hash adapter.

    Values that are not strings are written as JSON. On read, JSON objects
    and arrays are decoded; any other string comes back as stored, so
    registration timestamps stay plain ISO strings.

    Usage:
        backend = RedisBackend.from_connector(RedisConnector(host="localhost", port=6379), settings)
        await backend.set_field("orders", "o1", {"targetType": ["email"]})
        value = await backend.get_field("orders", "o1")
    """

    connector_model = RedisConnector

    def __init__(self, client: "redis.Redis", host: str = "", port: int = 0):
        self._client = client
        self.host = host
        self.port = port
        self._closed = False

    @classmethod
    def from_connector(cls, connector: RedisConnector, settings: Settings) -> "RedisBackend":
        pool = redis.ConnectionPool(
            host=connector.host,
            port=connector.port,
            db=connector.db,
            password=connector.password,
            max_connections=settings.redis_max_connections,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_socket_connect_timeout,
            decode_responses=True,
        )
        return cls(redis.Redis(connection_pool=pool), host=connector.host, port=connector.port)

    # =========================================================================
    # Serialization
    # =========================================================================

    @staticmethod
    def _encode(value: Any) -> str:
        if isinstance(value, str):
            return value
        return json.dumps(value)

    @staticmethod
    def _decode(raw: Any) -> Any:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        if isinstance(raw, str) and raw[:1] in ("{", "["):
            try:
                return json.loads(raw)
            except json.JSONDecodeError:
                return raw
        return raw

    def _error(self, operation: str, group: str, e: RedisError) -> BackendError:
        logger.debug("redis_command_failed", operation=operation, group=group, error=str(e))
        return BackendError(self.kind, operation, str(e))

    # =========================================================================
    # Hash Operations
    # =========================================================================

    async def get_field(self, group: str, field: str) -> Optional[Any]:
        try:
            raw = await self._client.hget(group, field)
        except RedisError as e:
            raise self._error("hget", group, e) from e
        if raw is None:
            return None
        return self._decode(raw)

    async def set_field(self, group: str, field: str, value: Any) -> bool:
        try:
            serialized = self._encode(value)
        except TypeError as e:
            raise BackendError(self.kind, "hset", f"Value is not JSON serializable: {e}") from e
        try:
            await self._client.hset(group, field, serialized)
        except RedisError as e:
            raise self._error("hset", group, e) from e
        return True

    async def delete_field(self, group: str, field: str) -> int:
        try:
            removed = await self._client.hdel(group, field)
        except RedisError as e:
            raise self._error("hdel", group, e) from e
        return int(removed or 0)

    async def list_fields(self, group: str) -> list[str]:
        try:
            fields = await self._client.hkeys(group)
        except RedisError as e:
            raise self._error("hkeys", group, e) from e
        return [f.decode("utf-8") if isinstance(f, bytes) else f for f in fields or []]

    # =========================================================================
    # Health Check
    # =========================================================================

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            raise self._error("ping", "", e) from e

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._client.aclose(close_connection_pool=True)
        except RedisError as e:
            logger.warning("redis_close_failed", host=self.host, port=self.port, error=str(e))

    def __repr__(self) -> str:
        return f"<RedisBackend {self.host}:{self.port}>"
