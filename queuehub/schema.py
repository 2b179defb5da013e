"""
Construction input schema.

QueueHandler.create() takes a mapping of store kind to store config:

    {
        "redis": {
            "queueConnector": [{"host": "localhost", "port": 6379, "password": ""}],
            "serviceName": "notifier",
            "identifierSet": ["orders", "invoices"],
        }
    }

queueConnector may also be a plain object; snake_case keys are accepted
too. The connector params are checked by the adapter's own connector model.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from queuehub.backends import BackendAdapter, get_backend_class
from queuehub.constants import MSG_CONNECTION_CONFIG, MSG_INVALID_STORE
from queuehub.exceptions import ConfigurationError


class StoreConfig(BaseModel):
    """Config of one store, before the connector is resolved."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    queue_connector: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("queueConnector", "queue_connector"),
    )
    service_name: str = Field(validation_alias=AliasChoices("serviceName", "service_name"))
    identifier_set: list[str] = Field(validation_alias=AliasChoices("identifierSet", "identifier_set"))

    @field_validator("queue_connector", mode="before")
    @classmethod
    def unwrap_connector_list(cls, v: Any) -> Any:
        """Accept the single-element list layout as well as a bare object."""
        if isinstance(v, (list, tuple)):
            if len(v) != 1:
                raise ValueError("queueConnector must hold exactly one connection")
            return v[0]
        return v

    @field_validator("service_name")
    @classmethod
    def validate_service_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("serviceName cannot be blank")
        return v.strip()

    @property
    def identifiers(self) -> list[str]:
        """Trimmed, non-blank, de-duplicated identifiers in config order."""
        return list(dict.fromkeys(i.strip() for i in self.identifier_set if i.strip()))


@dataclass(frozen=True)
class StoreSpec:
    """A fully validated store, ready to be instantiated."""

    kind: str
    adapter_cls: type[BackendAdapter]
    connector: BaseModel
    service_name: str
    identifiers: list[str]


def _format_errors(kind: str, e: PydanticValidationError) -> list[str]:
    messages = []
    for error in e.errors():
        location = ".".join(str(part) for part in error["loc"])
        prefix = f"{kind}.{location}" if location else kind
        messages.append(f"{prefix}: {error['msg']}")
    return messages


def parse_store_config(connection_config: Any) -> list[StoreSpec]:
    """
    Validate construction input.

    Args:
        connection_config: Mapping of store kind to store config

    Returns:
        One StoreSpec per configured store, in config order

    Raises:
        ConfigurationError: Input is missing or malformed, or names an
            unknown store kind. Every problem found is listed.
    """
    if not connection_config or not isinstance(connection_config, Mapping):
        raise ConfigurationError(MSG_CONNECTION_CONFIG)

    specs: list[StoreSpec] = []
    errors: list[str] = []
    seen: set[str] = set()

    for raw_kind, raw_store in connection_config.items():
        if not isinstance(raw_kind, str) or not raw_kind.strip():
            errors.append(MSG_INVALID_STORE.format(store=raw_kind))
            continue
        kind = raw_kind.strip().lower()
        adapter_cls = get_backend_class(kind)
        if adapter_cls is None:
            errors.append(MSG_INVALID_STORE.format(store=raw_kind))
            continue
        if kind in seen:
            errors.append(f"{kind}: configured more than once")
            continue
        seen.add(kind)

        try:
            store = StoreConfig.model_validate(raw_store)
            connector = adapter_cls.connector_model.model_validate(store.queue_connector)
        except PydanticValidationError as e:
            errors.extend(_format_errors(kind, e))
            continue

        specs.append(
            StoreSpec(
                kind=kind,
                adapter_cls=adapter_cls,
                connector=connector,
                service_name=store.service_name,
                identifiers=store.identifiers,
            )
        )

    if errors:
        raise ConfigurationError("Invalid queue store configuration", errors)
    return specs


__all__ = ["StoreConfig", "StoreSpec", "parse_store_config"]
