"""Value types passed between the validator, the registration table and the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from queuehub.exceptions import QueueError

if TYPE_CHECKING:
    from queuehub.backends.base import BackendAdapter


@dataclass(frozen=True)
class QueueRequest:
    """A validated per-call request. Identifier and key are already trimmed."""

    identifier: str
    key: Optional[str] = None
    value: Any = None
    stores: Optional[tuple[str, ...]] = None

    def targets(self, kind: str) -> bool:
        """Whether the store filter lets backend `kind` take part."""
        return self.stores is None or kind in self.stores

    def pinned(self, kind: str, key: str) -> QueueRequest:
        """Copy of this request addressed to one key on one backend."""
        return QueueRequest(identifier=self.identifier, key=key, stores=(kind,))


@dataclass
class RegistrationEntry:
    """
    One configured store.

    identifiers holds every identifier registered for this store, trimmed and
    de-duplicated, in registration order.
    """

    kind: str
    adapter: BackendAdapter
    service_name: str
    identifiers: list[str] = field(default_factory=list)

    def is_registered(self, identifier: str) -> bool:
        return identifier in self.identifiers

    def registration_field(self, identifier: str) -> str:
        """Field name of this identifier inside the registered-services hash."""
        return f"{self.service_name}_{identifier}"


@dataclass
class DispatchOutcome:
    """
    Result of one fanned-out operation.

    error is the first error any backend reported, or the validation error
    when the request never reached a backend. results maps backend kind to
    that backend's payload; a backend with nothing to report is absent.
    """

    error: Optional[QueueError] = None
    results: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": str(self.error) if self.error is not None else None,
            "results": self.results,
        }


__all__ = ["QueueRequest", "RegistrationEntry", "DispatchOutcome"]
