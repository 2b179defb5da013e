"""
Queue handler.

Fans queue operations out to every configured store and folds the
per-store results into one DispatchOutcome.

Usage:
    handler = await QueueHandler.create(connection_config)

    await handler.push({"identifier": "orders", "key": "o1", "value": {"targetType": ["email"]}})
    outcome = await handler.read({"identifier": "orders", "key": "o1"})
    outcome.results  # {"redis": {"targetType": ["email"]}}

    # Restrict an operation to some stores
    await handler.read_keys({"identifier": "orders", "store": ["redis"]})
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Mapping, Sized
from datetime import datetime
from functools import partial
from typing import Any, Optional

from queuehub.config import Settings, get_settings
from queuehub.constants import FIELD_KEY, FIELD_STORE, FIELD_VALUE, MSG_NO_STORE
from queuehub.exceptions import ConfigurationError, QueueError, RegistrationError, ValidationError
from queuehub.logging import get_logger
from queuehub.models import DispatchOutcome, QueueRequest, RegistrationEntry
from queuehub.registration import build_registration_table
from queuehub.schema import parse_store_config
from queuehub.validation import (
    build_request,
    validate_queue_fields,
    validate_queue_value,
    validate_store_filter,
)

logger = get_logger("handler")

Leg = Callable[[RegistrationEntry, QueueRequest], Awaitable[Any]]
Callback = Callable[[DispatchOutcome], Any]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, Sized) and len(value) == 0


class QueueHandler:
    """
    One queue API over several stores.

    Obtain instances with QueueHandler.create(), which returns only after
    every store has registered its identifiers. The registration table is
    read-only afterwards.

    Every operation validates its request, then runs one leg per store that
    the optional "store" filter lets through. A leg first checks that the
    identifier is registered for its store. Legs run concurrently and never
    stop each other; the outcome carries the first error any leg reported
    and the results of the legs that succeeded.

    push() and delete_key() raise the outcome's error unless a callback is
    given; every read operation reports errors through the outcome only.
    """

    def __init__(
        self,
        entries: Mapping[str, RegistrationEntry],
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        if not entries:
            raise ConfigurationError(MSG_NO_STORE)
        self._entries = dict(entries)
        self._settings = settings or get_settings()
        self._clock = clock

    @classmethod
    async def create(
        cls,
        connection_config: Any,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "QueueHandler":
        """
        Validate the config, connect every store and register identifiers.

        Args:
            connection_config: Mapping of store kind to store config, see
                queuehub.schema
            settings: Library settings (default: get_settings())
            clock: Source of the current time (default: datetime.now)

        Raises:
            ConfigurationError: Bad config or unknown store kind
            BackendError: A store failed while registering identifiers
        """
        settings = settings or get_settings()
        clock = clock or datetime.now
        specs = parse_store_config(connection_config)
        timestamp = clock().strftime(settings.timestamp_format)
        entries = await build_registration_table(specs, settings, timestamp)
        logger.info(
            "queue_handler_ready",
            stores=list(entries),
            identifiers={kind: len(entry.identifiers) for kind, entry in entries.items()},
        )
        return cls(entries, settings=settings, clock=clock)

    async def __aenter__(self) -> "QueueHandler":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close every store connection."""
        await asyncio.gather(*(entry.adapter.close() for entry in self._entries.values()))

    @property
    def stores(self) -> list[str]:
        return list(self._entries)

    def registered_identifiers(self, store: str) -> list[str]:
        """Identifiers registered for `store`; empty for unknown stores."""
        entry = self._entries.get(store.strip().lower())
        return list(entry.identifiers) if entry else []

    def _timestamp(self) -> str:
        return self._clock().strftime(self._settings.timestamp_format)

    # =========================================================================
    # Dispatch
    # =========================================================================

    async def _dispatch(
        self,
        operation: str,
        request: QueueRequest,
        leg: Leg,
        check_registration: bool = True,
    ) -> DispatchOutcome:
        outcome = DispatchOutcome()
        log = logger.bind(operation=operation, identifier=request.identifier)

        async def run(entry: RegistrationEntry) -> None:
            try:
                if check_registration and not entry.is_registered(request.identifier):
                    raise RegistrationError(entry.kind, request.identifier)
                result = await leg(entry, request)
            except QueueError as e:
                log.warning("dispatch_leg_failed", store=entry.kind, error=str(e))
                if outcome.error is None:
                    outcome.error = e
                return
            if result is not None:
                outcome.results[entry.kind] = result

        await asyncio.gather(
            *(run(entry) for kind, entry in self._entries.items() if request.targets(kind))
        )
        return outcome

    def _invalid(self, operation: str, message: str) -> DispatchOutcome:
        logger.debug("request_rejected", operation=operation, reason=message)
        return DispatchOutcome(error=ValidationError(message))

    @staticmethod
    def _check_callback(callback: Optional[Callback]) -> None:
        if callback is not None and not callable(callback):
            raise TypeError("Callback is not a function")

    @staticmethod
    async def _deliver(outcome: DispatchOutcome, callback: Optional[Callback]) -> DispatchOutcome:
        if callback is None:
            outcome.raise_for_error()
            return outcome
        result = callback(outcome)
        if inspect.isawaitable(result):
            await result
        return outcome

    # =========================================================================
    # Legs
    # =========================================================================

    async def _push_leg(self, entry: RegistrationEntry, request: QueueRequest) -> None:
        await entry.adapter.set_field(request.identifier, request.key, request.value)

    async def _stamp(self, entry: RegistrationEntry, identifier: str, stamp: Optional[str]) -> None:
        """Record when `identifier` was last read from this store."""
        await entry.adapter.set_field(
            self._settings.services_info_key,
            entry.registration_field(identifier),
            stamp or self._timestamp(),
        )

    async def _read_leg(
        self,
        entry: RegistrationEntry,
        request: QueueRequest,
        stamp: Optional[str] = None,
        touch: bool = True,
    ) -> Any:
        value = await entry.adapter.get_field(request.identifier, request.key)
        if _is_empty(value):
            return None
        if touch:
            await self._stamp(entry, request.identifier, stamp)
        return value

    async def _keys_leg(self, entry: RegistrationEntry, request: QueueRequest) -> Optional[list[str]]:
        keys = await entry.adapter.list_fields(request.identifier)
        return keys or None

    async def _items_leg(
        self,
        entry: RegistrationEntry,
        request: QueueRequest,
        stamp: str,
    ) -> Optional[list[dict[str, Any]]]:
        keys = await entry.adapter.list_fields(request.identifier)
        if not keys:
            return None

        items = []
        for key in keys:
            # The batch is stamped once below, not per key
            read = await self._read(request.pinned(entry.kind, key), touch=False)
            if read.error is not None:
                raise read.error
            value = read.results.get(entry.kind)
            if not _is_empty(value):
                items.append({"identifier": request.identifier, "key": key, "value": value})

        if items:
            await self._stamp(entry, request.identifier, stamp)
        return items

    async def _delete_leg(self, entry: RegistrationEntry, request: QueueRequest) -> Optional[int]:
        removed = await entry.adapter.delete_field(request.identifier, request.key)
        return removed or None

    async def _registrations_leg(
        self, entry: RegistrationEntry, request: QueueRequest
    ) -> Optional[dict[str, Any]]:
        registrations = {}
        for identifier in entry.identifiers:
            registrations[identifier] = await entry.adapter.get_field(
                self._settings.services_info_key, entry.registration_field(identifier)
            )
        return registrations or None

    async def _ping_leg(self, entry: RegistrationEntry, request: QueueRequest) -> bool:
        return await entry.adapter.ping()

    async def _read(
        self, request: QueueRequest, stamp: Optional[str] = None, touch: bool = True
    ) -> DispatchOutcome:
        return await self._dispatch("read", request, partial(self._read_leg, stamp=stamp, touch=touch))

    # =========================================================================
    # Operations
    # =========================================================================

    async def push(
        self, queue_data: Optional[Mapping[str, Any]], callback: Optional[Callback] = None
    ) -> DispatchOutcome:
        """
        Insert `value` under `key` in the `identifier` group of every selected store.

        Args:
            queue_data: {"identifier", "key", "value", optional "store" list}
            callback: Receives the outcome; when omitted, errors are raised

        Raises:
            QueueError: Without a callback, when validation or any store failed
            TypeError: callback is not callable
        """
        self._check_callback(callback)
        # value and targetType are checked before the store filter
        error = (
            validate_queue_fields(queue_data, skip=(FIELD_STORE,))
            or validate_queue_value(
                queue_data.get(FIELD_VALUE), self._settings.require_target_type  # type: ignore[union-attr]
            )
            or validate_store_filter(queue_data)  # type: ignore[arg-type]
        )
        if error:
            outcome = self._invalid("push", error)
        else:
            outcome = await self._dispatch("push", build_request(queue_data), self._push_leg)  # type: ignore[arg-type]
        return await self._deliver(outcome, callback)

    async def read(self, queue_data: Optional[Mapping[str, Any]]) -> DispatchOutcome:
        """
        Read one key from every selected store.

        A store holding a non-empty value also gets its last-read time for
        the identifier updated. A missing value is simply absent from the
        results.
        """
        error = validate_queue_fields(queue_data)
        if error:
            return self._invalid("read", error)
        return await self._read(build_request(queue_data))  # type: ignore[arg-type]

    async def read_keys(self, queue_data: Optional[Mapping[str, Any]]) -> DispatchOutcome:
        """List the keys of the `identifier` group in every selected store."""
        error = validate_queue_fields(queue_data, skip=(FIELD_KEY,))
        if error:
            return self._invalid("read_keys", error)
        request = build_request(queue_data, skip=(FIELD_KEY,))  # type: ignore[arg-type]
        return await self._dispatch("read_keys", request, self._keys_leg)

    async def read_keys_and_values(self, queue_data: Optional[Mapping[str, Any]]) -> DispatchOutcome:
        """
        Read every key and value of the `identifier` group.

        Each store lists its keys, then reads them one at a time. Empty
        values are left out. All reads of one call share a single last-read
        time, taken before the keys are listed and written once per store.

        Returns:
            Outcome whose results map each store to a list of
            {"identifier", "key", "value"} dicts
        """
        error = validate_queue_fields(queue_data, skip=(FIELD_KEY,))
        if error:
            return self._invalid("read_keys_and_values", error)
        request = build_request(queue_data, skip=(FIELD_KEY,))  # type: ignore[arg-type]
        stamp = self._timestamp()
        return await self._dispatch(
            "read_keys_and_values", request, partial(self._items_leg, stamp=stamp)
        )

    async def delete_key(
        self, queue_data: Optional[Mapping[str, Any]], callback: Optional[Callback] = None
    ) -> DispatchOutcome:
        """
        Delete one key from every selected store.

        Results hold the number of removed fields for stores that had the
        key. Error delivery works as in push().
        """
        self._check_callback(callback)
        error = validate_queue_fields(queue_data)
        if error:
            outcome = self._invalid("delete_key", error)
        else:
            outcome = await self._dispatch("delete_key", build_request(queue_data), self._delete_leg)  # type: ignore[arg-type]
        return await self._deliver(outcome, callback)

    async def read_registrations(self, store: Optional[list[str]] = None) -> DispatchOutcome:
        """
        Read the registered-services records of this handler's identifiers.

        Returns:
            Outcome whose results map each store to {identifier: timestamp}
        """
        error = self._check_store_filter(store)
        if error:
            return self._invalid("read_registrations", error)
        request = self._store_request(store)
        return await self._dispatch(
            "read_registrations", request, self._registrations_leg, check_registration=False
        )

    async def ping(self, store: Optional[list[str]] = None) -> DispatchOutcome:
        """Check that every selected store answers."""
        error = self._check_store_filter(store)
        if error:
            return self._invalid("ping", error)
        return await self._dispatch(
            "ping", self._store_request(store), self._ping_leg, check_registration=False
        )

    @staticmethod
    def _check_store_filter(store: Optional[list[str]]) -> Optional[str]:
        if store is None:
            return None
        return validate_store_filter({FIELD_STORE: store})

    @staticmethod
    def _store_request(store: Optional[list[str]]) -> QueueRequest:
        fields: dict[str, Any] = {"identifier": "*"}
        if store is not None:
            fields[FIELD_STORE] = store
        return build_request(fields, skip=(FIELD_KEY,))

    def __repr__(self) -> str:
        return f"<QueueHandler stores={self.stores!r}>"


__all__ = ["QueueHandler"]
