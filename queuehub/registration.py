"""
Registration table.

Builds one RegistrationEntry per configured store. Each identifier is
recorded once in the store's registered-services hash under
"{service}_{identifier}" with the time it was first seen; an existing record
is left alone, so running construction again is harmless.
"""

import asyncio

from queuehub.backends import BackendAdapter
from queuehub.config import Settings
from queuehub.logging import get_logger, log_timing
from queuehub.models import RegistrationEntry
from queuehub.schema import StoreSpec

logger = get_logger("registration")


async def register_identifier(
    entry: RegistrationEntry,
    identifier: str,
    services_info: str,
    timestamp: str,
) -> bool:
    """
    Record `identifier` for the entry's store if it is not recorded yet.

    Returns:
        True if a first-seen record was written, False if one already existed
    """
    registration_field = entry.registration_field(identifier)
    existing = await entry.adapter.get_field(services_info, registration_field)
    if existing:
        return False
    await entry.adapter.set_field(services_info, registration_field, timestamp)
    logger.info(
        "identifier_registered",
        store=entry.kind,
        service=entry.service_name,
        identifier=identifier,
        first_seen=timestamp,
    )
    return True


async def _register_store(
    spec: StoreSpec,
    adapter: BackendAdapter,
    settings: Settings,
    timestamp: str,
) -> RegistrationEntry:
    entry = RegistrationEntry(kind=spec.kind, adapter=adapter, service_name=spec.service_name)
    results = await asyncio.gather(
        *(
            register_identifier(entry, identifier, settings.services_info_key, timestamp)
            for identifier in spec.identifiers
        ),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    # Only appended once every record is in place
    entry.identifiers.extend(spec.identifiers)
    logger.debug("store_registered", store=spec.kind, identifiers=len(entry.identifiers))
    return entry


@log_timing("store_registration")
async def build_registration_table(
    specs: list[StoreSpec],
    settings: Settings,
    timestamp: str,
) -> dict[str, RegistrationEntry]:
    """
    Instantiate every store adapter and register its identifiers.

    Stores, and the identifiers of each store, are registered concurrently.
    If any store fails, every adapter created here is closed and the first
    error is raised; no partial table is returned.

    Args:
        specs: Validated stores from parse_store_config()
        settings: Library settings
        timestamp: First-seen time written for new identifiers

    Returns:
        Mapping of store kind to its RegistrationEntry, in config order
    """
    adapters: list[BackendAdapter] = []
    try:
        for spec in specs:
            adapters.append(spec.adapter_cls.from_connector(spec.connector, settings))
    except Exception as e:
        logger.error("store_connect_failed", store=spec.kind, error=str(e))
        await asyncio.gather(*(adapter.close() for adapter in adapters))
        raise

    results = await asyncio.gather(
        *(
            _register_store(spec, adapter, settings, timestamp)
            for spec, adapter in zip(specs, adapters)
        ),
        return_exceptions=True,
    )

    failures = [result for result in results if isinstance(result, BaseException)]
    if failures:
        for spec, result in zip(specs, results):
            if isinstance(result, BaseException):
                logger.error("store_registration_failed", store=spec.kind, error=str(result))
        await asyncio.gather(*(adapter.close() for adapter in adapters))
        raise failures[0]

    return {entry.kind: entry for entry in results}  # type: ignore[union-attr]


__all__ = ["register_identifier", "build_registration_table"]
