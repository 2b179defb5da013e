"""
Request field validation.

Shape and non-blank checks shared by every queue operation. Nothing here
touches a store; callers turn a returned message into a ValidationError.
"""

from collections.abc import Collection, Mapping
from typing import Any, Optional

from queuehub.constants import (
    FIELD_IDENTIFIER,
    FIELD_KEY,
    FIELD_STORE,
    FIELD_TARGET_TYPE,
    FIELD_VALUE,
    MSG_IDENTIFIER,
    MSG_KEY,
    MSG_QUEUE_DATA,
    MSG_STORE,
    MSG_TARGET_TYPE,
    MSG_VALUE,
)
from queuehub.models import QueueRequest


def _is_blank_string(value: Any) -> bool:
    return not isinstance(value, str) or value.strip() == ""


def validate_queue_fields(
    fields: Optional[Mapping[str, Any]],
    skip: Collection[str] = (),
) -> Optional[str]:
    """
    Validate the fields every queue operation shares.

    Checks run in a fixed order and stop at the first failure:
    - the request is a non-empty mapping
    - identifier is a non-blank string
    - key is a non-blank string, unless "key" is in skip
    - store, when present, is a non-empty list of non-blank strings, unless
      "store" is in skip

    Args:
        fields: Caller supplied request
        skip: Field names exempt from the checks

    Returns:
        The failure message, or None when the request is well formed
    """
    if not fields or not isinstance(fields, Mapping):
        return MSG_QUEUE_DATA
    if _is_blank_string(fields.get(FIELD_IDENTIFIER)):
        return MSG_IDENTIFIER
    if FIELD_KEY not in skip and _is_blank_string(fields.get(FIELD_KEY)):
        return MSG_KEY
    if FIELD_STORE not in skip:
        return validate_store_filter(fields)
    return None


def validate_store_filter(fields: Mapping[str, Any]) -> Optional[str]:
    """Check the optional store filter is a non-empty list of non-blank strings."""
    if FIELD_STORE in fields:
        stores = fields[FIELD_STORE]
        if not isinstance(stores, (list, tuple)) or len(stores) == 0:
            return MSG_STORE
        if any(_is_blank_string(store) for store in stores):
            return MSG_STORE
    return None


def validate_queue_value(value: Any, require_target_type: bool = True) -> Optional[str]:
    """
    Validate the payload of an insert.

    The value must be a non-empty mapping. With require_target_type, it must
    also carry a non-empty "targetType" list naming where the item is headed.
    """
    if not value or not isinstance(value, Mapping):
        return MSG_VALUE
    if require_target_type:
        target_type = value.get(FIELD_TARGET_TYPE)
        if not isinstance(target_type, list) or len(target_type) == 0:
            return MSG_TARGET_TYPE
    return None


def build_request(fields: Mapping[str, Any], skip: Collection[str] = ()) -> QueueRequest:
    """
    Build a QueueRequest from fields that already passed validate_queue_fields.

    Identifier and key are trimmed; store names are trimmed, lower-cased and
    de-duplicated.
    """
    key = None
    if FIELD_KEY not in skip:
        key = fields[FIELD_KEY].strip()

    stores = None
    if FIELD_STORE in fields:
        stores = tuple(dict.fromkeys(store.strip().lower() for store in fields[FIELD_STORE]))

    return QueueRequest(
        identifier=fields[FIELD_IDENTIFIER].strip(),
        key=key,
        value=fields.get(FIELD_VALUE),
        stores=stores,
    )


__all__ = [
    "validate_queue_fields",
    "validate_store_filter",
    "validate_queue_value",
    "build_request",
]
