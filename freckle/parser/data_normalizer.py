"""Extract the record list from API response payloads of any wrapping convention."""
from enum import Enum
from typing import Any, Dict, List, Optional

# Checked in this order; the first non-empty array of objects wins
WRAPPER_KEYS = ("points", "data", "items", "results", "records", "entries", "rows")


class PayloadShape(str, Enum):
    """Recognized top-level shapes of a decoded JSON payload"""

    RECORD_ARRAY = "record-array"
    EMPTY_ARRAY = "empty-array"
    SCALAR_ARRAY = "scalar-array"
    WRAPPER_OBJECT = "wrapper-object"
    SINGLETON_OBJECT = "singleton-object"
    OTHER = "other"


def _is_record_list(value: Any) -> bool:
    return isinstance(value, list) and len(value) > 0 and isinstance(value[0], dict)


def find_wrapper_key(payload: Dict[str, Any]) -> Optional[str]:
    """Return the first wrapper key holding a non-empty list of records."""
    for key in WRAPPER_KEYS:
        if _is_record_list(payload.get(key)):
            return key
    return None


def classify_payload(payload: Any) -> PayloadShape:
    """Determine which recognized shape a payload has."""
    if isinstance(payload, list):
        if not payload:
            return PayloadShape.EMPTY_ARRAY
        if isinstance(payload[0], dict):
            return PayloadShape.RECORD_ARRAY
        return PayloadShape.SCALAR_ARRAY

    if isinstance(payload, dict):
        if find_wrapper_key(payload) is not None:
            return PayloadShape.WRAPPER_OBJECT
        return PayloadShape.SINGLETON_OBJECT

    return PayloadShape.OTHER


def extract_items(payload: Any) -> Optional[List[Dict[str, Any]]]:
    """
    Extract the primary list of records from a response payload.

    Handles direct arrays, ``{"data": [...]}``-style wrappers and singleton
    objects (returned as a one-element list).

    Args:
        payload: Decoded JSON body

    Returns:
        List of records, ``[]`` for an empty array, or None when the payload
        is not record-shaped.
    """
    if payload is None:
        return None

    shape = classify_payload(payload)

    if shape is PayloadShape.RECORD_ARRAY:
        return payload
    if shape is PayloadShape.EMPTY_ARRAY:
        return []
    if shape is PayloadShape.WRAPPER_OBJECT:
        return payload[find_wrapper_key(payload)]
    if shape is PayloadShape.SINGLETON_OBJECT:
        return [payload]
    # SCALAR_ARRAY and OTHER
    return None
