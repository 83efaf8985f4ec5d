"""Shared field classification sets for entity rendering."""
import re
from typing import Any

# Fields hidden from table columns and detail views
HIDDEN_FIELDS = frozenset({
    "id", "metadata", "stats", "replies", "pages",
    "characterTemplates", "adHocCharacters", "characterIds",
    "userId",
})

# Fields rendered as badges
BADGE_FIELDS = frozenset({
    "status", "type", "role", "tier", "plan", "operationType",
})

# Fields always rendered as formatted dates
DATE_FIELDS = frozenset({
    "createdAt", "updatedAt", "resolvedAt", "lastActiveAt",
    "expiresAt", "timestamp", "startedAt", "endedAt", "reservedAt",
})

DATE_NAME_PATTERN = re.compile(r"(?:_at|At|Date|Time|Timestamp)$")
ISO_DATE_VALUE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T")


def is_date_field(key: str, value: Any) -> bool:
    """
    Check if a field holds dates

    Known date names always match; other names need a date-like suffix and an
    ISO-8601 date-time string value.
    """
    if key in DATE_FIELDS:
        return True
    if not isinstance(value, str):
        return False
    return bool(DATE_NAME_PATTERN.search(key) and ISO_DATE_VALUE_PATTERN.match(value))
