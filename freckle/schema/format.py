"""Display formatting helpers for resource names and dates."""
import re
from datetime import datetime
from typing import Optional

_SEPARATORS = re.compile(r"[-_]")
_UPPER = re.compile(r"([A-Z])")
_WORD_START = re.compile(r"\b\w")


def to_title_case(value: str) -> str:
    """Convert camelCase / snake_case / kebab-case to Title Case.

    >>> to_title_case("creditHistory")
    'Credit History'
    """
    text = _SEPARATORS.sub(" ", value)
    text = _UPPER.sub(r" \1", text)
    text = _WORD_START.sub(lambda m: m.group(0).upper(), text)
    return text.strip()


def _parse_iso(value: str) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        # fromisoformat does not accept a trailing Z before Python 3.11
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_date(value: str) -> str:
    """Format an ISO date string as e.g. 'Jan 5, 2024, 09:30'."""
    parsed = _parse_iso(value)
    if parsed is None:
        return value
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}, {parsed.strftime('%H:%M')}"


def format_date_short(value: str) -> str:
    """Format an ISO date string as e.g. 'Jan 5, 2024' (no time)."""
    parsed = _parse_iso(value)
    if parsed is None:
        return value
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"
