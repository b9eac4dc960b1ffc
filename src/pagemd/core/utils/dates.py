"""Lenient date parsing for front matter and filter bounds"""

from datetime import date, datetime
from typing import Any


_FALLBACK_FORMATS = ("%Y/%m/%d", "%Y-%m-%d %H:%M:%S", "%B %d, %Y", "%b %d, %Y", "%d %B %Y")


def parse_date(value: Any) -> date | None:
    """Return the calendar date for value, or None if it cannot be parsed."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def to_iso(value: Any) -> str:
    """Render a YAML-loaded date/datetime as ISO text; other values via str()."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)
