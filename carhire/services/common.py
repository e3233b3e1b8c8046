"""Shared service helpers."""

from datetime import date, datetime, timezone
from typing import Optional
from urllib.parse import urlparse

from carhire.models.records import to_date
from carhire.models.store import Store


def _store() -> Store:
    """Get the singleton store instance."""
    return Store.instance()


def _today() -> date:
    """Current date in UTC, the clock booking timestamps are normalised to."""
    return datetime.now(timezone.utc).date()


def parse_optional_date(value) -> Optional[date]:
    """Parse a form field into a date; blank input gives None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return to_date(value)


def to_float_safe(value) -> Optional[float]:
    """Safely convert to float; return None if invalid."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def norm(value: Optional[str]) -> str:
    """Normalize a choice value to lowercase; return '' if None."""
    return (value or "").strip().lower()


def _lc(s):
    """Safe lowercase for case-insensitive compare."""
    return (s or "").lower()


def valid_image_url(s: Optional[str]) -> bool:
    """Accept /static/... or an absolute http(s) URL."""
    if not s:
        return False
    s = s.strip()
    if s.startswith("/static/"):
        return True
    u = urlparse(s)
    return u.scheme in ("http", "https") and bool(u.netloc)
