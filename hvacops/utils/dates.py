from datetime import date, datetime, timedelta
from typing import Any, Optional, Tuple
from zoneinfo import ZoneInfo

from pydantic import TypeAdapter, ValidationError

from hvacops.core.config import settings

_date_adapter = TypeAdapter(date)


def business_today() -> date:
    """Current calendar date in the business time zone."""
    return datetime.now(ZoneInfo(settings.BUSINESS_TIMEZONE)).date()


def current_month(today: Optional[date] = None) -> str:
    today = today or business_today()
    return f"{today.year}-{today.month:02d}"


def parse_date_field(value: Any) -> Tuple[Optional[date], bool]:
    """Parse a loosely typed date value.

    Returns ``(parsed, invalid)``. Empty values are absent and not invalid;
    anything that cannot be read as a calendar date comes back as
    ``(None, True)``. Accepts ``YYYY-MM-DD`` plus the ``.`` and ``/``
    separated spellings and ISO datetimes (time of day is dropped).
    """
    if value is None:
        return None, False
    if isinstance(value, datetime):
        return value.date(), False
    if isinstance(value, date):
        return value, False
    if not isinstance(value, str):
        return None, True

    text = value.strip()
    if not text:
        return None, False
    if "T" in text:
        text = text.split("T", 1)[0]
    text = text.replace(".", "-").replace("/", "-")

    try:
        return _date_adapter.validate_python(text), False
    except ValidationError:
        return None, True


def days_diff(a: date, b: date) -> int:
    """Whole days ``a - b`` (positive when ``a`` is later)."""
    return (a - b).days


def tomorrow_of(today: date) -> date:
    return today + timedelta(days=1)
