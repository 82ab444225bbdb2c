from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Optional

import pytz

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def parse_iso_datetime(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid datetime (ISO 8601): {value!r}")


def parse_hhmm(value: str) -> time:
    """Parse an "HH:MM" school clock time."""
    try:
        return datetime.strptime((value or "").strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError(f"Invalid time (HH:MM): {value!r}")


def now_local() -> datetime:
    """Current time as an aware UTC datetime.

    Note: Wrapped so tests can patch/mocked easier. Callers convert it with
    `to_school_local` before doing any wall-clock arithmetic.
    """
    return datetime.now(pytz.UTC)


def to_school_local(now: datetime, timezone: Optional[str]) -> datetime:
    """Express `now` as a naive wall-clock time of the school, in whole seconds.

    Aware datetimes are converted to the school timezone, or to the server's local
    zone when the school names none. Naive ones are taken to already be school-local.
    DATETIME columns hold whole seconds, so microseconds are dropped here.
    """
    if now.tzinfo is not None:
        if timezone:
            now = now.astimezone(pytz.timezone(timezone))
        else:
            now = now.astimezone()
    # Naive for database compatibility.
    return now.replace(tzinfo=None, microsecond=0)


def at_time(day: date, hhmm: str) -> datetime:
    return datetime.combine(day, parse_hhmm(hhmm))


def whole_minutes(delta: timedelta) -> int:
    """Minutes in `delta`, truncated toward zero."""
    return int(delta.total_seconds() / 60)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)
