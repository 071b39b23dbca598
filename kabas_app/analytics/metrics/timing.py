"""Timestamp parsing and hour arithmetic (pure functions)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import pandas as pd
import pytz

from kabas_app.core.config import HOURS_PRECISION, TIMEZONE

SECONDS_PER_HOUR = 3600.0


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO 8601 string (or datetime) into a UTC-aware datetime.

    Returns None when the input is empty, not a string or datetime, or cannot
    be parsed.
    """
    if not isinstance(value, (str, datetime)) or value == "":
        return None
    ts = pd.to_datetime(value, utc=True, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with parsed timestamps."""
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value


def hours_between(start: datetime, end: datetime) -> float:
    """Elapsed hours from ``start`` to ``end``, clamped at zero."""
    seconds = (ensure_aware(end) - ensure_aware(start)).total_seconds()
    return max(0.0, seconds / SECONDS_PER_HOUR)


def round_hours(value: float, digits: int = HOURS_PRECISION) -> float:
    return round(float(value), digits)


def format_local(value: Any, fmt: str = "%Y-%m-%d %H:%M %Z") -> str:
    """Render a timestamp in the display timezone (``config.TIMEZONE``)."""
    ts = parse_timestamp(value)
    if ts is None:
        return ""
    return ts.astimezone(pytz.timezone(TIMEZONE)).strftime(fmt)
