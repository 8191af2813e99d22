from __future__ import annotations

import copy
from datetime import date, datetime, timedelta, timezone
from typing import Optional, TypeVar, Union

T = TypeVar("T")

# Shared type for incoming timestamps: date, datetime, ISO8601 string or epoch milliseconds
TimestampInput = Union[date, datetime, str, int, float]

# Smallest step representable by datetime; used to force strictly increasing updated_at.
CLOCK_TICK = timedelta(microseconds=1)


# PUBLIC_INTERFACE
def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# PUBLIC_INTERFACE
def parse_timestamp(value: Optional[TimestampInput]) -> Optional[datetime]:
    """
    Normalize a date-like input into an aware UTC datetime.

    - None passes through.
    - datetime is converted to UTC (naive is assumed to be UTC).
    - date is promoted to midnight UTC.
    - int/float is read as milliseconds since the Unix epoch.
    - str is parsed as ISO8601 datetime or date; a trailing 'Z' is accepted.

    Raises:
        ValueError: if the value cannot be interpreted as a timestamp.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return ensure_utc(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, bool):
        raise ValueError("Invalid type for timestamp; expected date, datetime, ISO8601 string or epoch ms.")

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise ValueError("Epoch milliseconds out of range.") from e

    if isinstance(value, str):
        s = value.strip()
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            return ensure_utc(datetime.fromisoformat(s))
        except ValueError:
            try:
                d = date.fromisoformat(s)
            except ValueError as e:
                raise ValueError(
                    "Invalid timestamp format. Use ISO8601 date or datetime string "
                    "(e.g., '2025-01-31' or '2025-01-31T13:45:00Z')."
                ) from e
            return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)

    raise ValueError("Invalid type for timestamp; expected date, datetime, ISO8601 string or epoch ms.")


# PUBLIC_INTERFACE
def clone(value: T) -> T:
    """Return a deep, independent copy of an entity crossing a store boundary."""
    return copy.deepcopy(value)
