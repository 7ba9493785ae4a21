"""Utility functions for money rounding, timestamps, and month arithmetic."""
import calendar
import datetime as dt
from decimal import Decimal, ROUND_HALF_UP
from typing import Any


def round_money(dec: Decimal) -> float:
    """Round a Decimal to 2 decimal places with HALF_UP (normal money rounding)."""
    return float(Decimal(str(dec)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_whole_amount(dec: Decimal) -> str:
    """Absolute value rounded to whole units, with thousands separators."""
    whole = abs(Decimal(str(dec))).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{int(whole):,}"


def utcnow() -> dt.datetime:
    """Current time as an aware UTC datetime (the storage convention)."""
    return dt.datetime.now(dt.timezone.utc)


def as_utc(value: dt.datetime) -> dt.datetime:
    """Aware UTC view of a timestamp. Naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def to_local(value: dt.datetime, tz: dt.tzinfo = dt.timezone.utc) -> dt.datetime:
    return as_utc(value).astimezone(tz)


def offset_timezone(minutes: int) -> dt.timezone:
    """Fixed-offset zone for a client offset in minutes east of UTC."""
    if minutes == 0:
        return dt.timezone.utc
    return dt.timezone(dt.timedelta(minutes=minutes))


def normalize_iso_datetime(value: Any) -> dt.datetime:
    """Normalize a value to an aware UTC datetime or raise a ValueError.

    Accepts datetimes, dates (midnight UTC) and ISO 8601 strings, with or
    without a time part. Values without an offset are taken to be UTC.
    """
    if isinstance(value, str):
        try:
            value = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise ValueError("Invalid date format. Expected ISO 8601.")

    if isinstance(value, dt.datetime):
        return as_utc(value)

    if isinstance(value, dt.date):
        return dt.datetime.combine(value, dt.time.min, tzinfo=dt.timezone.utc)

    raise ValueError("Invalid date format. Expected ISO 8601.")


def days_in_month(day: dt.date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def days_remaining_in_month(day: dt.date) -> int:
    """Days left in the month of `day`, counting `day` itself."""
    return days_in_month(day) - day.day + 1


def is_same_month(a: dt.date, b: dt.date) -> bool:
    return a.year == b.year and a.month == b.month
