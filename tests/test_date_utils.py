# tests/test_date_utils.py
import os
import sys
import datetime as dt
import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from utils import (
    days_in_month,
    days_remaining_in_month,
    is_same_month,
    normalize_iso_datetime,
)


def test_normalize_valid_iso_datetime_string():
    d = normalize_iso_datetime("2026-10-17T09:30:00")
    assert d == dt.datetime(2026, 10, 17, 9, 30, tzinfo=dt.timezone.utc)


def test_normalize_date_only_string_is_midnight():
    d = normalize_iso_datetime("2026-10-17")
    assert d == dt.datetime(2026, 10, 17, 0, 0, tzinfo=dt.timezone.utc)


def test_normalize_aware_value_converted_to_utc():
    d = normalize_iso_datetime("2026-10-17T09:30:00+02:00")
    assert d == dt.datetime(2026, 10, 17, 7, 30, tzinfo=dt.timezone.utc)
    assert d.utcoffset() == dt.timedelta(0)

    z = normalize_iso_datetime("2026-10-17T09:30:00Z")
    assert z == dt.datetime(2026, 10, 17, 9, 30, tzinfo=dt.timezone.utc)


def test_normalize_date_instance():
    assert normalize_iso_datetime(dt.date(2026, 2, 3)) == dt.datetime(2026, 2, 3, tzinfo=dt.timezone.utc)


def test_normalize_invalid_month():
    with pytest.raises(ValueError) as exc:
        normalize_iso_datetime("2026-13-01")
    assert "Invalid date format" in str(exc.value)


def test_normalize_none_raises():
    with pytest.raises(ValueError):
        normalize_iso_datetime(None)


def test_days_in_month_handles_leap_years():
    assert days_in_month(dt.date(2024, 2, 10)) == 29
    assert days_in_month(dt.date(2026, 2, 10)) == 28
    assert days_in_month(dt.date(2026, 10, 1)) == 31


def test_days_remaining_counts_today():
    assert days_remaining_in_month(dt.date(2026, 10, 17)) == 15
    assert days_remaining_in_month(dt.date(2026, 10, 31)) == 1
    assert days_remaining_in_month(dt.date(2026, 10, 1)) == 31


def test_is_same_month():
    assert is_same_month(dt.date(2026, 10, 1), dt.date(2026, 10, 31))
    assert not is_same_month(dt.date(2026, 10, 1), dt.date(2025, 10, 1))
    assert not is_same_month(dt.date(2026, 9, 30), dt.date(2026, 10, 1))
