# tests/test_utils.py
import datetime as dt
from decimal import Decimal

from utils import as_utc, format_whole_amount, offset_timezone, round_money, to_local, utcnow


def test_round_money_half_up():
    assert round_money(Decimal("0.015")) == 0.02
    assert round_money(Decimal("2.344")) == 2.34
    assert round_money(Decimal("-10.005")) == -10.01


def test_round_money_accepts_floats():
    assert round_money(12.5) == 12.5


def test_format_whole_amount_drops_sign_and_cents():
    assert format_whole_amount(Decimal("-10.00")) == "10"
    assert format_whole_amount(Decimal("28.50")) == "29"
    assert format_whole_amount(Decimal("0.49")) == "0"


def test_format_whole_amount_groups_thousands():
    assert format_whole_amount(Decimal("1234567.8")) == "1,234,568"


def test_utcnow_is_timezone_aware():
    now = utcnow()
    assert now.tzinfo is not None
    assert now.utcoffset() == dt.timedelta(0)


def test_as_utc_attaches_utc_to_naive_values():
    naive = dt.datetime(2026, 10, 17, 9, 30)
    assert as_utc(naive) == dt.datetime(2026, 10, 17, 9, 30, tzinfo=dt.timezone.utc)


def test_to_local_shifts_into_client_offset():
    moment = dt.datetime(2026, 10, 17, 2, 0, tzinfo=dt.timezone.utc)
    local = to_local(moment, offset_timezone(-300))
    assert local.date() == dt.date(2026, 10, 16)
    assert local.hour == 21


def test_offset_timezone_zero_is_utc():
    assert offset_timezone(0) is dt.timezone.utc
    assert offset_timezone(90).utcoffset(None) == dt.timedelta(minutes=90)
