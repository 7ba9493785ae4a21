"""Daily budget derivation behind the dashboard gauge.

The budget period is the current calendar month. The profile's monthly
baseline (income minus debts minus fixed costs), less whatever was spent this
month on other days, is spread evenly over the days left in the month
(today included). That share is today's allowance, never below zero, and the
gauge shows the allowance minus today's spending.
"""
import datetime as dt
from decimal import Decimal
from typing import Any, Iterable, Optional

from history import history_item, sort_newest_first
from models import FinancialProfile, Transaction
from utils import (
    days_in_month,
    days_remaining_in_month,
    format_whole_amount,
    is_same_month,
    round_money,
    to_local,
    utcnow,
)

RECENT_LIMIT = 4


class ProfileMissingError(Exception):
    """Raised when a budget is requested for a user without a profile."""


def _to_decimal(value: Any) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def initial_available(profile: Optional[FinancialProfile]) -> Decimal:
    """Money available for the month once debts and fixed costs are out."""
    if profile is None:
        raise ProfileMissingError("Profile not found")
    return (
        _to_decimal(profile.base_income)
        - _to_decimal(profile.pre_deducted)
        - _to_decimal(profile.fixed_costs)
    )


def daily_allowance(
    profile: Optional[FinancialProfile],
    spent_other_days: Decimal,
    today: dt.date,
) -> Decimal:
    """Today's share of what is left this month, clamped at zero.

    Overspending shows up on the gauge (danger state), not as a negative
    allowance.
    """
    remaining = initial_available(profile) - _to_decimal(spent_other_days)
    if remaining <= 0:
        return Decimal("0")
    return remaining / Decimal(days_remaining_in_month(today))


def compute_gauge(allowance: Any, amounts: Iterable[Any]) -> dict:
    """Allowance minus spending, plus how the gauge should show it.

    The value itself is never clamped. The display is the absolute value in
    whole units and the danger flag is set at zero or below.
    """
    spent = sum((_to_decimal(a) for a in amounts), Decimal("0"))
    value = _to_decimal(allowance) - spent
    return {
        "value": round_money(value),
        "display": format_whole_amount(value),
        "is_danger": value <= 0,
    }


def compute_budget_snapshot(
    profile: Optional[FinancialProfile],
    transactions: Iterable[Transaction],
    now: Optional[dt.datetime] = None,
    tz: dt.tzinfo = dt.timezone.utc,
) -> dict:
    """Everything the dashboard needs for one user at `now`.

    "Today" and the month are calendar dates in `tz`.
    """
    if profile is None:
        raise ProfileMissingError("Profile not found")
    if now is None:
        now = utcnow()
    today = to_local(now, tz).date()

    transactions = list(transactions)

    spent_today = Decimal("0")
    spent_other_days = Decimal("0")
    for t in transactions:
        day = to_local(t.date, tz).date()
        if not is_same_month(day, today):
            continue
        if day == today:
            spent_today += _to_decimal(t.amount)
        else:
            spent_other_days += _to_decimal(t.amount)

    available = initial_available(profile)
    allowance = daily_allowance(profile, spent_other_days, today)
    spent_month = spent_today + spent_other_days
    month_days = days_in_month(today)

    return {
        "date": today.isoformat(),
        "initial_available": round_money(available),
        "spent_month": round_money(spent_month),
        "spent_today": round_money(spent_today),
        "real_balance": round_money(available - spent_month),
        "days_in_month": month_days,
        "days_remaining": days_remaining_in_month(today),
        "daily_allowance": round_money(allowance),
        "gauge": compute_gauge(allowance, [spent_today]),
        "gauge_max": round_money(available / Decimal(month_days) * Decimal("1.5")),
        "recent": [history_item(t, tz) for t in sort_newest_first(transactions)[:RECENT_LIMIT]],
        "transaction_count": len(transactions),
    }
