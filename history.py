"""Transaction history grouped by calendar day, newest first."""
import datetime as dt
from decimal import Decimal
from typing import Iterable

from models import Transaction, resolve_category
from utils import as_utc, round_money, to_local


def sort_newest_first(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Reverse-chronological order. Ties keep their input order."""
    return sorted(transactions, key=lambda t: as_utc(t.date), reverse=True)


def history_item(t: Transaction, tz: dt.tzinfo = dt.timezone.utc) -> dict:
    """JSON-ready view of one transaction, with amounts as numbers."""
    category = resolve_category(t.category)
    local = to_local(t.date, tz)
    return {
        "id": t.id,
        "amount": round_money(t.amount),
        "category": t.category,
        "category_name": category["name"],
        "icon": category["icon"],
        "description": t.description,
        "date": local.isoformat(),
        "time": local.strftime("%I:%M %p").lstrip("0"),
    }


def build_history(
    transactions: Iterable[Transaction],
    tz: dt.tzinfo = dt.timezone.utc,
) -> dict:
    """Group transactions by day for the history screen.

    Days are calendar dates in `tz`, the client's zone (UTC when the client
    sends no offset). Groups come newest day first and items inside a group
    keep the newest-first order. Empty input is flagged with ``is_empty``
    and no groups.
    """
    ordered = sort_newest_first(transactions)

    buckets: dict = {}
    for t in ordered:
        buckets.setdefault(to_local(t.date, tz).date(), []).append(t)

    groups = []
    grand_total = Decimal("0")
    for day, items in buckets.items():
        day_total = sum((Decimal(str(t.amount)) for t in items), Decimal("0"))
        grand_total += day_total
        groups.append(
            {
                "date": day.isoformat(),
                "label": f"{day:%A, %B} {day.day}",
                "total": round_money(day_total),
                "items": [history_item(t, tz) for t in items],
            }
        )

    return {
        "is_empty": not groups,
        "count": len(ordered),
        "total": round_money(grand_total),
        "groups": groups,
    }
