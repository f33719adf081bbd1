"""Read-side computations over a ledger snapshot.

Everything here is a pure function of its arguments. Amount signs always come
from ``type``: an expense contributes ``-abs(amount)`` and income
``+abs(amount)``, whatever sign a legacy record stored.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from .categories import category_for
from .dates import DateLike, in_month, iso, month_bounds, parse_year_month, try_parse_date
from .models import (
    UNCATEGORIZED_ID,
    CategoryBreakdown,
    CategorySlice,
    Entry,
    EntryType,
    LedgerView,
    MonthlySeries,
    MonthlySummary,
)


def signed_amount(entry: Entry) -> int:
    magnitude = abs(entry.amount)
    return -magnitude if entry.type == "expense" else magnitude


def sum_signed(entries: Iterable[Entry]) -> int:
    return sum(signed_amount(e) for e in entries)


def daily_total(ledger: LedgerView, day: DateLike) -> int:
    """Signed total of one date's entries; ``0`` when the date has none."""

    return sum_signed(ledger.get(iso(day), ()))


def _month_dates(ledger: LedgerView, year_month: str) -> list[str]:
    """Dated keys of ``year_month`` in ascending calendar order."""

    parse_year_month(year_month)
    dated: list[tuple[date, str]] = []
    for key in ledger:
        d = try_parse_date(key)
        if d is not None and in_month(d, year_month):
            dated.append((d, key))
    dated.sort()
    return [key for _, key in dated]


def month_daily_totals(ledger: LedgerView, year_month: str) -> dict[str, int]:
    """Per-date signed totals for a month, in date order (calendar marks)."""

    return {key: sum_signed(ledger[key]) for key in _month_dates(ledger, year_month)}


def monthly_series(ledger: LedgerView, year_month: str) -> MonthlySeries:
    """Running total of daily totals across the dated days of ``year_month``.

    ``values[i] = values[i-1] + daily_total(labels[i])`` with an implicit
    starting value of ``0``.
    """

    totals = month_daily_totals(ledger, year_month)
    values: list[int] = []
    running = 0
    for t in totals.values():
        running += t
        values.append(running)
    return MonthlySeries(year_month=year_month, labels=tuple(totals), values=tuple(values))


def _month_entries(ledger: LedgerView, year_month: str) -> list[Entry]:
    return [e for key in _month_dates(ledger, year_month) for e in ledger[key]]


def category_breakdown(
    ledger: LedgerView, year_month: str, entry_type: EntryType
) -> CategoryBreakdown:
    """Per-category magnitude sums for one month and entry type.

    Groups appear in first-seen order. Entries without a category fall into
    ``"other"``. When the grand total is ``0`` there are no slices, so shares
    are never computed against a zero denominator.
    """

    if entry_type not in ("income", "expense"):
        raise ValueError(f"invalid entry type: {entry_type!r}")

    grouped: dict[str, int] = {}
    for e in _month_entries(ledger, year_month):
        if e.type != entry_type:
            continue
        key = e.category_id or UNCATEGORIZED_ID
        grouped[key] = grouped.get(key, 0) + abs(e.amount)

    grand_total = sum(grouped.values())
    if grand_total == 0:
        return CategoryBreakdown(year_month, entry_type, (), 0)

    slices = tuple(
        CategorySlice(
            category_id=cid,
            category=category_for(cid),
            total=total,
            share=total / grand_total,
        )
        for cid, total in grouped.items()
    )
    return CategoryBreakdown(year_month, entry_type, slices, grand_total)


def ledger_total(ledger: LedgerView) -> int:
    """Signed total of every entry in the ledger."""

    return sum(sum_signed(entries) for entries in ledger.values())


def monthly_summary(
    ledger: LedgerView, year_month: str, *, today: date | None = None
) -> MonthlySummary:
    """Income, expense and balance for a month plus the per-day allowance.

    ``remaining_days`` counts from ``today`` through the month's last day,
    inclusive: the whole month before it starts, ``0`` once it has ended.
    ``per_day_allowance`` is ``max(0, balance / remaining_days)``.
    """

    entries = _month_entries(ledger, year_month)
    income = sum(abs(e.amount) for e in entries if e.type == "income")
    expense = sum(abs(e.amount) for e in entries if e.type == "expense")
    balance = income - expense

    first, last = month_bounds(year_month)
    t = today or date.today()
    if t > last:
        remaining = 0
    elif t < first:
        remaining = (last - first).days + 1
    else:
        remaining = (last - t).days + 1

    allowance = max(0.0, balance / remaining) if remaining > 0 else 0.0
    return MonthlySummary(
        year_month=year_month,
        income=income,
        expense=expense,
        balance=balance,
        remaining_days=remaining,
        per_day_allowance=allowance,
    )


__all__ = [
    "category_breakdown",
    "daily_total",
    "ledger_total",
    "month_daily_totals",
    "monthly_series",
    "monthly_summary",
    "signed_amount",
    "sum_signed",
]
