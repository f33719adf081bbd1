"""Flat, filterable entry lists for list and search views."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .aggregation import sum_signed
from .dates import DateLike, parse_date
from .models import DatedEntry, DateGroup, LedgerView, TypeFilter

_TYPE_FILTERS = ("all", "income", "expense")


def flatten(ledger: LedgerView) -> Iterator[DatedEntry]:
    """Yield every entry with its date: ledger key order, then list order.

    A new generator is returned per call, so iteration can be restarted from
    the same snapshot.
    """

    for day, entries in ledger.items():
        for entry in entries:
            yield DatedEntry(date=day, entry=entry)


def filter_entries(
    entries: Iterable[DatedEntry],
    from_date: DateLike,
    to_date: DateLike,
    entry_type: TypeFilter = "all",
) -> Iterator[DatedEntry]:
    """Keep entries dated within ``[from_date, to_date]`` matching ``entry_type``.

    Dates are compared as calendar dates. Relative order is preserved and a
    reversed range matches nothing. Arguments are checked eagerly; the
    matching itself is lazy.
    """

    if entry_type not in _TYPE_FILTERS:
        raise ValueError(f"invalid type filter: {entry_type!r} (expected all/income/expense)")
    lo = parse_date(from_date)
    hi = parse_date(to_date)
    return (
        item
        for item in entries
        if lo <= parse_date(item.date) <= hi
        and (entry_type == "all" or item.entry.type == entry_type)
    )


def group_by_date(entries: Iterable[DatedEntry]) -> list[DateGroup]:
    """Partition entries back into per-date groups with a signed daily total.

    Groups appear in the order their date is first seen.
    """

    buckets: dict[str, list[DatedEntry]] = {}
    for item in entries:
        buckets.setdefault(item.date, []).append(item)
    return [
        DateGroup(date=day, entries=tuple(items), total=sum_signed(i.entry for i in items))
        for day, items in buckets.items()
    ]


__all__ = ["filter_entries", "flatten", "group_by_date"]
