from datetime import date

import pytest

from profit_ledger.models import DatedEntry, Entry
from profit_ledger.queries import filter_entries, flatten, group_by_date


def _e(id_, day, amount, type_="expense"):
    return Entry(id=id_, date=day, amount=amount, type=type_)


def _ledger():
    return {
        "2025-06-01": [_e("a", "2025-06-01", 1000, "income"), _e("c", "2025-06-01", 300)],
        "2025-06-02": [_e("b", "2025-06-02", 400)],
        "2025-06-10": [_e("d", "2025-06-10", 50, "income")],
    }


def test_flatten_preserves_key_then_list_order():
    items = list(flatten(_ledger()))
    assert [(i.date, i.id) for i in items] == [
        ("2025-06-01", "a"),
        ("2025-06-01", "c"),
        ("2025-06-02", "b"),
        ("2025-06-10", "d"),
    ]
    assert isinstance(items[0], DatedEntry)
    assert items[0].type == "income"


def test_flatten_is_restartable():
    ledger = _ledger()
    assert list(flatten(ledger)) == list(flatten(ledger))
    assert list(flatten({})) == []


def test_filter_single_day_income_then_group():
    matching = filter_entries(flatten(_ledger()), "2025-06-01", "2025-06-01", "income")
    groups = group_by_date(matching)

    assert len(groups) == 1
    g = groups[0]
    assert g.date == "2025-06-01"
    assert [i.id for i in g.entries] == ["a"]
    assert g.total == 1000


def test_filter_range_and_type():
    ledger = _ledger()

    expenses = list(filter_entries(flatten(ledger), "2025-06-01", "2025-06-30", "expense"))
    assert [i.id for i in expenses] == ["c", "b"]

    everything = list(filter_entries(flatten(ledger), "2025-06-02", date(2025, 6, 10)))
    assert [i.id for i in everything] == ["b", "d"]


def test_reversed_range_matches_nothing():
    assert list(filter_entries(flatten(_ledger()), "2025-06-30", "2025-06-01")) == []


def test_dates_compare_as_calendar_dates():
    # Lexically "2025-6-9" > "2025-06-10"; as dates it is before.
    matching = filter_entries(flatten(_ledger()), "2025-6-2", "2025-6-9")
    assert [i.id for i in matching] == ["b"]


def test_bad_arguments_raise_immediately():
    with pytest.raises(ValueError):
        filter_entries(flatten(_ledger()), "2025-06-01", "2025-06-30", "refunds")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        filter_entries(flatten(_ledger()), "yesterday", "2025-06-30")


def test_group_by_date_totals_are_signed():
    groups = group_by_date(flatten(_ledger()))

    assert [(g.date, g.total) for g in groups] == [
        ("2025-06-01", 700),
        ("2025-06-02", -400),
        ("2025-06-10", 50),
    ]
    assert group_by_date([]) == []
