from profit_ledger.categories import (
    CATEGORIES,
    FALLBACK_ICON,
    NEUTRAL_COLOR,
    categories_for_type,
    category_for,
    is_known_category,
)


def test_table_ids_are_unique():
    ids = [c.id for c in CATEGORIES]
    assert len(ids) == len(set(ids))
    assert "other" in ids


def test_lookup_is_total():
    assert category_for("food").label == "Food"
    assert category_for(None).id == "other"

    unknown = category_for("yacht")
    assert unknown.id == "yacht"
    assert unknown.label == "Uncategorized"
    assert unknown.color == NEUTRAL_COLOR
    assert unknown.icon_name == FALLBACK_ICON


def test_known_categories():
    assert is_known_category("salary")
    assert not is_known_category("yacht")
    assert not is_known_category(None)


def test_categories_offered_per_type():
    expense_ids = {c.id for c in categories_for_type("expense")}
    income_ids = {c.id for c in categories_for_type("income")}

    assert {"food", "rent", "other"} <= expense_ids
    assert "salary" not in expense_ids
    assert {"salary", "side_job", "other"} <= income_ids
    assert "food" not in income_ids
