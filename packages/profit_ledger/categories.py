"""Static category reference data and lookups.

Categories are compiled in; users never create them. The lookup is total:
:func:`category_for` always returns a :class:`Category`, falling back to a
synthetic "uncategorized" variant for absent or unknown ids so that chart and
list views never have to handle a missing color or icon.

Exports
-------
- ``CATEGORIES``: the table, in display order.
- ``category_for(...)``: total lookup by id (``None`` allowed).
- ``categories_for_type(...)``: categories offered for an entry type.
- ``is_known_category(...)``: membership check used by input validation.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import UNCATEGORIZED_ID, EntryType

NEUTRAL_COLOR = "#999999"
FALLBACK_ICON = "help-circle"


@dataclass(frozen=True, slots=True)
class Category:
    """Display metadata for a category id.

    ``kind`` is the entry type the category is offered for when recording an
    entry; ``None`` means both.
    """

    id: str
    label: str
    icon_name: str
    color: str
    kind: EntryType | None = None


CATEGORIES: tuple[Category, ...] = (
    Category("food", "Food", "restaurant", "#FDD835", "expense"),
    Category("clothes", "Clothes", "shirt", "#42A5F5", "expense"),
    Category("hobby", "Hobbies", "game-controller", "#AB47BC", "expense"),
    Category("transport", "Transport", "bus", "#26C6DA", "expense"),
    Category("daily", "Daily goods", "cart", "#66BB6A", "expense"),
    Category("social", "Social", "people", "#FFA726", "expense"),
    Category("rent", "Rent", "home", "#EF5350", "expense"),
    Category("communication", "Communication", "wifi", "#7E57C2", "expense"),
    Category("other_expense", "Other expense", "ellipsis-horizontal-circle", "#BDBDBD", "expense"),
    Category("salary", "Salary", "wallet", "#29B6F6", "income"),
    Category("side_job", "Side job", "bicycle", "#AB47BC", "income"),
    Category("other_income", "Other income", "ellipsis-horizontal-circle", "#BDBDBD", "income"),
    Category(UNCATEGORIZED_ID, "Uncategorized", FALLBACK_ICON, NEUTRAL_COLOR, None),
)

_BY_ID: dict[str, Category] = {c.id: c for c in CATEGORIES}


def is_known_category(category_id: str | None) -> bool:
    return category_id is not None and category_id in _BY_ID


def category_for(category_id: str | None) -> Category:
    """Return display metadata for ``category_id``; never raises.

    ``None`` maps to the ``"other"`` bucket. Unknown ids keep their id (so
    distinct unknown groups stay distinct in a breakdown) but get the
    uncategorized label, icon and neutral color.
    """

    if category_id is None:
        return _BY_ID[UNCATEGORIZED_ID]
    known = _BY_ID.get(category_id)
    if known is not None:
        return known
    return Category(category_id, "Uncategorized", FALLBACK_ICON, NEUTRAL_COLOR, None)


def categories_for_type(entry_type: EntryType) -> list[Category]:
    """Categories to offer when recording an entry of ``entry_type``."""

    return [c for c in CATEGORIES if c.kind is None or c.kind == entry_type]


__all__ = [
    "CATEGORIES",
    "Category",
    "FALLBACK_ICON",
    "NEUTRAL_COLOR",
    "categories_for_type",
    "category_for",
    "is_known_category",
]
