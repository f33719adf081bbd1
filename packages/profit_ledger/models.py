"""Data models and type aliases for ``profit_ledger``.

The persisted document is a JSON object keyed by ISO date. Its values drifted
across app versions (single object vs. list, optional ``type``), so two entry
models live here:

- :class:`StoredEntry` reads one stored element leniently, whatever its vintage.
- :class:`Entry` is the canonical, immutable in-memory record.

Derived views returned by the aggregator and query engine are plain frozen
dataclasses with no behavior beyond small convenience properties.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Entry types
# ---------------------------------------------------------------------------

EntryType = Literal["income", "expense"]
TypeFilter = Literal["all", "income", "expense"]

ENTRY_TYPES: tuple[str, ...] = ("income", "expense")

# Missing ``type`` on a stored record means expense. Older revisions of the
# app disagreed (some assumed income); expense is the most recent convention.
DEFAULT_ENTRY_TYPE: EntryType = "expense"

# Aggregation-time bucket for entries without a category.
UNCATEGORIZED_ID = "other"


# ---------------------------------------------------------------------------
# Canonical entry
# ---------------------------------------------------------------------------


class Entry(BaseModel):
    """One income or expense transaction recorded on a date.

    ``amount`` is a magnitude in the smallest currency unit. Legacy documents
    may carry signed values; every aggregation uses ``abs(amount)`` and lets
    ``type`` decide the sign.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    id: str
    date: str
    amount: int
    type: EntryType = DEFAULT_ENTRY_TYPE
    category_id: str | None = Field(default=None, alias="categoryId")
    memo: str = ""

    @property
    def is_expense(self) -> bool:
        return self.type == "expense"

    def to_storage(self) -> dict[str, Any]:
        """Return the element as written to the document (no ``date``)."""

        out: dict[str, Any] = {"id": self.id, "amount": self.amount, "type": self.type}
        if self.category_id is not None:
            out["categoryId"] = self.category_id
        out["memo"] = self.memo
        return out


class StoredEntry(BaseModel):
    """Lenient reader for a single stored element of any historical shape.

    Unknown keys are ignored. Blank ``id``/``categoryId`` read as absent and a
    missing ``memo`` reads as ``""``. ``amount`` must be integral; booleans are
    rejected even though they are ints in Python.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str | None = None
    amount: int
    type: EntryType | None = None
    category_id: str | None = Field(default=None, alias="categoryId")
    memo: str = ""

    @field_validator("id", "category_id", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if v is None:
            return None
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def _reject_bool_amount(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("amount must be a number")
        return v

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            s = v.strip().lower()
            return s or None
        return v

    @field_validator("memo", mode="before")
    @classmethod
    def _memo_text(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


# ---------------------------------------------------------------------------
# Ledger aliases
# ---------------------------------------------------------------------------

type Ledger = dict[str, list[Entry]]
"""Mutable ledger: ISO date -> entries in creation order."""

type LedgerView = Mapping[str, Sequence[Entry]]
"""Read-only ledger as accepted by the aggregator and query engine."""


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MonthlySeries:
    """Cumulative signed totals for the dated days of one month.

    ``labels`` are ISO dates in ascending order; ``values[i]`` is the running
    total through ``labels[i]``.
    """

    year_month: str
    labels: tuple[str, ...]
    values: tuple[int, ...]

    @property
    def net_total(self) -> int:
        return self.values[-1] if self.values else 0

    @property
    def day_labels(self) -> tuple[str, ...]:
        """Chart-axis labels in ``M/D`` form."""

        out: list[str] = []
        for label in self.labels:
            _, m, d = label.split("-")
            out.append(f"{int(m)}/{int(d)}")
        return tuple(out)


@dataclass(frozen=True, slots=True)
class CategorySlice:
    category_id: str
    category: Any  # categories.Category; typed loosely to avoid an import cycle
    total: int
    share: float


@dataclass(frozen=True, slots=True)
class CategoryBreakdown:
    year_month: str
    type: EntryType
    slices: tuple[CategorySlice, ...]
    grand_total: int


@dataclass(frozen=True, slots=True)
class DatedEntry:
    """An entry as seen by list views: the entry plus its partition date."""

    date: str
    entry: Entry

    @property
    def id(self) -> str:
        return self.entry.id

    @property
    def type(self) -> EntryType:
        return self.entry.type


@dataclass(frozen=True, slots=True)
class DateGroup:
    date: str
    entries: tuple[DatedEntry, ...]
    total: int


@dataclass(frozen=True, slots=True)
class MonthlySummary:
    """Month-level income/expense figures and the spendable amount per day."""

    year_month: str
    income: int
    expense: int
    balance: int
    remaining_days: int
    per_day_allowance: float


__all__ = [
    "DEFAULT_ENTRY_TYPE",
    "ENTRY_TYPES",
    "UNCATEGORIZED_ID",
    "CategoryBreakdown",
    "CategorySlice",
    "DateGroup",
    "DatedEntry",
    "Entry",
    "EntryType",
    "Ledger",
    "LedgerView",
    "MonthlySeries",
    "MonthlySummary",
    "StoredEntry",
    "TypeFilter",
]
