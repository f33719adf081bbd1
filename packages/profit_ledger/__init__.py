"""Public interface for the ``profit_ledger`` package.

Re-exports the models, the ledger store, the aggregation and query functions
and the storage backends as the stable import surface. No runtime logic lives
here.
"""

from .aggregation import (
    category_breakdown,
    daily_total,
    ledger_total,
    month_daily_totals,
    monthly_series,
    monthly_summary,
    signed_amount,
)
from .categories import CATEGORIES, Category, categories_for_type, category_for
from .models import (
    CategoryBreakdown,
    CategorySlice,
    DatedEntry,
    DateGroup,
    Entry,
    EntryType,
    Ledger,
    MonthlySeries,
    MonthlySummary,
)
from .normalizers import (
    NormalizationReport,
    normalize_ledger,
    parse_document,
    serialize_ledger,
    to_storage_document,
)
from .queries import filter_entries, flatten, group_by_date
from .storage import (
    PROFIT_DATA_KEY,
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    PersistenceError,
    SqlKeyValueStore,
    open_store,
)
from .store import LedgerStore
from .validation import EntryDraft, EntryValidationError

__all__ = [
    # Store
    "LedgerStore",
    # Aggregation
    "category_breakdown",
    "daily_total",
    "ledger_total",
    "month_daily_totals",
    "monthly_series",
    "monthly_summary",
    "signed_amount",
    # Queries
    "filter_entries",
    "flatten",
    "group_by_date",
    # Normalization
    "NormalizationReport",
    "normalize_ledger",
    "parse_document",
    "serialize_ledger",
    "to_storage_document",
    # Categories
    "CATEGORIES",
    "Category",
    "categories_for_type",
    "category_for",
    # Models / types
    "CategoryBreakdown",
    "CategorySlice",
    "DateGroup",
    "DatedEntry",
    "Entry",
    "EntryDraft",
    "EntryType",
    "Ledger",
    "MonthlySeries",
    "MonthlySummary",
    # Storage / errors
    "PROFIT_DATA_KEY",
    "EntryValidationError",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "PersistenceError",
    "SqlKeyValueStore",
    "open_store",
]
