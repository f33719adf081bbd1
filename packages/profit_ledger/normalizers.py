"""Stored document <-> canonical ledger normalization.

The ``profitData`` document was migrated in place across app versions without
a migration step, so a single load may see several vintages side by side:

- ``{"2025-05-10": {"amount": 500, "type": "income"}}``: one object per date,
  no ``id``, ``type`` optional.
- ``{"2025-05-10": [{"id": "...", "amount": 500, "type": "income"}, ...]}``:
  the current array-of-entries shape.

:func:`normalize_ledger` upgrades every shape to the canonical
:data:`~profit_ledger.models.Ledger` and is total over its input: malformed
values are dropped (and counted) rather than raised. :func:`to_storage_document`
and :func:`serialize_ledger` are the inverse and always write the array shape,
so drift does not recur once a document has been rewritten.

Parsing of the raw text is kept separate (:func:`parse_document`) because a
JSON syntax error is the one failure the caller must decide about.
"""

from __future__ import annotations

import json
import secrets
import string
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from .dates import try_parse_date
from .logging_setup import get_logger
from .models import DEFAULT_ENTRY_TYPE, Entry, Ledger, LedgerView, StoredEntry

_logger = get_logger("profit_ledger.normalizers")

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LEN = 8


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class NormalizationReport:
    """Counts of what :func:`normalize_ledger` changed or dropped.

    ``upgraded`` is true when writing the canonical form back would change the
    stored document. ``rekeyed`` counts date keys re-spelled in ISO form and
    ``empty_dates`` counts keys holding an empty list.
    """

    entries: int = 0
    wrapped_single: int = 0
    ids_synthesized: int = 0
    types_defaulted: int = 0
    rekeyed: int = 0
    empty_dates: int = 0
    dropped: int = 0
    parse_failed: bool = False
    dropped_keys: list[str] = field(default_factory=list)

    @property
    def upgraded(self) -> bool:
        return bool(
            self.wrapped_single
            or self.ids_synthesized
            or self.types_defaulted
            or self.rekeyed
            or self.empty_dates
            or self.dropped
        )


@dataclass(frozen=True, slots=True)
class NormalizationResult:
    ledger: Ledger
    report: NormalizationReport


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def synthesize_id(date_key: str, taken: set[str] | None = None) -> str:
    """Return a new id: ``YYYYMMDD000000`` from the date plus a random suffix.

    Regenerates until the id is not in ``taken``.
    """

    prefix = date_key.replace("-", "") + "000000"
    while True:
        suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LEN))
        candidate = prefix + suffix
        if taken is None or candidate not in taken:
            return candidate


def _read_element(
    raw: Any,
    *,
    date_key: str,
    taken: set[str],
    report: NormalizationReport,
) -> Entry | None:
    if not isinstance(raw, Mapping):
        return None
    try:
        stored = StoredEntry.model_validate(raw)
    except ValidationError:
        _logger.debug("normalize:drop_element date=%s reason=invalid", date_key, exc_info=True)
        return None

    entry_id = stored.id
    if entry_id is None or entry_id in taken:
        if entry_id is not None:
            _logger.debug("normalize:duplicate_id date=%s id=%s", date_key, entry_id)
        entry_id = synthesize_id(date_key, taken)
        report.ids_synthesized += 1
    entry_type = stored.type
    if entry_type is None:
        entry_type = DEFAULT_ENTRY_TYPE
        report.types_defaulted += 1

    taken.add(entry_id)
    return Entry(
        id=entry_id,
        date=date_key,
        amount=stored.amount,
        type=entry_type,
        category_id=stored.category_id,
        memo=stored.memo,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_document(text: str | None) -> Any:
    """Decode the raw stored payload. ``None`` (nothing stored) reads as ``{}``.

    Raises :class:`json.JSONDecodeError` on invalid JSON.
    """

    if text is None:
        return {}
    return json.loads(text)


def normalize_ledger(raw: Any) -> NormalizationResult:
    """Upgrade a decoded document of any vintage into a canonical ledger.

    Key order of ``raw`` is preserved. Keys are re-spelled as ISO dates, so
    ``2025-6-1`` is stored under ``2025-06-01``; keys that are not dates are
    dropped. Never raises on malformed content.
    """

    report = NormalizationReport()
    ledger: Ledger = {}
    if not isinstance(raw, Mapping):
        _logger.warning(
            "normalize:not_an_object type=%s; using empty ledger", type(raw).__name__
        )
        return NormalizationResult(ledger, report)

    taken: set[str] = set()
    for key, value in raw.items():
        d = try_parse_date(key) if isinstance(key, str) else None
        if d is None:
            report.dropped += 1
            report.dropped_keys.append(str(key))
            _logger.debug("normalize:drop_key key=%r reason=not_a_date", key)
            continue
        date_key = d.isoformat()

        if isinstance(value, list):
            elements = value
        elif isinstance(value, Mapping):
            elements = [value]
            report.wrapped_single += 1
        else:
            report.dropped += 1
            report.dropped_keys.append(str(key))
            _logger.debug("normalize:drop_key key=%r reason=unknown_shape", key)
            continue

        if date_key != key:
            report.rekeyed += 1

        for element in elements:
            entry = _read_element(element, date_key=date_key, taken=taken, report=report)
            if entry is None:
                report.dropped += 1
                continue
            ledger.setdefault(date_key, []).append(entry)
            report.entries += 1

        if not elements:
            report.empty_dates += 1

    if report.dropped:
        _logger.info(
            "normalize:dropped count=%d keys=%s", report.dropped, ",".join(report.dropped_keys)
        )
    return NormalizationResult(ledger, report)


def to_storage_document(ledger: LedgerView) -> dict[str, list[dict[str, Any]]]:
    """Return the canonical JSON-ready document for ``ledger``.

    Empty date lists are omitted.
    """

    return {
        date_key: [e.to_storage() for e in entries]
        for date_key, entries in ledger.items()
        if entries
    }


def serialize_ledger(ledger: LedgerView) -> str:
    return json.dumps(to_storage_document(ledger), ensure_ascii=False, separators=(",", ":"))


__all__ = [
    "NormalizationReport",
    "NormalizationResult",
    "normalize_ledger",
    "parse_document",
    "serialize_ledger",
    "synthesize_id",
    "to_storage_document",
]
