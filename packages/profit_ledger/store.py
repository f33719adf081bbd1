"""The ledger store: the only path through which entries change.

Scope:
- ``load``: read the stored document, normalize it, replace the in-memory
  ledger wholesale.
- ``upsert`` / ``remove``: build the next ledger from the current one, write
  the *whole* document, and only then swap it in.

All three run under one re-entrant lock per store, so a second mutation cannot
start its read-modify-write cycle while the previous write is still in flight.
A failed write raises :class:`~profit_ledger.storage.PersistenceError` and
leaves the in-memory ledger as it was; callers may ``load()`` to resync.
"""

from __future__ import annotations

import json
import threading
import uuid
from collections.abc import Mapping
from typing import Any

from .dates import DateLike, iso
from .logging_setup import get_logger
from .models import Entry, Ledger
from .normalizers import (
    NormalizationReport,
    normalize_ledger,
    parse_document,
    serialize_ledger,
)
from .storage import PROFIT_DATA_KEY, KeyValueStore, PersistenceError
from .validation import EntryDraft, EntryValidationError, validate_draft

_logger = get_logger("profit_ledger.store")


def _copy(ledger: Ledger) -> Ledger:
    # Entries are immutable; copying the lists is enough.
    return {day: list(entries) for day, entries in ledger.items()}


def _locate(ledger: Ledger, entry_id: str) -> tuple[str, int] | None:
    for day, entries in ledger.items():
        for i, e in enumerate(entries):
            if e.id == entry_id:
                return day, i
    return None


class LedgerStore:
    """Owns the canonical in-memory ledger for one stored document.

    Parameters
    ----------
    backend:
        Any :class:`~profit_ledger.storage.KeyValueStore`.
    key:
        Document key; defaults to ``"profitData"``.
    """

    def __init__(self, backend: KeyValueStore, *, key: str = PROFIT_DATA_KEY) -> None:
        self._backend = backend
        self._key = key
        self._ledger: Ledger = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def ledger(self) -> Ledger:
        """A snapshot of the current ledger (safe to keep and iterate)."""

        with self._lock:
            return _copy(self._ledger)

    def get(self, day: DateLike) -> list[Entry]:
        with self._lock:
            return list(self._ledger.get(iso(day), ()))

    def find(self, entry_id: str) -> Entry | None:
        with self._lock:
            loc = _locate(self._ledger, entry_id)
            if loc is None:
                return None
            day, i = loc
            return self._ledger[day][i]

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def _read(self) -> str | None:
        try:
            return self._backend.get(self._key)
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError(f"failed to read {self._key!r}: {exc}") from exc

    def load(self, *, write_back: bool = False) -> NormalizationReport:
        """Replace the in-memory ledger with the stored document.

        Invalid JSON loads as an empty ledger (``report.parse_failed``) with a
        warning. With ``write_back=True`` an upgraded document is rewritten in
        canonical form right away; a document that failed to parse is never
        overwritten.
        """

        with self._lock:
            text = self._read()
            try:
                raw = parse_document(text)
            except json.JSONDecodeError:
                _logger.warning(
                    "store:parse_failed key=%s; starting from an empty ledger",
                    self._key,
                    exc_info=True,
                )
                self._ledger = {}
                return NormalizationReport(parse_failed=True)

            result = normalize_ledger(raw)
            if write_back and result.report.upgraded:
                self._write(result.ledger)
                _logger.info(
                    "store:upgraded key=%s wrapped=%d ids=%d types=%d dropped=%d",
                    self._key,
                    result.report.wrapped_single,
                    result.report.ids_synthesized,
                    result.report.types_defaulted,
                    result.report.dropped,
                )
            self._ledger = result.ledger
            _logger.debug(
                "store:loaded key=%s dates=%d entries=%d",
                self._key,
                len(self._ledger),
                result.report.entries,
            )
            return result.report

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _write(self, ledger: Ledger) -> None:
        payload = serialize_ledger(ledger)
        try:
            self._backend.set(self._key, payload)
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError(f"failed to write {self._key!r}: {exc}") from exc

    def upsert(self, day: DateLike, draft: EntryDraft | Mapping[str, Any]) -> Entry:
        """Create or edit one entry under ``day`` and persist the whole ledger.

        - ``draft.entry_id`` found under ``day``: replaced in place.
        - found under another date: moved (removed there, appended here).
        - otherwise: appended, with a fresh id when none was given.

        Raises :class:`EntryValidationError` before touching anything when the
        draft is invalid, and :class:`PersistenceError` when the write fails.
        """

        valid = validate_draft(draft)
        try:
            day_key = iso(day)
        except ValueError as exc:
            raise EntryValidationError({"date": str(exc)}) from exc
        if valid.date is not None and valid.date != day_key:
            raise EntryValidationError(
                {"date": f"draft date {valid.date} does not match {day_key}"}
            )

        with self._lock:
            nxt = _copy(self._ledger)
            entry = Entry(
                id=valid.entry_id or uuid.uuid4().hex,
                date=day_key,
                amount=valid.amount,
                type=valid.type,
                category_id=valid.category_id,
                memo=valid.memo,
            )

            loc = _locate(nxt, entry.id) if valid.entry_id else None
            if loc is not None and loc[0] == day_key:
                nxt[day_key][loc[1]] = entry
                action = "replace"
            else:
                if loc is not None:
                    old_day, i = loc
                    del nxt[old_day][i]
                    if not nxt[old_day]:
                        del nxt[old_day]
                    action = "move"
                else:
                    action = "append"
                nxt.setdefault(day_key, []).append(entry)

            self._write(nxt)
            self._ledger = nxt
            _logger.info("store:upsert action=%s date=%s id=%s", action, day_key, entry.id)
            return entry

    def remove(self, day: DateLike, entry_id: str) -> bool:
        """Delete one entry and persist. Returns ``False`` when it is not there.

        A date whose list becomes empty is removed from the document.
        """

        day_key = iso(day)
        with self._lock:
            entries = self._ledger.get(day_key, [])
            idx = next((i for i, e in enumerate(entries) if e.id == entry_id), None)
            if idx is None:
                _logger.debug("store:remove_missing date=%s id=%s", day_key, entry_id)
                return False

            nxt = _copy(self._ledger)
            del nxt[day_key][idx]
            if not nxt[day_key]:
                del nxt[day_key]

            self._write(nxt)
            self._ledger = nxt
            _logger.info("store:remove date=%s id=%s", day_key, entry_id)
            return True


__all__ = ["LedgerStore"]
