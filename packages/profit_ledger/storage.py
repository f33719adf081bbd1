"""Key-value persistence backends for the ledger document.

The ledger is one JSON document under one key (``"profitData"``), replaced
wholesale on every save. Any object with ``get(key) -> str | None`` and
``set(key, value) -> None`` can back a :class:`~profit_ledger.store.LedgerStore`;
three implementations ship here:

- :class:`MemoryKeyValueStore`: a dict, for tests and embedding hosts.
- :class:`JsonFileKeyValueStore`: one file per key under a root directory.
  Writes target ``<key>.json.tmp`` first and then ``os.replace`` into place.
- :class:`SqlKeyValueStore`: rows in ``pl_kv_items`` through the shared
  ``db`` library (SQLAlchemy).

Backend failures surface as :class:`PersistenceError`.
"""

from __future__ import annotations

import contextlib
import os
import re
from pathlib import Path
from typing import Protocol, runtime_checkable

from db import create_schema
from db.client import session_scope
from db.models.kv import KvItem
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from .logging_setup import get_logger

PROFIT_DATA_KEY = "profitData"
DEFAULT_DATA_DIR = ".profit_ledger"

_KEY_RE = re.compile(r"^[A-Za-z0-9_.\-]+$")

_logger = get_logger("profit_ledger.storage")


class PersistenceError(RuntimeError):
    """The backing store could not be read or written."""


@runtime_checkable
class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


def _validate_key(key: str) -> str:
    """Keys become file names and primary keys; keep them to a safe alphabet."""

    if not isinstance(key, str) or not _KEY_RE.fullmatch(key) or key in {".", ".."}:
        raise ValueError(f"Invalid storage key: {key!r}")
    return key


# ----------------------------------------------------------------------------
# In-memory
# ----------------------------------------------------------------------------


class MemoryKeyValueStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(_validate_key(key))

    def set(self, key: str, value: str) -> None:
        self._data[_validate_key(key)] = value


# ----------------------------------------------------------------------------
# JSON files
# ----------------------------------------------------------------------------


class JsonFileKeyValueStore:
    """Store each key as ``<root>/<key>.json``.

    The root directory is created on first write. A missing file reads as
    ``None``.
    """

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self.root = Path(root).expanduser()

    def _path(self, key: str) -> Path:
        return self.root / f"{_validate_key(key)}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"failed to read {os.fspath(path)}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            tmp.write_text(value, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise PersistenceError(f"failed to write {os.fspath(path)}: {exc}") from exc
        _logger.debug("storage:file_write path=%s bytes=%d", os.fspath(path), len(value))


# ----------------------------------------------------------------------------
# SQL (SQLAlchemy via libs/db)
# ----------------------------------------------------------------------------


class SqlKeyValueStore:
    """Store documents in the ``pl_kv_items`` table.

    ``database_url`` falls back to ``DATABASE_URL``. The table must exist
    (see :func:`db.create_schema`).
    """

    def __init__(self, database_url: str | None = None) -> None:
        self.database_url = database_url

    def ensure_schema(self) -> None:
        try:
            create_schema(database_url=self.database_url)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"failed to create schema: {exc}") from exc

    def get(self, key: str) -> str | None:
        _validate_key(key)
        try:
            with session_scope(database_url=self.database_url) as session:
                return session.execute(
                    select(KvItem.value).where(KvItem.key == key)
                ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"failed to read key {key!r}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        _validate_key(key)
        try:
            with session_scope(database_url=self.database_url) as session:
                row = session.get(KvItem, key)
                if row is None:
                    session.add(KvItem(key=key, value=value))
                else:
                    row.value = value
                    row.updated_at = func.now()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"failed to write key {key!r}: {exc}") from exc
        _logger.debug("storage:sql_write key=%s bytes=%d", key, len(value))


# ----------------------------------------------------------------------------
# Selection
# ----------------------------------------------------------------------------


def open_store(
    *,
    database_url: str | None = None,
    data_dir: str | os.PathLike[str] | None = None,
) -> KeyValueStore:
    """Pick a backend from arguments and environment.

    SQL when ``database_url`` or ``DATABASE_URL`` is set; otherwise JSON files
    under ``data_dir``, ``PROFIT_LEDGER_DATA_DIR`` or ``./.profit_ledger``.
    """

    url = database_url or os.getenv("DATABASE_URL")
    if url:
        _logger.debug("storage:open backend=sql")
        return SqlKeyValueStore(url)
    root = data_dir or os.getenv("PROFIT_LEDGER_DATA_DIR") or (Path.cwd() / DEFAULT_DATA_DIR)
    _logger.debug("storage:open backend=file root=%s", os.fspath(root))
    return JsonFileKeyValueStore(root)


__all__ = [
    "DEFAULT_DATA_DIR",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "PROFIT_DATA_KEY",
    "PersistenceError",
    "SqlKeyValueStore",
    "open_store",
]
