"""db: shared database library (SQLAlchemy).

Public exports
--------------
- ``Base`` and ``metadata`` for schema creation
- ORM models in ``db.models.kv`` (re-exported for convenience)
- ``create_schema`` to create all tables on a given database
"""

from __future__ import annotations

from .client import get_engine
from .models.kv import Base, KvItem

metadata = Base.metadata


def create_schema(*, database_url: str | None = None) -> None:
    """Create every table known to ``metadata`` (no-op for existing tables)."""

    metadata.create_all(bind=get_engine(database_url=database_url))


__all__ = [
    "Base",
    "metadata",
    "KvItem",
    "create_schema",
]
