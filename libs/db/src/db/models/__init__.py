"""Shared SQLAlchemy models registry for the workspace database.

Currently holds the key-value document table used by ``profit_ledger``.
"""

from .kv import Base, KvItem

__all__ = [
    "Base",
    "KvItem",
]
