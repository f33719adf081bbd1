from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Key-value documents: pl_kv_items
# ---------------------------


class KvItem(Base):
    """One whole document stored under a string key.

    The ledger is written as a single JSON blob per key, replaced wholesale on
    every save, so there is no per-entry table.
    """

    __tablename__ = "pl_kv_items"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
