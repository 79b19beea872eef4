from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Key/value blobs: ledger_storage
# ---------------------------


class LedgerStorageEntry(Base):
    """One durable value stored under a string key.

    The ledger keeps its whole transaction collection as a single JSON array
    under one key (see ``shop_ledger.persistence.STORAGE_KEY``). The payload is
    opaque text here; shape validation happens in the application layer.
    """

    __tablename__ = "ledger_storage"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=func.now(), onupdate=func.now()
    )


__all__ = [
    "Base",
    "LedgerStorageEntry",
]
