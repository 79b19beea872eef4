"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the key/value storage model used by ``shop_ledger``.
"""

from .ledger import Base, LedgerStorageEntry

__all__ = [
    "Base",
    "LedgerStorageEntry",
]
