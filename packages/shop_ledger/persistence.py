# ruff: noqa: I001
"""Durable local storage for the transaction collection.

The whole collection is stored as one flat JSON array under a single key in
the ``ledger_storage`` table owned by ``libs/db`` (SQLite by default). There is
no versioning or migration of the payload shape.

Scope:
- ``LocalStorage.load()`` never fails the caller: a missing key, unreadable
  JSON, an unusable database path, or a database error all yield ``[]`` and a
  log line. Stored rows go through :func:`shop_ledger.ingest.ingest_records`
  like remote rows, so legacy dates are normalized and invalid amounts dropped.
- ``LocalStorage.save()`` upserts the blob and propagates database errors.
"""

from __future__ import annotations

import json
from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError

from db.client import session_scope
from db.models.ledger import LedgerStorageEntry
from .ingest import ingest_records
from .logging_setup import get_logger
from .models import Transaction

STORAGE_KEY = "snack_db_v12"

_logger = get_logger("shop_ledger.persistence")


class LocalStorage:
    """Key/value-backed store for the serialized transaction array."""

    def __init__(self, *, database_url: str | None = None, key: str = STORAGE_KEY) -> None:
        self.database_url = database_url
        self.key = key

    def _read_raw(self) -> str | None:
        with session_scope(database_url=self.database_url) as session:
            row = session.get(LedgerStorageEntry, self.key)
            return row.value if row is not None else None

    def load(self) -> list[Transaction]:
        try:
            raw = self._read_raw()
        except (SQLAlchemyError, OSError):
            _logger.error("local:load_failed key=%s", self.key, exc_info=True)
            return []
        if raw is None:
            _logger.debug("local:empty key=%s", self.key)
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            _logger.error("local:malformed_json key=%s", self.key, exc_info=True)
            return []
        if not isinstance(data, list):
            _logger.error("local:unexpected_shape key=%s type=%s", self.key, type(data).__name__)
            return []

        # Same normalization as remote rows: dates coerced, bad amounts dropped.
        out = ingest_records(data)
        _logger.debug("local:loaded key=%s rows=%d kept=%d", self.key, len(data), len(out))
        return out

    def save(self, transactions: Iterable[Transaction]) -> None:
        payload = json.dumps(
            [t.to_record() for t in transactions], ensure_ascii=False, separators=(",", ":")
        )
        with session_scope(database_url=self.database_url) as session:
            row = session.get(LedgerStorageEntry, self.key)
            if row is None:
                session.add(LedgerStorageEntry(key=self.key, value=payload))
            else:
                row.value = payload
        _logger.debug("local:saved key=%s bytes=%d", self.key, len(payload))


__all__ = ["LocalStorage", "STORAGE_KEY"]
