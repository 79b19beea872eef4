"""Keep the in-memory store, local storage and the remote sheet in step.

Every mutation is optimistic: it is applied to the store and persisted locally
first, then pushed to the remote endpoint. A failed push is reported in the
returned :class:`SyncOutcome` and never rolls the local change back. Nothing
here retries.
"""

from __future__ import annotations

from dataclasses import dataclass

from .logging_setup import get_logger
from .models import Transaction
from .persistence import LocalStorage
from .remote import RemoteClient, RemoteSyncError, deletion_marker
from .store import TransactionStore

_logger = get_logger("shop_ledger.sync")


@dataclass(frozen=True, slots=True)
class SyncOutcome:
    """Result of one sync step.

    ``ok`` is False only when a configured remote failed. ``pushed`` is set
    when a save or delete reached the remote; ``fetched`` is set when
    :meth:`LedgerSync.load` got an answer from the remote, even an empty one.
    """

    ok: bool
    pushed: bool = False
    fetched: bool = False
    error: str | None = None
    transaction: Transaction | None = None


class LedgerSync:
    def __init__(
        self,
        store: TransactionStore,
        local: LocalStorage,
        remote: RemoteClient | None = None,
    ) -> None:
        self.store = store
        self.local = local
        self.remote = remote

    def load(self) -> SyncOutcome:
        """Load the local snapshot, then prefer a non-empty remote collection."""

        local_items = self.local.load()
        if local_items:
            self.store.replace_all(local_items)
        if self.remote is None:
            return SyncOutcome(ok=True)

        try:
            remote_items = self.remote.fetch()
        except RemoteSyncError as e:
            _logger.warning("sync:fetch_failed; keeping local snapshot count=%d: %s", len(self.store), e)
            return SyncOutcome(ok=False, error=str(e))

        if remote_items:
            self.store.replace_all(remote_items)
            self.local.save(self.store.snapshot())
        return SyncOutcome(ok=True, fetched=True)

    def _push(self, change: dict, tx: Transaction) -> SyncOutcome:
        if self.remote is None:
            return SyncOutcome(ok=True, transaction=tx)
        try:
            self.remote.push(change)
        except RemoteSyncError as e:
            _logger.warning("sync:push_failed id=%s: %s", tx.id, e)
            return SyncOutcome(ok=False, error=str(e), transaction=tx)
        return SyncOutcome(ok=True, pushed=True, transaction=tx)

    def save(self, tx: Transaction) -> SyncOutcome:
        """Insert or replace ``tx`` locally, then push the full record."""

        self.store.put(tx)
        self.local.save(self.store.snapshot())
        return self._push(tx.to_record(), tx)

    def delete(self, txn_id: int) -> SyncOutcome:
        """Remove the entry locally, then push a deletion marker.

        Raises ``KeyError`` when ``txn_id`` is unknown.
        """

        tx = self.store.delete(txn_id)
        self.local.save(self.store.snapshot())
        return self._push(deletion_marker(tx), tx)


__all__ = ["LedgerSync", "SyncOutcome"]
