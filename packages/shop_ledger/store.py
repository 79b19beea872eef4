"""In-memory Transaction Store.

The store is the sole owner of transaction records. Readers get immutable
snapshots (tuples of frozen models) and never touch the backing list, so a
report can be recomputed from a snapshot while the store keeps changing.

Insertion order is kept for display (day details list entries in the order
they were recorded) but carries no temporal meaning.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from .ingest import epoch_ms
from .models import Transaction


class TransactionStore:
    def __init__(self, transactions: Iterable[Transaction] = ()) -> None:
        self._items: list[Transaction] = []
        self.replace_all(transactions)

    # ---- reads ---------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self.snapshot())

    def __contains__(self, txn_id: object) -> bool:
        return any(t.id == txn_id for t in self._items)

    def snapshot(self) -> tuple[Transaction, ...]:
        return tuple(self._items)

    def get(self, txn_id: int) -> Transaction:
        for t in self._items:
            if t.id == txn_id:
                return t
        raise KeyError(txn_id)

    def next_id(self, *, now_ms: int | None = None) -> int:
        """Return a fresh id: the current epoch millisecond, bumped past collisions."""

        candidate = now_ms if now_ms is not None else epoch_ms()
        highest = max((t.id for t in self._items), default=candidate - 1)
        return candidate if candidate > highest else highest + 1

    # ---- writes --------------------------------------------------------------

    def replace_all(self, transactions: Iterable[Transaction]) -> None:
        """Replace the whole collection; later duplicates of an id win."""

        by_id: dict[int, int] = {}
        items: list[Transaction] = []
        for t in transactions:
            if t.id in by_id:
                items[by_id[t.id]] = t
            else:
                by_id[t.id] = len(items)
                items.append(t)
        self._items = items

    def add(
        self,
        *,
        date: str,
        type: str,
        category: str,
        amount: Any,
        note: str = "",
        now_ms: int | None = None,
    ) -> Transaction:
        """Validate and append a new entry with a fresh id."""

        tx = Transaction(
            id=self.next_id(now_ms=now_ms),
            date=date,
            type=type,
            category=category,
            amount=amount,
            note=note,
        )
        self._items.append(tx)
        return tx

    def put(self, tx: Transaction) -> Transaction:
        """Insert ``tx``, or replace the entry with the same id in place."""

        for i, existing in enumerate(self._items):
            if existing.id == tx.id:
                self._items[i] = tx
                return tx
        self._items.append(tx)
        return tx

    def update(self, txn_id: int, **changes: Any) -> Transaction:
        """Replace fields of an existing entry; the result is re-validated."""

        current = self.get(txn_id)
        if "id" in changes and changes["id"] != txn_id:
            raise ValueError("the id of an existing entry cannot change")
        updated = Transaction.model_validate({**current.to_record(), **changes})
        return self.put(updated)

    def delete(self, txn_id: int) -> Transaction:
        tx = self.get(txn_id)
        self._items = [t for t in self._items if t.id != txn_id]
        return tx


__all__ = ["TransactionStore"]
