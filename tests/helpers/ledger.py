"""Small factories for ledger tests."""

from __future__ import annotations

from itertools import count

from shop_ledger.models import EXPENSE, INCOME, Transaction

_IDS = count(1)


def tx(date: str, type: str, category: str, amount, note: str = "", *, id: int | None = None) -> Transaction:
    return Transaction(
        id=id if id is not None else next(_IDS),
        date=date,
        type=type,
        category=category,
        amount=amount,
        note=note,
    )


def income(date: str, amount, category: str = "現金收入", **kw) -> Transaction:
    return tx(date, INCOME, category, amount, **kw)


def expense(date: str, amount, category: str = "食材", **kw) -> Transaction:
    return tx(date, EXPENSE, category, amount, **kw)
