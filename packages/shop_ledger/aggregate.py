"""Income/expense/net statistics over an arbitrary subset of transactions."""

from __future__ import annotations

from collections.abc import Iterable

from .models import Amount, PeriodStats, Transaction


def aggregate(transactions: Iterable[Transaction]) -> PeriodStats:
    """Sum income and expense in one pass and derive ``net = income - expense``."""

    income: Amount = 0
    expense: Amount = 0
    for t in transactions:
        if t.is_income:
            income += t.amount
        else:
            expense += t.amount
    return PeriodStats(income=income, expense=expense, net=income - expense)


__all__ = ["aggregate"]
