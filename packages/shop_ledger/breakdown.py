"""Category breakdowns: income sources, cost structure, income composition.

Breakdowns group amounts by category for one transaction type and return
:class:`~shop_ledger.models.CategoryBreakdown` rows sorted by value, largest
first. Ties keep first-seen order (``sorted`` is stable).

Label folding is policy, not code: pass a :class:`~shop_ledger.policy.ReportPolicy`
(or any object with a ``display_label(category)`` method) as ``merge`` to
group by display bucket instead of the literal category.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from .aggregate import aggregate
from .models import EXPENSE, INCOME, Amount, CategoryBreakdown, Transaction, TransactionType
from .policy import ReportPolicy, default_policy

NET_PROFIT_LABEL = "淨利"


class LabelMerge(Protocol):
    def display_label(self, category: str) -> str: ...


def breakdown_by_category(
    transactions: Iterable[Transaction],
    txn_type: TransactionType,
    merge: LabelMerge | None = None,
) -> list[CategoryBreakdown]:
    """Group amounts of ``txn_type`` rows by category (or merged label)."""

    totals: dict[str, Amount] = {}
    for t in transactions:
        if t.type != txn_type:
            continue
        key = merge.display_label(t.category) if merge is not None else t.category
        totals[key] = totals.get(key, 0) + t.amount

    rows = [CategoryBreakdown(category=k, value=v) for k, v in totals.items()]
    rows.sort(key=lambda r: r.value, reverse=True)
    return rows


def income_sources(
    transactions: Iterable[Transaction], merge: LabelMerge | None = None
) -> list[CategoryBreakdown]:
    """Income grouped by literal category, or by ``merge`` buckets when given."""

    return breakdown_by_category(transactions, INCOME, merge=merge)


def cost_structure(
    transactions: Iterable[Transaction], policy: ReportPolicy | None = None
) -> list[CategoryBreakdown]:
    """Expenses grouped by the policy's display buckets."""

    return breakdown_by_category(transactions, EXPENSE, merge=policy or default_policy())


def income_composition(
    transactions: Iterable[Transaction], policy: ReportPolicy | None = None
) -> list[CategoryBreakdown]:
    """Where the period's income went: net profit first, then the cost structure.

    Returns ``[]`` when the period has neither income nor expense. The
    ``淨利`` slice is present only when net is positive; on a loss or at
    break-even the composition is the cost structure alone.
    """

    subset = list(transactions)
    stats = aggregate(subset)
    if stats.income == 0 and stats.expense == 0:
        return []
    costs = cost_structure(subset, policy)
    if stats.net > 0:
        return [CategoryBreakdown(category=NET_PROFIT_LABEL, value=stats.net), *costs]
    return costs


__all__ = [
    "LabelMerge",
    "NET_PROFIT_LABEL",
    "breakdown_by_category",
    "cost_structure",
    "income_composition",
    "income_sources",
]
