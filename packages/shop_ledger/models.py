"""Data models and type aliases for ``shop_ledger``.

Two families live here:

- :class:`Transaction`, the single persisted entity. It is a frozen pydantic
  model so that records loaded from local storage or the remote sheet are
  validated once, at the boundary, and every downstream consumer can rely on a
  canonical ``YYYY-MM-DD`` date, a known ``type`` label and a non-negative
  amount.
- Report view models (:class:`PeriodStats`, :class:`TrendPoint`,
  :class:`CategoryBreakdown`). These are plain frozen dataclasses: derived,
  recomputed on every request, never persisted.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator

# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------

# Wire labels are the shop's own (Traditional Chinese) labels, exactly as they
# appear in the spreadsheet and in exported files.
type TransactionType = Literal["收入", "支出"]
INCOME: TransactionType = "收入"
EXPENSE: TransactionType = "支出"

type DistributionClass = Literal["fixed", "weighted", "direct"]
"""How an expense category is spread over the days of its month in day mode.

- ``fixed``: evenly across every day of the month (rent, monthly payroll).
- ``weighted``: proportionally to each day's share of the month's income.
- ``direct``: left on the day it was booked.
"""

type TrendGranularity = Literal["month", "week", "day"]

type Amount = int | float


# ---------------------------------------------------------------------------
# Transaction
# ---------------------------------------------------------------------------


class Transaction(BaseModel):
    """One dated income or expense entry.

    ``id`` carries no ordering meaning; temporal order derives from ``date``
    only, and collections of transactions are never assumed to be sorted.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    id: int
    date: str
    type: TransactionType
    category: str
    amount: Amount
    note: str = ""

    @field_validator("date")
    @classmethod
    def _canonical_date(cls, v: str) -> str:
        # Reject anything that is not already the canonical form; ingestion is
        # responsible for timezone normalization (see ``ingest.normalize_date``).
        try:
            parsed = date.fromisoformat(v)
        except ValueError as exc:
            raise ValueError(f"date must be YYYY-MM-DD, got {v!r}") from exc
        if parsed.isoformat() != v:
            raise ValueError(f"date must be YYYY-MM-DD, got {v!r}")
        return v

    @field_validator("category")
    @classmethod
    def _category_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("category must be non-empty")
        return v

    @field_validator("amount")
    @classmethod
    def _amount_non_negative(cls, v: Amount) -> Amount:
        if not math.isfinite(v) or v < 0:
            raise ValueError("amount must be a finite, non-negative number")
        if isinstance(v, float) and v.is_integer():
            return int(v)
        return v

    @field_validator("note", mode="before")
    @classmethod
    def _note_default(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def day(self) -> date:
        return date.fromisoformat(self.date)

    @property
    def is_income(self) -> bool:
        return self.type == INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == EXPENSE

    def to_record(self) -> dict[str, Any]:
        """Return the plain JSON-ready mapping (field order preserved)."""

        return self.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Report view models
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PeriodStats:
    income: Amount = 0
    expense: Amount = 0
    net: Amount = 0


@dataclass(frozen=True, slots=True)
class TrendPoint:
    """One aggregated bucket of a trend series.

    ``label`` is the display label (``"3月"``, ``"W12"``, ``"1/5"``). ``date``
    is set only for day-granularity points and holds the ISO date.
    """

    label: str
    income: Amount
    expense: Amount
    net: Amount
    date: str | None = None


@dataclass(frozen=True, slots=True)
class CategoryBreakdown:
    category: str
    value: Amount


__all__ = [
    "Amount",
    "CategoryBreakdown",
    "DistributionClass",
    "EXPENSE",
    "INCOME",
    "PeriodStats",
    "Transaction",
    "TransactionType",
    "TrendGranularity",
    "TrendPoint",
]
