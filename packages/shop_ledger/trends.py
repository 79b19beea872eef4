"""Trend series for one report year: month, week or day buckets.

Every granularity yields a fixed-length series so charts line up regardless of
data volume:

- ``month``: 12 points, labelled ``1月`` .. ``12月``.
- ``week``: 53 points, labelled ``W1`` .. ``W53``. The week index of a date is
  ``floor((date - Jan 1) / 7 days)`` clamped into ``[0, 52]``; dates before
  Jan 1 land in the first bucket.
- ``day``: one point per calendar day (365 or 366), labelled ``M/D`` and
  carrying the ISO ``date``.

Smart cost distribution (day mode)
----------------------------------
A raw daily ledger is noisy for a shop that books rent or monthly payroll on a
single day. In day mode, unless the policy disables it, expenses are
re-attributed per month according to the policy's distribution classes:

1. Each month forms a pool holding its total income, its ``fixed`` expenses,
   its ``weighted`` expenses and its day count.
2. ``direct`` expenses stay on their own date.
3. Each day of month ``m`` receives::

       fixed_share    = round(pool.fixed / pool.days)
       weighted_share = round(pool.weighted * day_income / pool.income)   # pool.income > 0
                      = 0                                                 # otherwise

   ``expense = direct + fixed_share + weighted_share``. Fixed shares are
   rounded per day and not corrected for drift, so a month's fixed shares sum
   to within ``pool.days`` of the booked total. A day without income carries
   none of the weighted cost.

Rounding is half-up. Only expense rows are classified; income is always
reported on its own date.
"""

from __future__ import annotations

import calendar
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from .models import Amount, Transaction, TrendGranularity, TrendPoint
from .policy import ReportPolicy, default_policy

WEEK_BUCKETS = 53
GRANULARITIES: tuple[TrendGranularity, ...] = ("month", "week", "day")


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_year(year: int) -> int:
    return 366 if is_leap_year(year) else 365


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _point(label: str, income: Amount, expense: Amount, *, day: str | None = None) -> TrendPoint:
    return TrendPoint(label=label, income=income, expense=expense, net=income - expense, date=day)


# ---------------------------------------------------------------------------
# Month / week
# ---------------------------------------------------------------------------


def _month_trend(year_data: Iterable[Transaction]) -> list[TrendPoint]:
    income: list[Amount] = [0] * 12
    expense: list[Amount] = [0] * 12
    for t in year_data:
        i = t.day.month - 1
        if t.is_income:
            income[i] += t.amount
        else:
            expense[i] += t.amount
    return [_point(f"{i + 1}月", income[i], expense[i]) for i in range(12)]


def week_index(day: date, year: int) -> int:
    """Return the 0-based week bucket of ``day`` within ``year`` (clamped)."""

    offset = (day - date(year, 1, 1)).days
    return min(max(offset // 7, 0), WEEK_BUCKETS - 1)


def _week_trend(year_data: Iterable[Transaction], year: int) -> list[TrendPoint]:
    income: list[Amount] = [0] * WEEK_BUCKETS
    expense: list[Amount] = [0] * WEEK_BUCKETS
    for t in year_data:
        i = week_index(t.day, year)
        if t.is_income:
            income[i] += t.amount
        else:
            expense[i] += t.amount
    return [_point(f"W{i + 1}", income[i], expense[i]) for i in range(WEEK_BUCKETS)]


# ---------------------------------------------------------------------------
# Day (with smart cost distribution)
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class MonthlyPool:
    """Per-month accumulators feeding the day-mode distribution."""

    days: int
    income: Amount = 0
    fixed: Amount = 0
    weighted: Amount = 0

    def fixed_share(self) -> int:
        return round_half_up(self.fixed / self.days)

    def weighted_share(self, day_income: Amount) -> int:
        if self.income <= 0:
            return 0
        return round_half_up(self.weighted * day_income / self.income)


@dataclass(slots=True)
class _DayLedger:
    income: dict[str, Amount]
    expense: dict[str, Amount]
    pools: list[MonthlyPool]


def _collect(year_data: Iterable[Transaction], year: int, policy: ReportPolicy) -> _DayLedger:
    ledger = _DayLedger(
        income={},
        expense={},
        pools=[MonthlyPool(days=calendar.monthrange(year, m)[1]) for m in range(1, 13)],
    )
    smart = policy.smart_distribution
    for t in year_data:
        d = t.day
        # Rows from another year have no day bucket here.
        if d.year != year:
            continue
        pool = ledger.pools[d.month - 1]
        if t.is_income:
            ledger.income[t.date] = ledger.income.get(t.date, 0) + t.amount
            pool.income += t.amount
            continue
        cls = policy.classify(t.category) if smart else "direct"
        if cls == "fixed":
            pool.fixed += t.amount
        elif cls == "weighted":
            pool.weighted += t.amount
        else:
            ledger.expense[t.date] = ledger.expense.get(t.date, 0) + t.amount
    return ledger


def monthly_pools(
    year_data: Iterable[Transaction], year: int, policy: ReportPolicy | None = None
) -> list[MonthlyPool]:
    """Return the 12 monthly pools (January first) used by day mode."""

    return _collect(year_data, year, policy or default_policy()).pools


def _day_trend(year_data: Iterable[Transaction], year: int, policy: ReportPolicy) -> list[TrendPoint]:
    ledger = _collect(year_data, year, policy)
    points: list[TrendPoint] = []
    current = date(year, 1, 1)
    for _ in range(days_in_year(year)):
        key = current.isoformat()
        pool = ledger.pools[current.month - 1]
        day_income = ledger.income.get(key, 0)
        expense = ledger.expense.get(key, 0)
        if policy.smart_distribution:
            expense += pool.fixed_share() + pool.weighted_share(day_income)
        points.append(
            _point(f"{current.month}/{current.day}", day_income, expense, day=key)
        )
        current += timedelta(days=1)
    return points


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def build_trend(
    year_data: Sequence[Transaction] | Iterable[Transaction],
    granularity: TrendGranularity,
    year: int | str,
    policy: ReportPolicy | None = None,
) -> list[TrendPoint]:
    """Bucket ``year_data`` into a fixed-length trend series for ``year``.

    ``year_data`` is expected to be the output of
    :func:`shop_ledger.periods.filter_by_year`. ``policy`` supplies the
    distribution classes and the smart-distribution toggle for day mode
    (defaults to :func:`shop_ledger.policy.default_policy`).
    """

    y = int(year)
    if granularity == "month":
        return _month_trend(year_data)
    if granularity == "week":
        return _week_trend(year_data, y)
    if granularity == "day":
        return _day_trend(year_data, y, policy or default_policy())
    raise ValueError(
        f"unknown granularity {granularity!r}; expected one of {', '.join(GRANULARITIES)}"
    )


__all__ = [
    "GRANULARITIES",
    "MonthlyPool",
    "WEEK_BUCKETS",
    "build_trend",
    "days_in_year",
    "is_leap_year",
    "monthly_pools",
    "round_half_up",
    "week_index",
]
