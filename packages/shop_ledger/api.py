"""Public reporting entry point for the ``shop_ledger`` package.

:func:`build_dashboard` turns a snapshot of the ledger plus the viewer's
selection (year, month, trend granularity) into one immutable
:class:`Dashboard` view model. It is pure and keeps no cache: callers invoke
it on every change of selection or data, and repeated calls on the same
snapshot return equal results.

Data flow::

    snapshot ─► filter_by_year ─┬─► aggregate            (year stats)
                                ├─► build_trend          (trend series)
                                ├─► income_composition / cost_structure
                                └─► filter_by_month ─► aggregate / breakdowns
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from .aggregate import aggregate
from .breakdown import cost_structure, income_composition
from .ingest import today_in_reference_tz
from .models import Amount, CategoryBreakdown, PeriodStats, Transaction, TrendGranularity, TrendPoint
from .periods import filter_by_month, filter_by_year, is_valid_month, is_valid_year, year_options
from .policy import ReportPolicy, default_policy
from .trends import build_trend


@dataclass(frozen=True, slots=True)
class Chart:
    """One category chart of the dashboard (title plus breakdown rows)."""

    title: str
    rows: tuple[CategoryBreakdown, ...]
    is_income_composition: bool

    @property
    def total(self) -> Amount:
        return sum(r.value for r in self.rows)


@dataclass(frozen=True, slots=True)
class Dashboard:
    year: int
    month: int
    granularity: TrendGranularity
    years: tuple[str, ...]
    year_stats: PeriodStats
    month_stats: PeriodStats
    trend: tuple[TrendPoint, ...]
    charts: tuple[Chart, ...]


def build_dashboard(
    transactions: Iterable[Transaction],
    *,
    year: int | str | None = None,
    month: int | None = None,
    granularity: TrendGranularity = "month",
    policy: ReportPolicy | None = None,
    today: date | None = None,
) -> Dashboard:
    """Compute every report view model for one selection.

    ``year`` and ``month`` default to the current Taipei date (``today``
    overrides it, mainly for tests). Raises ``ValueError`` for a year that is
    not four digits or a month outside 1..12. ``policy`` defaults to
    :func:`shop_ledger.policy.default_policy`.
    """

    snapshot = tuple(transactions)
    ref = today or date.fromisoformat(today_in_reference_tz())
    y = int(year) if year is not None else ref.year
    m = int(month) if month is not None else ref.month
    if not is_valid_year(y):
        raise ValueError(f"year must be a 4-digit year, got {year!r}")
    if not is_valid_month(m):
        raise ValueError(f"month must be within 1..12, got {month!r}")
    pol = policy or default_policy()

    year_data = filter_by_year(snapshot, y)
    month_data = filter_by_month(year_data, m)

    charts = (
        Chart(f"{y}年 收入分配", tuple(income_composition(year_data, pol)), True),
        Chart(f"{y}年 成本結構", tuple(cost_structure(year_data, pol)), False),
        Chart(f"{m}月 收入分配", tuple(income_composition(month_data, pol)), True),
        Chart(f"{m}月 成本結構", tuple(cost_structure(month_data, pol)), False),
    )

    return Dashboard(
        year=y,
        month=m,
        granularity=granularity,
        years=tuple(year_options(snapshot, ref.year)),
        year_stats=aggregate(year_data),
        month_stats=aggregate(month_data),
        trend=tuple(build_trend(year_data, granularity, y, pol)),
        charts=charts,
    )


__all__ = ["Chart", "Dashboard", "build_dashboard"]
