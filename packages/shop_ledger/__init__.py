"""Public interface for the ``shop_ledger`` package.

This module exposes the package's reporting functions, storage/sync classes
and public models as the stable import surface. There is no runtime logic
here, only symbol re-exports.
"""

from .aggregate import aggregate
from .api import Chart, Dashboard, build_dashboard
from .breakdown import breakdown_by_category, cost_structure, income_composition, income_sources
from .export import to_csv, to_json
from .ingest import ingest_records, normalize_date
from .models import (
    EXPENSE,
    INCOME,
    CategoryBreakdown,
    DistributionClass,
    PeriodStats,
    Transaction,
    TransactionType,
    TrendGranularity,
    TrendPoint,
)
from .periods import filter_by_month, filter_by_year, for_date, year_options
from .persistence import LocalStorage
from .policy import ReportPolicy, default_policy, load_policy
from .remote import RemoteClient, RemoteSyncError
from .store import TransactionStore
from .sync import LedgerSync, SyncOutcome
from .trends import build_trend

__all__ = [
    # Reporting
    "aggregate",
    "breakdown_by_category",
    "build_dashboard",
    "build_trend",
    "cost_structure",
    "filter_by_month",
    "filter_by_year",
    "for_date",
    "income_composition",
    "income_sources",
    "to_csv",
    "to_json",
    "year_options",
    # Ingestion / configuration
    "ingest_records",
    "normalize_date",
    "ReportPolicy",
    "default_policy",
    "load_policy",
    # Storage / sync
    "LedgerSync",
    "LocalStorage",
    "RemoteClient",
    "RemoteSyncError",
    "SyncOutcome",
    "TransactionStore",
    # Models / types
    "CategoryBreakdown",
    "Chart",
    "Dashboard",
    "DistributionClass",
    "EXPENSE",
    "INCOME",
    "PeriodStats",
    "Transaction",
    "TransactionType",
    "TrendGranularity",
    "TrendPoint",
]
