"""Period filtering over canonical transaction dates.

All helpers are pure and total: they never mutate their input, return fresh
lists, accept empty input, and never raise. A year or month that cannot occur
simply matches nothing; range checks belong to callers (see ``api`` and
``cli``). Dates are the canonical ``YYYY-MM-DD`` strings produced at
ingestion, so year filtering is a prefix match and month filtering parses the
date once per row.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import Transaction


def _year_prefix(year: int | str) -> str | None:
    s = str(year).strip()
    return s if len(s) == 4 and s.isdigit() else None


def is_valid_year(year: int | str) -> bool:
    return _year_prefix(year) is not None


def is_valid_month(month: int) -> bool:
    return isinstance(month, int) and 1 <= month <= 12


def filter_by_year(transactions: Iterable[Transaction], year: int | str) -> list[Transaction]:
    """Return every transaction whose ``date`` starts with the 4-digit ``year``.

    A ``year`` that is not four digits matches nothing.
    """

    prefix = _year_prefix(year)
    if prefix is None:
        return []
    return [t for t in transactions if t.date.startswith(prefix)]


def filter_by_month(transactions: Iterable[Transaction], month: int) -> list[Transaction]:
    """Return every transaction whose calendar month equals ``month``.

    A ``month`` outside 1..12 matches nothing.
    """

    if not is_valid_month(month):
        return []
    return [t for t in transactions if t.day.month == month]


def filter_by_period(
    transactions: Iterable[Transaction], year: int | str, month: int | None = None
) -> list[Transaction]:
    """Year filter, optionally narrowed to one month."""

    subset = filter_by_year(transactions, year)
    return subset if month is None else filter_by_month(subset, month)


def for_date(transactions: Iterable[Transaction], day: str) -> list[Transaction]:
    """Return the entries booked on ``day`` (``YYYY-MM-DD``), in store order."""

    return [t for t in transactions if t.date == day]


def active_days(transactions: Iterable[Transaction], year: int | str, month: int) -> set[int]:
    """Return the day-of-month numbers that carry at least one entry."""

    return {t.day.day for t in filter_by_period(transactions, year, month)}


def year_options(transactions: Iterable[Transaction], current_year: int | str) -> list[str]:
    """Return selectable report years, newest first.

    Every distinct 4-digit year present in the data, plus ``current_year`` so
    an empty ledger still has something to select.
    """

    years = {t.date.split("-", 1)[0] for t in transactions}
    years = {y for y in years if is_valid_year(y)}
    current = _year_prefix(current_year)
    if current is not None:
        years.add(current)
    return sorted(years, key=int, reverse=True)


__all__ = [
    "active_days",
    "filter_by_month",
    "filter_by_period",
    "filter_by_year",
    "for_date",
    "is_valid_month",
    "is_valid_year",
    "year_options",
]
