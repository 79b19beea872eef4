"""Normalize raw records into validated :class:`~shop_ledger.models.Transaction` rows.

Records arrive from the spreadsheet endpoint with loosely typed cells: dates
may be plain ``YYYY-MM-DD`` strings or full ISO timestamps in UTC, amounts may
be numbers or numeric strings, ids may be missing. Everything downstream
buckets by the date string, so this is the one place where a date is
interpreted. It is normalized once, to a calendar date in the shop's reference
timezone (Asia/Taipei), and never re-derived.

Policies
--------
- Malformed date: coerce to today's date in the reference timezone and log a
  warning. One bad cell must not block a report.
- Invalid amount (missing, non-numeric, non-finite, zero or negative): drop the
  record at ingestion with a warning. Aggregation never sees it.
"""

from __future__ import annotations

import math
import time
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from .logging_setup import get_logger
from .models import EXPENSE, INCOME, Amount, Transaction, TransactionType

REFERENCE_TZ = ZoneInfo("Asia/Taipei")

_FALLBACK_FORMATS: tuple[str, ...] = ("%Y-%m-%d", "%Y/%m/%d", "%Y/%m/%d %H:%M:%S", "%m/%d/%Y")

_TYPE_ALIASES: Mapping[str, TransactionType] = {
    INCOME: INCOME,
    EXPENSE: EXPENSE,
    "income": INCOME,
    "expense": EXPENSE,
}

_logger = get_logger("shop_ledger.ingest")


def today_in_reference_tz() -> str:
    """Return today's calendar date in Asia/Taipei as ``YYYY-MM-DD``."""

    return datetime.now(REFERENCE_TZ).date().isoformat()


def epoch_ms() -> int:
    return time.time_ns() // 1_000_000


def _parse_datetime(s: str) -> datetime | date | None:
    # Plain calendar dates are taken at face value: no timezone shift.
    if len(s) == 10:
        try:
            return date.fromisoformat(s)
        except ValueError:
            pass
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        pass
    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    return None


def parse_date(raw: Any) -> str | None:
    """Return ``raw`` as a canonical ``YYYY-MM-DD`` date in Asia/Taipei, or ``None``.

    - ``date`` objects and ``YYYY-MM-DD`` strings are returned as-is.
    - Aware datetimes (``2024-01-04T16:00:00.000Z``) are converted to Taipei.
    - Naive datetimes are read as Taipei wall-clock time.
    """

    parsed: datetime | date | None
    if isinstance(raw, (datetime, date)):
        parsed = raw
    elif isinstance(raw, str) and raw.strip():
        parsed = _parse_datetime(raw.strip())
    else:
        parsed = None

    if parsed is None:
        return None
    if isinstance(parsed, datetime):
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(REFERENCE_TZ)
        return parsed.date().isoformat()
    return parsed.isoformat()


def normalize_date(raw: Any, *, today: str | None = None) -> str:
    """Like :func:`parse_date`, but unparsable input falls back to ``today``.

    ``today`` defaults to the current Taipei date; the coercion is logged.
    """

    parsed = parse_date(raw)
    if parsed is not None:
        return parsed
    fallback = today or today_in_reference_tz()
    _logger.warning("ingest:malformed_date raw=%r coerced_to=%s", raw, fallback)
    return fallback


def parse_amount(raw: Any) -> Amount | None:
    """Return a positive amount, or ``None`` when the value must be excluded."""

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value: float | int = raw
    elif isinstance(raw, str):
        s = raw.strip()
        if not s:
            return None
        try:
            value = int(s)
        except ValueError:
            try:
                value = float(s)
            except ValueError:
                return None
    else:
        return None

    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer():
            value = int(value)
    if value <= 0:
        return None
    return value


def parse_type(raw: Any) -> TransactionType | None:
    if not isinstance(raw, str):
        return None
    s = raw.strip()
    return _TYPE_ALIASES.get(s) or _TYPE_ALIASES.get(s.lower())


def _parse_id(raw: Any) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw or None
    try:
        value = int(float(str(raw).strip()))
    except (ValueError, OverflowError):
        return None
    return value or None


def ingest_record(
    row: Mapping[str, Any], *, fallback_id: int, today: str | None = None
) -> Transaction | None:
    """Normalize one raw mapping; return ``None`` when the row must be dropped."""

    amount = parse_amount(row.get("amount"))
    if amount is None:
        _logger.warning(
            "ingest:invalid_amount id=%r amount=%r; record excluded", row.get("id"), row.get("amount")
        )
        return None

    txn_type = parse_type(row.get("type"))
    if txn_type is None:
        _logger.warning(
            "ingest:unknown_type id=%r type=%r; record excluded", row.get("id"), row.get("type")
        )
        return None

    txn_id = _parse_id(row.get("id"))
    note = row.get("note")
    try:
        return Transaction(
            id=txn_id if txn_id is not None else fallback_id,
            date=normalize_date(row.get("date"), today=today),
            type=txn_type,
            category=str(row.get("category") or ""),
            amount=amount,
            note="" if note is None else str(note),
        )
    except ValidationError as exc:
        _logger.warning("ingest:invalid_record id=%r; record excluded: %s", row.get("id"), exc)
        return None


def ingest_records(
    rows: Iterable[Mapping[str, Any]],
    *,
    now_ms: int | None = None,
    today: str | None = None,
) -> list[Transaction]:
    """Normalize raw rows, dropping the ones that cannot be aggregated.

    Rows without an id get ``now_ms + position`` (position in the raw input),
    matching how new entries are numbered elsewhere.
    """

    base = now_ms if now_ms is not None else epoch_ms()
    out: list[Transaction] = []
    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            _logger.warning("ingest:not_a_record index=%d; skipped", index)
            continue
        tx = ingest_record(row, fallback_id=base + index, today=today)
        if tx is not None:
            out.append(tx)
    return out


__all__ = [
    "REFERENCE_TZ",
    "ingest_record",
    "ingest_records",
    "normalize_date",
    "epoch_ms",
    "parse_date",
    "parse_amount",
    "parse_type",
    "today_in_reference_tz",
]
