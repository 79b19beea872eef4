"""Serialize the full transaction set as JSON or spreadsheet-friendly CSV.

Exports always cover the whole store; they ignore whichever year/month a
report is currently showing.

CSV format
----------
- UTF-8 byte-order mark first, so spreadsheet tools detect the encoding.
- Header ``ID,日期,類型,類別,金額,備註``.
- The note column is always quoted, and every double quote inside it is
  written twice. Other columns are quoted only when they contain a comma, a
  quote or a line break.
- Rows are separated by ``\\n``.
"""

from __future__ import annotations

import json
from collections.abc import Iterable

from .models import Amount, Transaction

CSV_BOM = "\ufeff"
CSV_HEADER: tuple[str, ...] = ("ID", "日期", "類型", "類別", "金額", "備註")

_NEEDS_QUOTES = (",", '"', "\n", "\r")


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def _cell(value: str) -> str:
    return _quote(value) if any(ch in value for ch in _NEEDS_QUOTES) else value


def _fmt_amount(value: Amount) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_json(transactions: Iterable[Transaction]) -> str:
    """Return a pretty-printed JSON array of every field of every record."""

    return json.dumps(
        [t.to_record() for t in transactions], ensure_ascii=False, indent=2
    )


def to_csv(transactions: Iterable[Transaction]) -> str:
    """Return the BOM-prefixed CSV text described in the module docstring."""

    lines = [",".join(CSV_HEADER)]
    for t in transactions:
        lines.append(
            ",".join(
                (
                    str(t.id),
                    t.date,
                    _cell(t.type),
                    _cell(t.category),
                    _fmt_amount(t.amount),
                    _quote(t.note),
                )
            )
        )
    return CSV_BOM + "\n".join(lines)


__all__ = ["CSV_BOM", "CSV_HEADER", "to_csv", "to_json"]
