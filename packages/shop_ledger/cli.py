# ruff: noqa: I001
"""CLI for the ``shop_ledger`` package.

This module exposes callable command handlers (``cmd_add``, ``cmd_report``,
...) and a Typer-based console interface. Environment variables
(``LEDGER_DATABASE_URL``, ``LEDGER_REMOTE_URL``, ``LEDGER_POLICY_FILE``) are
loaded from a local ``.env`` using ``python-dotenv`` before any command runs.
Business logic lives in ``shop_ledger.api`` and the modules it composes; the
handlers here only parse arguments, print results, and map failures to exit
codes.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from pydantic import ValidationError

from .logging_setup import configure_logging


# ---- Small module-level helpers used by CLI commands -------------------------


def _err(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


def _open_ledger(database_url: str | None):
    """Build a :class:`LedgerSync` over the local snapshot (no remote fetch)."""

    from .persistence import LocalStorage
    from .remote import remote_from_env
    from .store import TransactionStore
    from .sync import LedgerSync

    local = LocalStorage(database_url=database_url)
    return LedgerSync(TransactionStore(local.load()), local, remote_from_env())


def _report_push(outcome: Any) -> None:
    if not outcome.ok:
        print(f"Warning: saved locally; remote sync failed: {outcome.error}", file=sys.stderr)


def _fmt(value: float | int) -> str:
    return f"{value:,}"


def _print_row(tx: Any) -> None:
    note = f"\t{tx.note}" if tx.note else ""
    print(f"{tx.id}\t{tx.date}\t{tx.type}\t{tx.category}\t{_fmt(tx.amount)}{note}")


# ---- Command handlers ----------------------------------------------------------


def cmd_add(
    *,
    database_url: str | None,
    date: str | None,
    txn_type: str,
    category: str,
    amount: str,
    note: str,
) -> int:
    from .catalog import normalize_name
    from .ingest import parse_amount, parse_date, parse_type, today_in_reference_tz
    from .models import Transaction

    day = today_in_reference_tz()
    if date:
        day = parse_date(date)
        if day is None:
            _err(f"invalid date {date!r}; use YYYY-MM-DD")
            return 1
    kind = parse_type(txn_type)
    if kind is None:
        _err(f"unknown type {txn_type!r}; use income or expense")
        return 1
    value = parse_amount(amount)
    if value is None:
        _err(f"amount must be a positive number, got {amount!r}")
        return 1

    ledger = _open_ledger(database_url)
    try:
        tx = Transaction(
            id=ledger.store.next_id(),
            date=day,
            type=kind,
            category=normalize_name(category),
            amount=value,
            note=note,
        )
    except ValidationError as e:
        _err(f"invalid entry: {e}")
        return 1

    outcome = ledger.save(tx)
    _report_push(outcome)
    _print_row(tx)
    return 0


def cmd_edit(*, database_url: str | None, txn_id: int, changes: dict[str, Any]) -> int:
    from .catalog import normalize_name
    from .ingest import parse_amount, parse_date, parse_type
    from .models import Transaction

    updates: dict[str, Any] = {}
    if changes.get("date") is not None:
        day = parse_date(changes["date"])
        if day is None:
            _err(f"invalid date {changes['date']!r}; use YYYY-MM-DD")
            return 1
        updates["date"] = day
    if changes.get("type") is not None:
        kind = parse_type(changes["type"])
        if kind is None:
            _err(f"unknown type {changes['type']!r}; use income or expense")
            return 1
        updates["type"] = kind
    if changes.get("amount") is not None:
        value = parse_amount(changes["amount"])
        if value is None:
            _err(f"amount must be a positive number, got {changes['amount']!r}")
            return 1
        updates["amount"] = value
    if changes.get("category") is not None:
        updates["category"] = normalize_name(changes["category"])
    if changes.get("note") is not None:
        updates["note"] = changes["note"]
    if not updates:
        _err("nothing to change")
        return 1

    ledger = _open_ledger(database_url)
    try:
        current = ledger.store.get(txn_id)
    except KeyError:
        _err(f"no entry with id {txn_id}")
        return 1
    try:
        tx = Transaction.model_validate({**current.to_record(), **updates})
    except ValidationError as e:
        _err(f"invalid entry: {e}")
        return 1

    outcome = ledger.save(tx)
    _report_push(outcome)
    _print_row(tx)
    return 0


def cmd_delete(*, database_url: str | None, txn_id: int) -> int:
    ledger = _open_ledger(database_url)
    try:
        outcome = ledger.delete(txn_id)
    except KeyError:
        _err(f"no entry with id {txn_id}")
        return 1
    _report_push(outcome)
    print(f"deleted {txn_id}")
    return 0


def cmd_list(
    *, database_url: str | None, date: str | None, year: int | None, month: int | None
) -> int:
    from .ingest import parse_date, today_in_reference_tz
    from .periods import filter_by_period, for_date, is_valid_month, is_valid_year

    if year is not None and not is_valid_year(year):
        _err(f"year must be a 4-digit year, got {year}")
        return 1
    if month is not None and not is_valid_month(month):
        _err(f"month must be within 1..12, got {month}")
        return 1
    day = today_in_reference_tz()
    if date:
        day = parse_date(date)
        if day is None:
            _err(f"invalid date {date!r}; use YYYY-MM-DD")
            return 1

    ledger = _open_ledger(database_url)
    snapshot = ledger.store.snapshot()
    if year is not None:
        rows = filter_by_period(snapshot, year, month)
        rows.sort(key=lambda t: t.date)
    else:
        rows = for_date(snapshot, day)

    if not rows:
        print("no entries")
        return 0
    for tx in rows:
        _print_row(tx)
    return 0


def cmd_report(
    *,
    database_url: str | None,
    year: int | None,
    month: int | None,
    granularity: str,
    policy_path: Path | None,
    smart: bool | None,
    show_zero: bool,
) -> int:
    from .api import build_dashboard
    from .policy import load_policy
    from .trends import GRANULARITIES

    if granularity not in GRANULARITIES:
        _err(f"unknown trend {granularity!r}; use one of {', '.join(GRANULARITIES)}")
        return 1
    try:
        policy = load_policy(policy_path)
    except ValueError as e:
        _err(str(e))
        return 1
    if smart is not None:
        policy = policy.model_copy(update={"smart_distribution": smart})

    ledger = _open_ledger(database_url)
    try:
        dash = build_dashboard(
            ledger.store.snapshot(),
            year=year,
            month=month,
            granularity=granularity,  # type: ignore[arg-type]
            policy=policy,
        )
    except ValueError as e:
        _err(str(e))
        return 1

    ys, ms = dash.year_stats, dash.month_stats
    print(f"{dash.year}年 年度經營概況\t收入 {_fmt(ys.income)}\t支出 {_fmt(ys.expense)}\t營利 {_fmt(ys.net)}")
    print(f"{dash.month}月 本月損益\t收入 {_fmt(ms.income)}\t支出 {_fmt(ms.expense)}\t營利 {_fmt(ms.net)}")
    print()
    print(f"趨勢 ({dash.granularity})")
    for p in dash.trend:
        if not show_zero and p.income == 0 and p.expense == 0:
            continue
        print(f"{p.label}\t{_fmt(p.income)}\t{_fmt(p.expense)}\t{_fmt(p.net)}")
    for chart in dash.charts:
        print()
        print(chart.title)
        if not chart.rows:
            print("無數據")
            continue
        total = chart.total
        for row in chart.rows:
            pct = f"{row.value / total * 100:.1f}" if total > 0 else "0"
            print(f"{row.category}\t{_fmt(row.value)}\t{pct}%")
    return 0


def cmd_export(*, database_url: str | None, fmt: str, output: Path | None) -> int:
    from .export import to_csv, to_json

    if fmt not in ("csv", "json"):
        _err(f"unknown format {fmt!r}; use csv or json")
        return 1
    ledger = _open_ledger(database_url)
    snapshot = ledger.store.snapshot()
    text = to_csv(snapshot) if fmt == "csv" else to_json(snapshot)
    if output is None:
        sys.stdout.write(text + "\n")
        return 0
    try:
        output.write_text(text, encoding="utf-8")
    except OSError as e:
        _err(f"cannot write {output}: {e}")
        return 1
    print(f"exported {len(snapshot)} entries to {output}")
    return 0


def cmd_sync(*, database_url: str | None) -> int:
    ledger = _open_ledger(database_url)
    if ledger.remote is None:
        _err("LEDGER_REMOTE_URL is not set; nothing to sync with")
        return 1
    outcome = ledger.load()
    if not outcome.ok:
        _err(f"cannot sync with remote, using local backup: {outcome.error}")
        return 1
    print(f"synced {len(ledger.store)} entries")
    return 0


def cmd_categories(*, policy_path: Path | None) -> int:
    from .catalog import categories_for, group_of, note_presets
    from .models import EXPENSE, INCOME
    from .policy import load_policy

    try:
        policy = load_policy(policy_path)
    except ValueError as e:
        _err(str(e))
        return 1

    print(INCOME)
    for c in categories_for(INCOME):
        print(f"  {c}")
    current_group: str | None = None
    for c in categories_for(EXPENSE):
        group = group_of(c)
        if group != current_group:
            print(group)
            current_group = group
        presets = note_presets(c)
        hint = f"\t({', '.join(presets)})" if presets else ""
        label = policy.display_label(c)
        bucket = f" -> {label}" if label != c else ""
        print(f"  {c}\t[{policy.classify(c)}]{bucket}{hint}")
    return 0


# ---- Typer-based console interface ---------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Record shop income/expenses and print reports. "
        "Loads LEDGER_* settings from a local .env before running."
    ),
)


def _db(ctx: typer.Context) -> str | None:
    return (ctx.obj or {}).get("database_url")


@app.command("add")
def add_cmd(
    ctx: typer.Context,
    txn_type: Annotated[str, typer.Option("--type", "-t", help="income or expense (收入/支出).")],
    category: Annotated[str, typer.Option("--category", "-c", help="Category label.")],
    amount: Annotated[str, typer.Option("--amount", "-a", help="Positive amount.")],
    date: Annotated[str | None, typer.Option(help="YYYY-MM-DD (default: today in Taipei).")] = None,
    note: Annotated[str, typer.Option(help="Optional note.")] = "",
) -> None:
    """Record a new entry."""

    raise typer.Exit(
        cmd_add(
            database_url=_db(ctx),
            date=date,
            txn_type=txn_type,
            category=category,
            amount=amount,
            note=note,
        )
    )


@app.command("edit")
def edit_cmd(
    ctx: typer.Context,
    txn_id: Annotated[int, typer.Argument(help="Entry id.")],
    txn_type: Annotated[str | None, typer.Option("--type", "-t")] = None,
    category: Annotated[str | None, typer.Option("--category", "-c")] = None,
    amount: Annotated[str | None, typer.Option("--amount", "-a")] = None,
    date: Annotated[str | None, typer.Option()] = None,
    note: Annotated[str | None, typer.Option()] = None,
) -> None:
    """Change fields of an existing entry."""

    changes = {"type": txn_type, "category": category, "amount": amount, "date": date, "note": note}
    raise typer.Exit(cmd_edit(database_url=_db(ctx), txn_id=txn_id, changes=changes))


@app.command("delete")
def delete_cmd(
    ctx: typer.Context,
    txn_id: Annotated[int, typer.Argument(help="Entry id.")],
) -> None:
    """Delete an entry."""

    raise typer.Exit(cmd_delete(database_url=_db(ctx), txn_id=txn_id))


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    date: Annotated[str | None, typer.Option(help="Day to show (default: today).")] = None,
    year: Annotated[int | None, typer.Option(help="List a whole year instead of a day.")] = None,
    month: Annotated[int | None, typer.Option(help="Narrow --year to one month.")] = None,
) -> None:
    """Show the entries of one day (or of a year/month)."""

    raise typer.Exit(cmd_list(database_url=_db(ctx), date=date, year=year, month=month))


@app.command("report")
def report_cmd(
    ctx: typer.Context,
    year: Annotated[int | None, typer.Option(help="Report year (default: current).")] = None,
    month: Annotated[int | None, typer.Option(help="Report month (default: current).")] = None,
    trend: Annotated[str, typer.Option(help="month, week or day.")] = "month",
    policy: Annotated[
        Path | None, typer.Option(help="Policy JSON (default: $LEDGER_POLICY_FILE).")
    ] = None,
    smart: Annotated[
        bool | None,
        typer.Option("--smart/--no-smart", help="Override smart cost distribution in day mode."),
    ] = None,
    show_zero: Annotated[bool, typer.Option(help="Print empty trend buckets too.")] = False,
) -> None:
    """Print period statistics, the trend series and category charts."""

    raise typer.Exit(
        cmd_report(
            database_url=_db(ctx),
            year=year,
            month=month,
            granularity=trend,
            policy_path=policy,
            smart=smart,
            show_zero=show_zero,
        )
    )


@app.command("export")
def export_cmd(
    ctx: typer.Context,
    fmt: Annotated[str, typer.Option("--format", "-f", help="csv or json.")] = "csv",
    output: Annotated[Path | None, typer.Option("--output", "-o", dir_okay=False)] = None,
) -> None:
    """Export every entry as CSV or JSON."""

    raise typer.Exit(cmd_export(database_url=_db(ctx), fmt=fmt, output=output))


@app.command("sync")
def sync_cmd(ctx: typer.Context) -> None:
    """Replace the local copy with the remote sheet (when reachable)."""

    raise typer.Exit(cmd_sync(database_url=_db(ctx)))


@app.command("categories")
def categories_cmd(
    policy: Annotated[Path | None, typer.Option(help="Policy JSON.")] = None,
) -> None:
    """List recognized categories with their distribution class."""

    raise typer.Exit(cmd_categories(policy_path=policy))


@app.callback()
def _root(
    ctx: typer.Context,
    *,
    database_url: str | None = typer.Option(
        None, help="Override LEDGER_DATABASE_URL (falls back to env var)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()
    ctx.obj = {"database_url": database_url}


def main() -> None:  # pragma: no cover - console script entry
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
