# ruff: noqa: E402, I001
from __future__ import annotations

import json
import urllib.error
import urllib.request
from pathlib import Path

import pytest
from typer.testing import CliRunner

from shop_ledger.cli import app
from shop_ledger.export import CSV_BOM
from shop_ledger.persistence import LocalStorage
from tests.helpers.ledger import expense, income

runner = CliRunner()


def _seed(*rows) -> None:
    LocalStorage().save(list(rows))


# ---- add / edit / delete -------------------------------------------------------


def test_add_records_an_entry() -> None:
    result = runner.invoke(
        app,
        ["add", "--type", "income", "--category", "現金收入", "--amount", "1000", "--date", "2024-01-05"],
    )
    assert result.exit_code == 0, result.output
    (tx,) = LocalStorage().load()
    assert (tx.date, tx.type, tx.category, tx.amount) == ("2024-01-05", "收入", "現金收入", 1000)
    assert str(tx.id) in result.output


def test_add_normalizes_timestamps_to_taipei() -> None:
    result = runner.invoke(
        app,
        ["add", "-t", "支出", "-c", "食材", "-a", "50", "--date", "2024-01-04T16:00:00Z", "--note", "蛤蜊"],
    )
    assert result.exit_code == 0, result.output
    (tx,) = LocalStorage().load()
    assert (tx.date, tx.note) == ("2024-01-05", "蛤蜊")


@pytest.mark.parametrize(
    "args",
    [
        ["--type", "income", "--category", "現金收入", "--amount", "-5"],
        ["--type", "income", "--category", "現金收入", "--amount", "abc"],
        ["--type", "transfer", "--category", "現金收入", "--amount", "5"],
        ["--type", "income", "--category", "  ", "--amount", "5"],
    ],
)
def test_add_rejects_invalid_input(args: list[str]) -> None:
    result = runner.invoke(app, ["add", *args])
    assert result.exit_code == 1
    assert LocalStorage().load() == []


def test_add_rejects_unparsable_date() -> None:
    result = runner.invoke(
        app, ["add", "-t", "expense", "-c", "食材", "-a", "20", "--date", "2024-13-01"]
    )
    assert result.exit_code == 1
    assert "Error:" in result.output and "2024-13-01" in result.output
    assert LocalStorage().load() == []


def test_add_collapses_whitespace_in_category() -> None:
    result = runner.invoke(
        app, ["add", "-t", "expense", "-c", "  薪資   (日) ", "-a", "800", "--date", "2024-01-05"]
    )
    assert result.exit_code == 0, result.output
    (tx,) = LocalStorage().load()
    assert tx.category == "薪資 (日)"


def test_edit_changes_fields() -> None:
    _seed(expense("2024-01-05", 100, id=11))
    result = runner.invoke(app, ["edit", "11", "--amount", "150", "--note", "改"])
    assert result.exit_code == 0, result.output
    (tx,) = LocalStorage().load()
    assert (tx.id, tx.amount, tx.note) == (11, 150, "改")


def test_edit_unknown_id_or_nothing_to_change() -> None:
    _seed(expense("2024-01-05", 100, id=11))
    assert runner.invoke(app, ["edit", "99", "--amount", "1"]).exit_code == 1
    assert runner.invoke(app, ["edit", "11"]).exit_code == 1
    assert runner.invoke(app, ["edit", "11", "--amount", "0"]).exit_code == 1


def test_edit_rejects_unparsable_date_and_keeps_entry() -> None:
    _seed(expense("2024-01-05", 100, id=11))
    result = runner.invoke(app, ["edit", "11", "--date", "2024-13-01"])
    assert result.exit_code == 1
    assert "Error:" in result.output
    (tx,) = LocalStorage().load()
    assert tx.date == "2024-01-05"


def test_edit_collapses_whitespace_in_category() -> None:
    _seed(expense("2024-01-05", 100, id=11))
    assert runner.invoke(app, ["edit", "11", "--category", " 米糧 "]).exit_code == 0
    (tx,) = LocalStorage().load()
    assert tx.category == "米糧"


def test_delete() -> None:
    _seed(expense("2024-01-05", 100, id=11), income("2024-01-05", 5, id=12))
    result = runner.invoke(app, ["delete", "11"])
    assert result.exit_code == 0, result.output
    assert [t.id for t in LocalStorage().load()] == [12]
    assert runner.invoke(app, ["delete", "11"]).exit_code == 1


def test_mutation_with_unreachable_remote_is_kept_locally(monkeypatch: pytest.MonkeyPatch) -> None:
    def _down(req, timeout=None):
        raise urllib.error.URLError("offline")

    monkeypatch.setattr(urllib.request, "urlopen", _down)
    monkeypatch.setenv("LEDGER_REMOTE_URL", "https://script.example.test/exec")

    result = runner.invoke(app, ["add", "-t", "expense", "-c", "食材", "-a", "20", "--date", "2024-03-01"])
    assert result.exit_code == 0
    assert len(LocalStorage().load()) == 1


# ---- list / report ------------------------------------------------------------


def test_list_by_day_and_by_month() -> None:
    _seed(
        income("2024-01-05", 1000, id=1),
        expense("2024-01-05", 120, category="食材", id=2),
        expense("2024-02-01", 30, category="耗材", id=3),
    )
    day = runner.invoke(app, ["list", "--date", "2024-01-05"])
    assert day.exit_code == 0
    assert "現金收入" in day.output and "食材" in day.output and "耗材" not in day.output

    month = runner.invoke(app, ["list", "--year", "2024", "--month", "2"])
    assert month.exit_code == 0
    assert "耗材" in month.output and "食材" not in month.output

    empty = runner.invoke(app, ["list", "--date", "2024-03-01"])
    assert "no entries" in empty.output


@pytest.mark.parametrize(
    "args",
    [
        ["--year", "2024", "--month", "13"],
        ["--year", "2024", "--month", "0"],
        ["--year", "24"],
        ["--date", "2024-02-30"],
    ],
)
def test_list_rejects_out_of_range_period(args: list[str]) -> None:
    result = runner.invoke(app, ["list", *args])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_report_day_trend_spreads_rent() -> None:
    _seed(income("2024-01-05", 1000, id=1), expense("2024-01-05", 3100, category="租金", id=2))
    result = runner.invoke(app, ["report", "--year", "2024", "--month", "1", "--trend", "day"])
    assert result.exit_code == 0, result.output
    assert "1/5\t1,000\t100\t900" in result.output
    assert "1/6\t0\t100\t-100" in result.output
    assert "2/1\t" not in result.output
    assert "1月 成本結構" in result.output


def test_report_without_smart_distribution() -> None:
    _seed(income("2024-01-05", 1000, id=1), expense("2024-01-05", 3100, category="租金", id=2))
    result = runner.invoke(app, ["report", "--year", "2024", "--month", "1", "--trend", "day", "--no-smart"])
    assert result.exit_code == 0, result.output
    assert "1/5\t1,000\t3,100\t-2,100" in result.output


def test_report_rejects_unknown_trend_and_bad_policy(tmp_path: Path) -> None:
    assert runner.invoke(app, ["report", "--trend", "year"]).exit_code == 1
    assert runner.invoke(app, ["report", "--policy", str(tmp_path / "missing.json")]).exit_code == 1


def test_report_reads_policy_file(tmp_path: Path) -> None:
    _seed(income("2024-01-05", 100, id=1), expense("2024-01-05", 60, category="食材", id=2))
    policy = tmp_path / "policy.json"
    policy.write_text(json.dumps({"merge_exact": {"食材": "原料"}}, ensure_ascii=False), encoding="utf-8")
    result = runner.invoke(app, ["report", "--year", "2024", "--month", "1", "--policy", str(policy)])
    assert result.exit_code == 0, result.output
    assert "原料\t60" in result.output


# ---- export / sync / categories -------------------------------------------


def test_export_csv_to_file(tmp_path: Path) -> None:
    _seed(expense("2024-01-05", 120, note='He said "hi"', id=7))
    out = tmp_path / "ledger.csv"
    result = runner.invoke(app, ["export", "--format", "csv", "--output", str(out)])
    assert result.exit_code == 0, result.output

    text = out.read_text(encoding="utf-8")
    assert text.startswith(CSV_BOM)
    assert text.split("\n")[1] == '7,2024-01-05,支出,食材,120,"He said ""hi"""'


def test_export_json_to_file(tmp_path: Path) -> None:
    _seed(income("2024-01-05", 1000, id=1))
    out = tmp_path / "ledger.json"
    assert runner.invoke(app, ["export", "-f", "json", "-o", str(out)]).exit_code == 0
    assert json.loads(out.read_text(encoding="utf-8"))[0]["id"] == 1


def test_export_rejects_unknown_format() -> None:
    assert runner.invoke(app, ["export", "--format", "xlsx"]).exit_code == 1


def test_sync_requires_remote() -> None:
    assert runner.invoke(app, ["sync"]).exit_code == 1


def test_sync_replaces_local_copy(monkeypatch: pytest.MonkeyPatch) -> None:
    _seed(income("2024-01-05", 1, id=1))
    rows = [{"id": 2, "date": "2024-02-01", "type": "支出", "category": "租金", "amount": 900}]

    class _Resp:
        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def read(self) -> bytes:
            return json.dumps(rows).encode("utf-8")

    monkeypatch.setattr(urllib.request, "urlopen", lambda req, timeout=None: _Resp())
    monkeypatch.setenv("LEDGER_REMOTE_URL", "https://script.example.test/exec")

    result = runner.invoke(app, ["sync"])
    assert result.exit_code == 0, result.output
    assert [t.id for t in LocalStorage().load()] == [2]


def test_categories_lists_distribution_classes() -> None:
    result = runner.invoke(app, ["categories"])
    assert result.exit_code == 0
    assert "租金\t[fixed]" in result.output
    assert "米糧\t[weighted]" in result.output
    assert "薪資 (日)\t[direct] -> 薪資總計" in result.output
    lines = result.output.splitlines()
    # Group headers precede their members; income comes first.
    assert lines[0] == "收入"
    first_daily = next(i for i, line in enumerate(lines) if line.startswith("  食材\t[direct]"))
    assert lines.index("日支出 (經常支出)") == first_daily - 1
