# ruff: noqa: E402, I001
from __future__ import annotations

from shop_ledger.breakdown import (
    NET_PROFIT_LABEL,
    breakdown_by_category,
    cost_structure,
    income_composition,
    income_sources,
)
from shop_ledger.models import EXPENSE, INCOME, CategoryBreakdown
from shop_ledger.policy import MergeMarker, ReportPolicy
from tests.helpers.ledger import expense, income


def _pairs(rows: list[CategoryBreakdown]) -> list[tuple[str, float]]:
    return [(r.category, r.value) for r in rows]


def test_breakdown_groups_by_literal_category_sorted_descending() -> None:
    data = [
        expense("2024-01-01", 100, category="食材"),
        expense("2024-01-02", 400, category="租金"),
        expense("2024-01-03", 250, category="食材"),
        income("2024-01-03", 9999),
    ]
    rows = breakdown_by_category(data, EXPENSE)
    assert _pairs(rows) == [("租金", 400), ("食材", 350)]
    assert all(a.value >= b.value for a, b in zip(rows, rows[1:]))


def test_breakdown_ties_keep_first_seen_order() -> None:
    data = [
        income("2024-01-01", 50, category="UberEats"),
        income("2024-01-01", 50, category="FoodPanda"),
        income("2024-01-01", 80, category="現金收入"),
    ]
    assert _pairs(income_sources(data)) == [("現金收入", 80), ("UberEats", 50), ("FoodPanda", 50)]


def test_breakdown_of_empty_input_is_empty() -> None:
    assert breakdown_by_category([], INCOME) == []
    assert cost_structure([]) == []


def test_cost_structure_folds_salary_and_sundry_labels() -> None:
    data = [
        expense("2024-02-01", 1200, category="薪資 (日)"),
        expense("2024-02-28", 30000, category="薪資 (月)"),
        expense("2024-02-10", 300, category="維修"),
        expense("2024-02-11", 200, category="雜項"),
        expense("2024-02-12", 100, category="清潔維護費"),
        expense("2024-02-13", 700, category="食材"),
    ]
    assert _pairs(cost_structure(data)) == [("薪資總計", 31200), ("食材", 700), ("雜支", 600)]


def test_marker_rules_win_over_exact_entries() -> None:
    policy = ReportPolicy(
        merge_markers=(MergeMarker(marker="薪資", label="人事"),),
        merge_exact={"薪資 (日)": "日薪", "維修": "修繕"},
    )
    data = [
        expense("2024-02-01", 10, category="薪資 (日)"),
        expense("2024-02-01", 5, category="維修"),
    ]
    assert _pairs(cost_structure(data, policy)) == [("人事", 10), ("修繕", 5)]


def test_income_sources_accepts_a_merge_table() -> None:
    policy = ReportPolicy(merge_exact={"FoodPanda": "外送", "UberEats": "外送"})
    data = [
        income("2024-01-01", 30, category="FoodPanda"),
        income("2024-01-01", 40, category="UberEats"),
        income("2024-01-01", 50, category="現金收入"),
    ]
    assert _pairs(income_sources(data, merge=policy)) == [("外送", 70), ("現金收入", 50)]


def test_income_composition_leads_with_net_profit() -> None:
    data = [
        income("2024-03-01", 1000),
        expense("2024-03-01", 300, category="租金"),
        expense("2024-03-02", 100, category="食材"),
    ]
    rows = income_composition(data)
    assert _pairs(rows) == [(NET_PROFIT_LABEL, 600), ("租金", 300), ("食材", 100)]
    assert sum(r.value for r in rows) == 1000


def test_income_composition_on_a_loss_is_the_cost_structure() -> None:
    data = [income("2024-03-01", 100), expense("2024-03-01", 300, category="租金")]
    assert _pairs(income_composition(data)) == [("租金", 300)]


def test_income_composition_of_break_even_has_no_profit_slice() -> None:
    data = [income("2024-03-01", 300), expense("2024-03-01", 300, category="租金")]
    assert NET_PROFIT_LABEL not in [r.category for r in income_composition(data)]


def test_income_composition_of_empty_period_is_empty() -> None:
    assert income_composition([]) == []


def test_income_composition_of_income_only_period() -> None:
    assert _pairs(income_composition([income("2024-03-01", 500)])) == [(NET_PROFIT_LABEL, 500)]
