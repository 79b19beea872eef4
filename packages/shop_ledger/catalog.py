"""Recognized categories and quick-note presets for the shop.

The catalog is advisory. It drives the defaults of the report policy
(:func:`shop_ledger.policy.default_policy`), the CLI's category listing, and
input suggestions, but :class:`~shop_ledger.models.Transaction` accepts any
non-empty category string. Historical rows with retired labels keep working.

Exports
-------
- ``INCOME_CATEGORIES`` and ``EXPENSE_GROUPS`` (group label → categories).
- ``DAILY_GROUP``, ``VARIABLE_GROUP``, ``FIXED_GROUP``: the expense group labels.
- ``NOTE_PRESETS``: quick-note suggestions per category.
- ``categories_for(type)``, ``group_of(category)``, ``normalize_name(name)``.
"""

from __future__ import annotations

from collections.abc import Mapping

from .models import EXPENSE, INCOME, TransactionType

INCOME_CATEGORIES: tuple[str, ...] = ("現金收入", "FoodPanda", "UberEats", "其他收入")

DAILY_GROUP = "日支出 (經常支出)"
VARIABLE_GROUP = "月支出 (浮動支出)"
FIXED_GROUP = "月支出 (固定支出)"

# Insertion order is display order.
EXPENSE_GROUPS: Mapping[str, tuple[str, ...]] = {
    DAILY_GROUP: ("食材", "薪資 (日)", "雜項"),
    VARIABLE_GROUP: (
        "米糧",
        "蔬菜",
        "火鍋料",
        "調味料",
        "耗材",
        "FoodPanda",
        "UberEats",
        "稅務",
        "維修",
    ),
    FIXED_GROUP: ("租金", "水費", "電費", "瓦斯類", "電話費", "清潔維護費", "薪資 (月)"),
}

NOTE_PRESETS: Mapping[str, tuple[str, ...]] = {
    "食材": ("豆腐鴨血", "臭豆腐", "蛤蜊", "洋蔥", "拉麵", "泡菜", "可樂", "冰淇淋"),
    "薪資 (日)": ("寶雲", "曹靜", "幫廚", "揚", "婷", "鈺"),
    "清潔維護費": ("地墊", "除蟲", "瓦斯爐"),
    "薪資 (月)": ("寶雲", "靜儀", "淑美", "雪紅", "惠華", "小惠"),
}


def normalize_name(name: str) -> str:
    """Return a trimmed, single-spaced representation of ``name``."""

    return " ".join(name.strip().split())


def categories_for(txn_type: TransactionType) -> tuple[str, ...]:
    """Return the recognized categories for a transaction type, in display order."""

    if txn_type == INCOME:
        return INCOME_CATEGORIES
    if txn_type == EXPENSE:
        return tuple(c for members in EXPENSE_GROUPS.values() for c in members)
    raise ValueError(f"unknown transaction type: {txn_type!r}")


def group_of(category: str) -> str | None:
    """Return the expense group label for ``category`` or ``None`` when unlisted."""

    for label, members in EXPENSE_GROUPS.items():
        if category in members:
            return label
    return None


def note_presets(category: str) -> tuple[str, ...]:
    return NOTE_PRESETS.get(category, ())


__all__ = [
    "DAILY_GROUP",
    "EXPENSE_GROUPS",
    "FIXED_GROUP",
    "INCOME_CATEGORIES",
    "NOTE_PRESETS",
    "VARIABLE_GROUP",
    "categories_for",
    "group_of",
    "normalize_name",
    "note_presets",
]
