"""Report policy: expense distribution classes and category label merging.

Both tables are configuration, not data. They are injected into the trend
builder (distribution) and the category aggregator (label merging) so a shop
can reclassify a category or change how the cost-structure chart folds labels
without a code change.

A policy file is JSON matching :class:`ReportPolicy`, for example::

    {
      "distribution": {"租金": "fixed", "米糧": "weighted"},
      "merge_markers": [{"marker": "薪資", "label": "薪資總計"}],
      "merge_exact": {"維修": "雜支"},
      "smart_distribution": true
    }

Categories absent from ``distribution`` are ``direct``. Label merging checks
markers (substring rules) first, in order, then exact entries; a category that
matches neither keeps its own label.
"""

from __future__ import annotations

import json
import os
from os import PathLike
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .catalog import EXPENSE_GROUPS, FIXED_GROUP, VARIABLE_GROUP
from .logging_setup import get_logger
from .models import DistributionClass

POLICY_FILE_ENV = "LEDGER_POLICY_FILE"

SALARY_MARKER = "薪資"
SALARY_LABEL = "薪資總計"
SUNDRY_LABEL = "雜支"
SUNDRY_CATEGORIES: tuple[str, ...] = ("清潔維護費", "維修", "雜項")

_logger = get_logger("shop_ledger.policy")


class MergeMarker(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    marker: str = Field(min_length=1)
    label: str = Field(min_length=1)


class ReportPolicy(BaseModel):
    """Externally supplied configuration for the reporting engine."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    distribution: dict[str, DistributionClass] = Field(default_factory=dict)
    merge_markers: tuple[MergeMarker, ...] = ()
    merge_exact: dict[str, str] = Field(default_factory=dict)
    smart_distribution: bool = True

    @field_validator("merge_exact")
    @classmethod
    def _labels_non_empty(cls, v: dict[str, str]) -> dict[str, str]:
        for raw, label in v.items():
            if not label.strip():
                raise ValueError(f"merge label for {raw!r} must be non-empty")
        return v

    def classify(self, category: str) -> DistributionClass:
        """Return the distribution class of an expense ``category``."""

        return self.distribution.get(category, "direct")

    def display_label(self, category: str) -> str:
        """Return the display bucket for ``category`` under the merge rules."""

        for rule in self.merge_markers:
            if rule.marker in category:
                return rule.label
        return self.merge_exact.get(category, category)


def default_policy() -> ReportPolicy:
    """Return the shop's standing policy, derived from the category catalog.

    - Monthly fixed costs (rent, utilities, monthly payroll) are ``fixed``.
    - Monthly variable costs (staples, platform fees, tax, repairs) are
      ``weighted`` by daily revenue.
    - Daily/recurring costs stay ``direct``.
    - All salary categories fold into one bucket; cleaning, repairs and
      miscellany fold into a sundry bucket.
    """

    distribution: dict[str, DistributionClass] = {}
    for category in EXPENSE_GROUPS[FIXED_GROUP]:
        distribution[category] = "fixed"
    for category in EXPENSE_GROUPS[VARIABLE_GROUP]:
        distribution[category] = "weighted"

    return ReportPolicy(
        distribution=distribution,
        merge_markers=(MergeMarker(marker=SALARY_MARKER, label=SALARY_LABEL),),
        merge_exact={c: SUNDRY_LABEL for c in SUNDRY_CATEGORIES},
    )


def load_policy(path: str | PathLike[str] | None = None) -> ReportPolicy:
    """Load a policy from ``path``, ``$LEDGER_POLICY_FILE``, or the defaults.

    Raises ``ValueError`` with context when the file cannot be read or does not
    match the :class:`ReportPolicy` schema.
    """

    if path is None:
        env_path = os.getenv(POLICY_FILE_ENV)
        if not env_path or not env_path.strip():
            return default_policy()
        path = env_path.strip()

    p = Path(path).expanduser()
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"cannot read policy file {os.fspath(p)}: {exc}") from exc

    try:
        policy = ReportPolicy.model_validate_json(text)
    except ValidationError as exc:
        raise ValueError(f"invalid policy file {os.fspath(p)}: {exc}") from exc

    _logger.debug(
        "policy:loaded path=%s distribution=%d markers=%d exact=%d smart=%s",
        os.fspath(p),
        len(policy.distribution),
        len(policy.merge_markers),
        len(policy.merge_exact),
        policy.smart_distribution,
    )
    return policy


def dump_policy(policy: ReportPolicy) -> str:
    """Serialize ``policy`` as pretty JSON suitable for :func:`load_policy`."""

    return json.dumps(policy.model_dump(mode="json"), ensure_ascii=False, indent=2)


__all__ = [
    "MergeMarker",
    "POLICY_FILE_ENV",
    "ReportPolicy",
    "default_policy",
    "dump_policy",
    "load_policy",
]
