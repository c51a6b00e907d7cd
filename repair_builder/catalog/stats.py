"""
Aggregation over the taxonomy and selection state.

Everything here is recomputed from scratch on every call; the dataset is a few
hundred activities and cached counters would be able to drift.
"""

from collections import Counter
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from repair_builder.catalog.priority import effective_priority, effective_urgency
from repair_builder.schemas.selection import Selection, SelectionStatus
from repair_builder.schemas.taxonomy import Taxonomy, Urgency

NO_PRIORITY = "none"


class StatusCounts(BaseModel):
    """Activity counts by selection status; always sums to ``total``."""

    model_config = ConfigDict(frozen=True)

    eligible: int = 0
    not_eligible: int = 0
    conditional: int = 0
    na: int = 0
    unselected: int = 0
    total: int = 0

    @property
    def decided(self) -> int:
        return self.total - self.unselected


class LevelCount(BaseModel):
    """Visible vs total nodes at one hierarchy level ("X of Y")."""

    model_config = ConfigDict(frozen=True)

    visible: int
    total: int

    def __str__(self) -> str:
        return f"{self.visible} of {self.total}"


class LevelCounts(BaseModel):
    model_config = ConfigDict(frozen=True)

    pillar: LevelCount
    sub_category: LevelCount
    type: LevelCount
    activity: LevelCount


class CatalogStats(BaseModel):
    """Status counts plus distributions by effective urgency and priority."""

    model_config = ConfigDict(frozen=True)

    status: StatusCounts
    by_urgency: Dict[str, int]
    by_priority: Dict[str, int]


def compute_status_counts(
    taxonomy: Taxonomy, selections: Mapping[str, Selection]
) -> StatusCounts:
    """
    Count activities by status.

    Selections whose ids are not in the taxonomy are ignored. ``unselected``
    is derived as total minus the four decided buckets.
    """
    counts: Counter = Counter()
    total = 0
    for activity in taxonomy.iter_activities():
        total += 1
        selection = selections.get(activity.id)
        if selection is not None and selection.status is not None:
            counts[selection.status] += 1

    decided = {status: counts.get(status, 0) for status in SelectionStatus}
    return StatusCounts(
        eligible=decided[SelectionStatus.ELIGIBLE],
        not_eligible=decided[SelectionStatus.NOT_ELIGIBLE],
        conditional=decided[SelectionStatus.CONDITIONAL],
        na=decided[SelectionStatus.NA],
        unselected=total - sum(decided.values()),
        total=total,
    )


def _level_totals(taxonomy: Taxonomy) -> Dict[str, int]:
    pillars = len(taxonomy.pillars)
    subs = sum(len(p.sub_categories) for p in taxonomy.pillars)
    types = sum(len(s.types) for p in taxonomy.pillars for s in p.sub_categories)
    return {
        "pillar": pillars,
        "sub_category": subs,
        "type": types,
        "activity": taxonomy.activity_count,
    }


def compute_level_counts(full: Taxonomy, filtered: Optional[Taxonomy] = None) -> LevelCounts:
    """
    Per-level (visible, total) counts for a filtered view of ``full``.

    Without ``filtered`` every node is visible.
    """
    totals = _level_totals(full)
    visible = _level_totals(filtered) if filtered is not None else totals
    return LevelCounts(
        **{
            level: LevelCount(visible=visible[level], total=totals[level])
            for level in totals
        }
    )


def compute_catalog_stats(
    taxonomy: Taxonomy, selections: Mapping[str, Selection]
) -> CatalogStats:
    """
    Status counts and distributions by effective urgency and priority.

    Urgency/priority use override-resolved values. Activities without an
    applicable priority are counted under ``"none"``.
    """
    by_urgency: Dict[str, int] = {u.value: 0 for u in Urgency}
    by_priority: Counter = Counter()

    for activity in taxonomy.iter_activities():
        selection = selections.get(activity.id)
        by_urgency[effective_urgency(activity, selection).value] += 1
        tier = effective_priority(activity, selection)
        by_priority[tier.value if tier is not None else NO_PRIORITY] += 1

    return CatalogStats(
        status=compute_status_counts(taxonomy, selections),
        by_urgency=by_urgency,
        by_priority=dict(sorted(by_priority.items())),
    )
