"""
Urgency x condition prioritization.

This is the single place where effective (override-resolved) urgency and
condition are derived. Filtering, stats and export all go through
``effective_urgency`` / ``effective_condition`` / ``effective_priority``.
"""

from enum import Enum
from typing import Dict, Optional, Tuple, Union

from repair_builder.schemas.selection import Selection
from repair_builder.schemas.taxonomy import Activity, Condition, FlatActivity, Urgency


class Priority(str, Enum):
    """Priority tiers; lower rank is strictly more urgent."""

    P1 = "Priority 1"
    P2 = "Priority 2"
    P3 = "Priority 3"
    P4 = "Priority 4"
    P5 = "Priority 5"
    P6 = "Priority 6"

    @property
    def rank(self) -> int:
        return int(self.value.rsplit(" ", 1)[1])


# Emergent/Inactive and Non-Critical/Passive intentionally share Priority 5.
PRIORITY_MATRIX: Dict[Tuple[Urgency, Condition], Priority] = {
    (Urgency.CRITICAL, Condition.ACTIVE): Priority.P1,
    (Urgency.CRITICAL, Condition.PASSIVE): Priority.P2,
    (Urgency.CRITICAL, Condition.INACTIVE): Priority.P3,
    (Urgency.EMERGENT, Condition.ACTIVE): Priority.P2,
    (Urgency.EMERGENT, Condition.PASSIVE): Priority.P3,
    (Urgency.EMERGENT, Condition.INACTIVE): Priority.P5,
    (Urgency.NON_CRITICAL, Condition.ACTIVE): Priority.P4,
    (Urgency.NON_CRITICAL, Condition.PASSIVE): Priority.P5,
    (Urgency.NON_CRITICAL, Condition.INACTIVE): Priority.P6,
}


def priority(
    urgency: Union[Urgency, str], condition: Union[Condition, str]
) -> Optional[Priority]:
    """
    Map (urgency, condition) to a priority tier.

    Returns None when either input is N/A: no priority applies to the item
    (e.g. community-building activities). That is not an error.

    Example:
        >>> priority("Critical", "Active")
        <Priority.P1: 'Priority 1'>
        >>> priority("N/A", "Active") is None
        True
    """
    return PRIORITY_MATRIX.get((Urgency(urgency), Condition(condition)))


ActivityLike = Union[Activity, FlatActivity]


def effective_urgency(activity: ActivityLike, selection: Optional[Selection]) -> Urgency:
    """Urgency override if present, else the activity default."""
    if selection is not None and selection.urgency is not None:
        return selection.urgency
    return activity.default_urgency


def effective_condition(activity: ActivityLike, selection: Optional[Selection]) -> Condition:
    """Condition override if present, else the activity default."""
    if selection is not None and selection.condition is not None:
        return selection.condition
    return activity.default_condition


def effective_priority(activity: ActivityLike, selection: Optional[Selection]) -> Optional[Priority]:
    """Priority computed from the effective urgency and condition."""
    return priority(
        effective_urgency(activity, selection),
        effective_condition(activity, selection),
    )


def criticality_applies(activity: ActivityLike, selection: Optional[Selection]) -> bool:
    """False when both effective urgency and condition are N/A."""
    return not (
        effective_urgency(activity, selection) == Urgency.NA
        and effective_condition(activity, selection) == Condition.NA
    )
