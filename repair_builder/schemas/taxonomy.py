"""
Repair Activity Taxonomy models.

The taxonomy is static reference data with four levels:

    Pillar -> SubCategory -> ActivityType -> Activity

All models are frozen; the taxonomy is loaded once and never mutated. Child
order is display-significant, identity is by id.
"""

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ============================================================================
# ENUMS: Criticality dimensions
# ============================================================================


class Urgency(str, Enum):
    """How soon a defect must be addressed."""

    CRITICAL = "Critical"
    EMERGENT = "Emergent"
    NON_CRITICAL = "Non-Critical"
    NA = "N/A"


class Condition(str, Enum):
    """Whether a defect is worsening, stable or merely suboptimal."""

    ACTIVE = "Active"
    PASSIVE = "Passive"
    INACTIVE = "Inactive"
    NA = "N/A"


class HierarchyLevel(str, Enum):
    """Levels above the activity leaf, as named in export configuration."""

    PILLAR = "pillar"
    SUB_CATEGORY = "subCategory"
    TYPE = "type"


# ============================================================================
# TREE
# ============================================================================


class Activity(BaseModel):
    """
    A single selectable unit of repair work (the leaf of the taxonomy).
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Globally unique activity id, e.g. '1.1.1.1'")
    name: str = Field(..., min_length=1)
    default_urgency: Urgency = Urgency.NA
    default_condition: Condition = Condition.NA


class ActivityType(BaseModel):
    """Grouping of closely related activities."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    activities: Tuple[Activity, ...] = ()


class SubCategory(BaseModel):
    """Grouping of related activity types within a pillar."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""
    types: Tuple[ActivityType, ...] = ()


class Pillar(BaseModel):
    """Top-level thematic category of repair work."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""
    sub_categories: Tuple[SubCategory, ...] = ()


class Taxonomy(BaseModel):
    """
    The complete activity taxonomy.

    Validation guarantees that activity ids are unique across the whole tree
    (selections are keyed by activity id) and that sub-category ids are unique
    across pillars.
    """

    model_config = ConfigDict(frozen=True)

    name: str = "Repair Activity Taxonomy"
    version: str = "1.0"
    pillars: Tuple[Pillar, ...] = ()

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "Taxonomy":
        """Reject duplicated sub-category or activity ids."""
        seen_subs: set[str] = set()
        seen_activities: set[str] = set()
        for pillar in self.pillars:
            for sub in pillar.sub_categories:
                if sub.id in seen_subs:
                    raise ValueError(f"Duplicate sub-category id '{sub.id}' in taxonomy")
                seen_subs.add(sub.id)
                for activity_type in sub.types:
                    for activity in activity_type.activities:
                        if activity.id in seen_activities:
                            raise ValueError(
                                f"Duplicate activity id '{activity.id}' in taxonomy"
                            )
                        seen_activities.add(activity.id)
        return self

    def iter_activities(self):
        """Yield every activity in depth-first display order."""
        for pillar in self.pillars:
            for sub in pillar.sub_categories:
                for activity_type in sub.types:
                    yield from activity_type.activities

    @property
    def activity_count(self) -> int:
        return sum(1 for _ in self.iter_activities())


class FlatActivity(BaseModel):
    """
    An activity annotated with its ancestors, as produced by flattening.

    Used by search, stats and export so none of them has to walk the tree.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    default_urgency: Urgency
    default_condition: Condition

    pillar_id: str
    pillar_name: str
    pillar_description: str = ""

    sub_category_id: str
    sub_category_name: str
    sub_category_description: str = ""

    type_id: str
    type_name: str
    type_description: Optional[str] = None
