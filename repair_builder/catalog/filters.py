"""
Filter/search engine over the activity taxonomy.

Filtering runs bottom-up: activities are tested against the text, status and
critical-only predicates; a type survives if it passes its id restriction and
keeps at least one activity; sub-categories and pillars likewise. Original
order is preserved and nothing is re-ordered or de-duplicated.
"""

from typing import List, Mapping, Optional, Set

from pydantic import BaseModel, ConfigDict

from repair_builder.catalog.priority import effective_urgency
from repair_builder.schemas.selection import Selection, StatusFilter
from repair_builder.schemas.taxonomy import (
    Activity,
    ActivityType,
    Pillar,
    SubCategory,
    Taxonomy,
    Urgency,
)


class CatalogQuery(BaseModel):
    """
    Ephemeral view state for the catalog sidebar.

    All restrictions are optional; the default query is the full catalog.
    """

    model_config = ConfigDict(frozen=True)

    text: str = ""
    pillar_id: Optional[str] = None
    sub_category_id: Optional[str] = None
    type_id: Optional[str] = None
    status: Optional[StatusFilter] = None
    critical_only: bool = False

    @property
    def is_empty(self) -> bool:
        return (
            not self.text.strip()
            and self.pillar_id is None
            and self.sub_category_id is None
            and self.type_id is None
            and self.status is None
            and not self.critical_only
        )


def _status_matches(selection: Optional[Selection], status: StatusFilter) -> bool:
    if status == StatusFilter.UNSELECTED:
        return selection is None or selection.status is None
    return selection is not None and selection.status is not None and selection.status.value == status.value


def activity_matches(
    activity: Activity,
    activity_type: ActivityType,
    query: CatalogQuery,
    selections: Mapping[str, Selection],
) -> bool:
    """Activity-level predicate (text AND status AND critical-only)."""
    needle = query.text.strip().lower()
    if needle and needle not in activity.name.lower() and needle not in activity_type.name.lower():
        return False

    selection = selections.get(activity.id)
    if query.status is not None and not _status_matches(selection, query.status):
        return False

    if query.critical_only and effective_urgency(activity, selection) != Urgency.CRITICAL:
        return False

    return True


def _filter_type(
    activity_type: ActivityType, query: CatalogQuery, selections: Mapping[str, Selection]
) -> Optional[ActivityType]:
    if query.type_id is not None and activity_type.id != query.type_id:
        return None
    kept = tuple(
        a for a in activity_type.activities if activity_matches(a, activity_type, query, selections)
    )
    if not kept:
        return None
    return activity_type.model_copy(update={"activities": kept})


def _filter_sub_category(
    sub: SubCategory, query: CatalogQuery, selections: Mapping[str, Selection]
) -> Optional[SubCategory]:
    if query.sub_category_id is not None and sub.id != query.sub_category_id:
        return None
    kept = []
    for activity_type in sub.types:
        filtered = _filter_type(activity_type, query, selections)
        if filtered is not None:
            kept.append(filtered)
    if not kept:
        return None
    return sub.model_copy(update={"types": tuple(kept)})


def _filter_pillar(
    pillar: Pillar, query: CatalogQuery, selections: Mapping[str, Selection]
) -> Optional[Pillar]:
    if query.pillar_id is not None and pillar.id != query.pillar_id:
        return None
    kept = []
    for sub in pillar.sub_categories:
        filtered = _filter_sub_category(sub, query, selections)
        if filtered is not None:
            kept.append(filtered)
    if not kept:
        return None
    return pillar.model_copy(update={"sub_categories": tuple(kept)})


def filter_taxonomy(
    taxonomy: Taxonomy,
    query: Optional[CatalogQuery] = None,
    selections: Optional[Mapping[str, Selection]] = None,
) -> Taxonomy:
    """
    Return the pruned subtree visible under ``query``.

    An empty query returns ``taxonomy`` itself, unchanged.

    Example:
        >>> visible = filter_taxonomy(taxonomy, CatalogQuery(text="roof"))
        >>> [p.name for p in visible.pillars]
        ['Dwelling Safety']
    """
    query = query or CatalogQuery()
    selections = selections if selections is not None else {}
    if query.is_empty:
        return taxonomy

    pillars: List[Pillar] = []
    for pillar in taxonomy.pillars:
        filtered = _filter_pillar(pillar, query, selections)
        if filtered is not None:
            pillars.append(filtered)
    return taxonomy.model_copy(update={"pillars": tuple(pillars)})


def matching_activity_ids(
    taxonomy: Taxonomy,
    query: Optional[CatalogQuery] = None,
    selections: Optional[Mapping[str, Selection]] = None,
) -> Set[str]:
    """Ids of all activities retained by ``query``."""
    visible = filter_taxonomy(taxonomy, query, selections)
    return {activity.id for activity in visible.iter_activities()}
