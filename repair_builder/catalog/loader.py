# repair_builder/catalog/loader.py
"""
Builds and provides access to the Repair Activity Taxonomy.

Provides functions to:
- Load and cache the taxonomy from its JSON resource
- Flatten the tree into activity rows annotated with their ancestors
- Look up activities by id
"""

import errno
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from repair_builder.configs.config import Config
from repair_builder.errors import UnknownActivityError
from repair_builder.schemas.taxonomy import Activity, FlatActivity, Taxonomy

logger = logging.getLogger(__name__)

TAXONOMY_PATH = Config.get_taxonomy_path()


def taxonomy_from_dict(data: Dict[str, Any]) -> Taxonomy:
    """
    Validate a raw taxonomy mapping into an immutable Taxonomy.

    Raises:
        pydantic.ValidationError: if the structure is malformed or ids collide.
    """
    return Taxonomy.model_validate(data)


def load_taxonomy_from_path(path: Union[str, Path]) -> Taxonomy:
    """
    Load a taxonomy JSON file.

    Args:
        path: Location of the taxonomy resource.

    Returns:
        Parsed and validated taxonomy.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(errno.ENOENT, "Taxonomy file not found", str(path))

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    taxonomy = taxonomy_from_dict(data)
    logger.debug(
        "Loaded taxonomy %s v%s (%d pillars, %d activities) from %s",
        taxonomy.name,
        taxonomy.version,
        len(taxonomy.pillars),
        taxonomy.activity_count,
        path,
    )
    return taxonomy


@lru_cache
def load_taxonomy() -> Taxonomy:
    """
    Load and cache the bundled Repair Activity Taxonomy.
    """
    return load_taxonomy_from_path(TAXONOMY_PATH)


# =============================================================================
# FLATTENING
# =============================================================================


def flatten(taxonomy: Taxonomy) -> List[FlatActivity]:
    """
    Flatten the taxonomy into one row per activity.

    Rows follow a stable depth-first order (pillar, sub-category, type,
    activity) so grouped displays are deterministic. Empty branches simply
    contribute no rows.

    Example:
        >>> rows = flatten(load_taxonomy())
        >>> rows[0].pillar_name
        'Dwelling Safety'
    """
    out: List[FlatActivity] = []
    for pillar in taxonomy.pillars:
        for sub in pillar.sub_categories:
            for activity_type in sub.types:
                for activity in activity_type.activities:
                    out.append(
                        FlatActivity(
                            id=activity.id,
                            name=activity.name,
                            default_urgency=activity.default_urgency,
                            default_condition=activity.default_condition,
                            pillar_id=pillar.id,
                            pillar_name=pillar.name,
                            pillar_description=pillar.description,
                            sub_category_id=sub.id,
                            sub_category_name=sub.name,
                            sub_category_description=sub.description,
                            type_id=activity_type.id,
                            type_name=activity_type.name,
                            type_description=activity_type.description,
                        )
                    )
    return out


# =============================================================================
# ACTIVITY-LEVEL ACCESS FUNCTIONS
# =============================================================================


def get_activity_by_id(
    taxonomy: Taxonomy, activity_id: str, strict: bool = False
) -> Optional[Activity]:
    """
    Look up an activity by id.

    Args:
        taxonomy: Taxonomy to search.
        activity_id: Activity id (e.g. "1.1.1.1").
        strict: Raise UnknownActivityError instead of returning None.
    """
    for activity in taxonomy.iter_activities():
        if activity.id == activity_id:
            return activity
    if strict:
        raise UnknownActivityError(activity_id)
    return None
