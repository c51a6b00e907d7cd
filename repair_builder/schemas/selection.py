"""
Selection records: a user's eligibility decision for one activity.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from repair_builder.schemas.taxonomy import Condition, Urgency


class SelectionStatus(str, Enum):
    """Eligibility decision for an activity. Absence means unselected."""

    ELIGIBLE = "eligible"
    NOT_ELIGIBLE = "not_eligible"
    CONDITIONAL = "conditional"
    NA = "na"

    @property
    def label(self) -> str:
        """Display form: upper-cased with underscores as spaces."""
        return self.value.replace("_", " ").upper()


class StatusFilter(str, Enum):
    """Status restriction for catalog filtering; adds ``unselected``."""

    ELIGIBLE = "eligible"
    NOT_ELIGIBLE = "not_eligible"
    CONDITIONAL = "conditional"
    NA = "na"
    UNSELECTED = "unselected"


UNSELECTED_LABEL = "UNSELECTED"


class Selection(BaseModel):
    """
    Mutable per-activity record.

    ``urgency``/``condition`` are overrides; when absent the activity's
    defaults apply. Unknown fields found in persisted data are ignored.
    """

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    status: Optional[SelectionStatus] = None
    urgency: Optional[Urgency] = None
    condition: Optional[Condition] = None
    notes: Optional[str] = None

    @property
    def is_selected(self) -> bool:
        return self.status is not None


def status_label(selection: Optional[Selection]) -> str:
    """Render a selection's status for reports ('NOT ELIGIBLE', 'UNSELECTED', ...)."""
    if selection is None or selection.status is None:
        return UNSELECTED_LABEL
    return selection.status.label
