"""
Wizard step registry and soft completeness indicators.

Indicators never block navigation or export: this is a drafting tool.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from repair_builder.schemas.manual import ManualData


@dataclass(frozen=True)
class Step:
    id: str
    title: str
    description: str


STEPS: List[Step] = [
    Step("foundations", "Setup", "Org details and Key Staff"),
    Step("policyMap", "Policy Map", "Distinguish Org vs. Program policies"),
    Step("programModel", "Roles/Responsibilities", "Define staff and board roles"),
    Step("scope", "Scope & Impact", "Eligibility, caps, and exclusions"),
    Step("clientServices", "Client Services", "Service flow and participation"),
    Step("screening", "Prioritization", "Intake and scoring matrix"),
    Step("lifecycle", "Project Lifecycle", "Assessment to Closeout"),
    Step("workforce", "Workforce Strategy", "Contractors vs. Volunteers"),
    Step("performance", "Performance", "KPIs and Reporting"),
    Step("compliance", "Compliance", "Policy 33 Alignment"),
    Step("export", "Review & Export", "Finalize and download"),
]

# Steps with explicit completeness rules; others are always "pending"
TRACKED_STEPS = ("foundations", "policyMap", "scope", "clientServices")


class StepStatus(str, Enum):
    COMPLETE = "complete"
    WARNING = "warning"
    PENDING = "pending"


def get_step(step_id: str) -> Optional[Step]:
    for step in STEPS:
        if step.id == step_id:
            return step
    return None


def _foundations_filled(data: ManualData) -> bool:
    return all(
        [data.org_name, data.org_address, data.org_phone, data.org_email, data.service_area]
    )


def _policy_map_assigned(data: ManualData) -> bool:
    entries = list(data.policy_map.values())
    return bool(entries) and all(e.org or e.program for e in entries)


def is_step_complete(step_id: str, data: ManualData) -> bool:
    """True when the step's required fields are present."""
    if step_id == "scope":
        return data.construction_activities.has_catalog is True
    if step_id == "foundations":
        return _foundations_filled(data)
    if step_id == "policyMap":
        return _policy_map_assigned(data)
    if step_id == "clientServices":
        return data.client_services.participation.required != ""
    return False


def is_step_warning(step_id: str, data: ManualData) -> bool:
    """True when a tracked step is missing something worth flagging."""
    if step_id == "scope":
        # unanswered (None) is neither complete nor a warning
        return data.construction_activities.has_catalog is False
    if step_id == "foundations":
        return not _foundations_filled(data)
    if step_id == "policyMap":
        return not _policy_map_assigned(data)
    if step_id == "clientServices":
        return data.client_services.participation.required == ""
    return False


def step_status(step_id: str, data: ManualData) -> StepStatus:
    if is_step_complete(step_id, data):
        return StepStatus.COMPLETE
    if is_step_warning(step_id, data):
        return StepStatus.WARNING
    return StepStatus.PENDING


def wizard_progress(data: ManualData) -> Dict[str, StepStatus]:
    """Status for every step, in wizard order."""
    return {step.id: step_status(step.id, data) for step in STEPS}
