"""
Wizard field values for the repair program policies & procedures manual.

Every field has a default so a partially filled (or partially corrupt)
persisted manual always loads. Defaults mirror a typical affiliate starting
point; they are drafting aids, not validated values.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _ManualModel(BaseModel):
    """Base for manual sections: tolerate unknown keys from older drafts."""

    model_config = ConfigDict(extra="ignore", validate_assignment=True)


# ============================================================================
# REFERENCE CONSTANTS
# ============================================================================


class VulnerableGroup(_ManualModel):
    key: str
    label: str
    reason: str


class RequiredTopic(_ManualModel):
    key: str
    label: str


VULNERABLE_GROUPS: List[VulnerableGroup] = [
    VulnerableGroup(key="lmiHouseholds", label="LMI Households (≤80% AMI)", reason="Core target for HUD/funding; risk of deferred maintenance"),
    VulnerableGroup(key="olderAdults", label="Older Adults (62+)", reason="Aging in place, fall risk, fixed income"),
    VulnerableGroup(key="disabilities", label="People with Disabilities", reason="High ADL challenges, modification needs"),
    VulnerableGroup(key="veterans", label="Veterans", reason="Displacement risk, targeted outreach needs"),
    VulnerableGroup(key="raciallyMarginalized", label="Racially Marginalized Communities", reason="Historic disinvestment/redlining"),
    VulnerableGroup(key="persistentPoverty", label="Persistent Poverty / Distressed", reason="Chronic disinvestment, economic hardship"),
    VulnerableGroup(key="femaleHead", label="Female Head of Household", reason="Historical income disparity"),
    VulnerableGroup(key="largeFamilies", label="Large Families (5+ members)", reason="Overcrowding, systems stress"),
    VulnerableGroup(key="mobileHomeowners", label="Manufactured/Mobile Homeowners", reason="High substandard rates, energy burden"),
    VulnerableGroup(key="ruralHouseholds", label="Rural Households", reason="Limited funding, workforce challenges"),
    VulnerableGroup(key="disasterImpacted", label="Disaster-Impacted", reason="Structural damage, immediate displacement risk"),
]

REQUIRED_POLICY_TOPICS: List[RequiredTopic] = [
    RequiredTopic(key="assessment", label="Project assessment and selection criteria"),
    RequiredTopic(key="partnerSelection", label="Repair partner selection criteria & process"),
    RequiredTopic(key="participation", label="Owner and household member participation"),
    RequiredTopic(key="staffing", label="Staffing and volunteer participation"),
    RequiredTopic(key="pricing", label="Pricing and repayment model"),
    RequiredTopic(key="constructionTypes", label="Types of construction activities"),
    RequiredTopic(key="sustainability", label="Financial sustainability"),
    RequiredTopic(key="risk", label="Risk management"),
    RequiredTopic(key="safety", label="Safety"),
]

HEALTH_SAFETY_FACTOR = "healthSafety"
DEFAULT_FACTOR_WEIGHT = 3


def priority_factor_label(key: str) -> str:
    """Human label for a prioritization factor key."""
    if key == HEALTH_SAFETY_FACTOR:
        return "Health & Safety Urgency (Home Condition)"
    for group in VULNERABLE_GROUPS:
        if group.key == key:
            return group.label
    return _split_camel(key)


def _split_camel(key: str) -> str:
    out = []
    for ch in key:
        if ch.isupper() and out:
            out.append(" ")
        out.append(ch)
    return "".join(out).strip()


# ============================================================================
# SECTIONS
# ============================================================================


class StaffMember(_ManualModel):
    id: int
    name: str = ""
    title: str = ""


class PolicyMapEntry(_ManualModel):
    org: bool = False
    program: bool = False
    program_details: str = ""


class PolicyPackage(_ManualModel):
    exists: bool = False
    covered_topics: Dict[str, bool] = Field(default_factory=dict)
    topic_content: Dict[str, str] = Field(default_factory=dict)


class Governance(_ManualModel):
    approval_date: str = ""
    policy_version: str = "1.0"
    last_review_date: str = ""
    next_review_date: str = ""
    storage_location: str = ""
    approver_role: str = "Board of Directors"
    resolution_reference: str = ""


class Role(_ManualModel):
    id: int
    title: str = ""
    responsibilities: str = ""
    approves: List[str] = Field(default_factory=list)


class Stage(_ManualModel):
    id: int
    name: str = ""
    req_doc: str = ""


class Participation(_ManualModel):
    # "required" | "not_required" | "" (not chosen yet)
    required: str = ""
    options: str = "Sweat equity hours, Provide lunch, Site cleanup"
    documentation: str = "Partner Agreement Clause 4.1"


class ProjectFeasibility(_ManualModel):
    assessment_protocol: str = "internal"
    selection_authority: str = "Program Manager"
    selection_artifact: str = "Scoring Matrix"
    feasibility_limits: str = ""


def _default_stages() -> List[Stage]:
    return [
        Stage(id=1, name="Inquiry & App", req_doc="Application Form"),
        Stage(id=2, name="Eligibility Review", req_doc="Income Verification"),
        Stage(id=3, name="Home Assessment", req_doc="Inspection Report"),
        Stage(id=4, name="SOW & Approval", req_doc="Signed Agreement"),
        Stage(id=5, name="Construction", req_doc="Permits"),
        Stage(id=6, name="Closeout", req_doc="Satisfaction Survey"),
    ]


class ClientServices(_ManualModel):
    stages: List[Stage] = Field(default_factory=_default_stages)
    participation: Participation = Field(default_factory=Participation)


class Procurement(_ManualModel):
    selection_method: str = "Preferred Vendor List"
    min_qualifications: str = "State License, General Liability Insurance ($1M)"
    required_docs: Dict[str, bool] = Field(
        default_factory=lambda: {"w9": True, "coi": True, "bonding": False, "warranty": True}
    )


class VolunteerStandards(_ManualModel):
    allowed_scopes: str = "Painting, Landscaping, Demolition (non-structural)"
    supervision: str = "Site Supervisor must be present at all times"
    training: str = "Online Safety Course + On-site orientation"


class SafetyPlan(_ManualModel):
    risk_screening: str = "Asbestos, Lead, Structural Integrity, Pet Safety"
    safety_plan: str = "Daily tailgate talks, PPE enforcement, Incident Reporting Log"
    specialty_contractor_triggers: str = "Electrical, Plumbing, HVAC, Roofs > 1 story"


class Sustainability(_ManualModel):
    funding_mix: str = "40% Grants, 30% ReStore Profits, 30% Donations"
    cost_controls: str = "Change orders >$500 require ED approval"
    pipeline_targets: str = "15 homes/year, Avg $10k/home"


class ConstructionActivities(_ManualModel):
    # None until the user answers whether a catalog exists
    has_catalog: Optional[bool] = None
    eligible_scopes: str = ""
    ineligible_scopes: str = ""
    permit_triggers: str = ""


class Pricing(_ManualModel):
    # grant | loan | hybrid | fee
    pricing_model: str = "grant"
    calculation_method: str = "Project Cost + 10% Admin"
    repayment_terms: str = "0% interest, forgivable after 5 years"
    hardship_policy: str = "Deferral available for medical emergencies"


POLICY_MAP_CATEGORIES = (
    "governance",
    "finance",
    "hr",
    "eligibility",
    "safety",
    "procurement",
    "recordKeeping",
)


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================================
# ROOT
# ============================================================================


class ManualData(_ManualModel):
    """All wizard field values for one policies & procedures manual."""

    # Foundations
    org_name: str = ""
    org_address: str = ""
    org_phone: str = ""
    org_email: str = ""
    service_area: str = ""
    existing_policies: str = ""
    staff: List[StaffMember] = Field(
        default_factory=lambda: [
            StaffMember(id=1, title="Executive Director"),
            StaffMember(id=2, title="Program Manager"),
            StaffMember(id=3, title="Board Champion"),
        ]
    )

    # Policy map
    policy_map: Dict[str, PolicyMapEntry] = Field(
        default_factory=lambda: {key: PolicyMapEntry() for key in POLICY_MAP_CATEGORIES}
    )
    policy_package: PolicyPackage = Field(default_factory=PolicyPackage)

    # Compliance
    policy33_aligned: bool = False
    policy33_checklist: Dict[str, bool] = Field(
        default_factory=lambda: {
            "codes": False,
            "agreements": False,
            "consumerProtection": False,
            "lendingCompliance": False,
            "subcontractorOversight": False,
            "insurance": False,
        }
    )
    repairs_aom_reviewed: bool = False
    governance: Governance = Field(default_factory=Governance)

    # Program model
    roles: List[Role] = Field(
        default_factory=lambda: [
            Role(id=1, title="Program Manager", responsibilities="Overall execution, compliance, reporting", approves=["SOW", "Closeout"]),
            Role(id=2, title="Intake Coordinator", responsibilities="Client screening, document collection", approves=["Eligibility"]),
            Role(id=3, title="Construction Lead", responsibilities="Scoping, QC, Contractor management", approves=["Change Order"]),
        ]
    )

    # Scope
    repair_types: Dict[str, bool] = Field(
        default_factory=lambda: {"critical": True, "accessibility": False, "energy": False, "exterior": False}
    )
    financial_cap: Union[float, str] = 15000
    exclusions: str = ""
    construction_activities: ConstructionActivities = Field(default_factory=ConstructionActivities)
    pricing: Pricing = Field(default_factory=Pricing)

    # Client screening
    intake_methods: Dict[str, bool] = Field(
        default_factory=lambda: {"phone": True, "web": False, "walkin": False}
    )
    priority_factors: Dict[str, int] = Field(
        default_factory=lambda: {HEALTH_SAFETY_FACTOR: 5, "lmiHouseholds": 3, "olderAdults": 3}
    )
    project_feasibility: ProjectFeasibility = Field(default_factory=ProjectFeasibility)

    # Client services and lifecycle
    client_services: ClientServices = Field(default_factory=ClientServices)

    # Workforce
    model: str = "blended"
    qc_frequency: str = "milestone"
    procurement: Procurement = Field(default_factory=Procurement)
    volunteer_standards: VolunteerStandards = Field(default_factory=VolunteerStandards)
    safety: SafetyPlan = Field(default_factory=SafetyPlan)

    # Performance
    kpis: Dict[str, bool] = Field(
        default_factory=lambda: {
            "homesServed": True,
            "avgCost": True,
            "repairTimeline": False,
            "clientSatisfaction": True,
            "safetyIncidents": False,
        }
    )
    reporting_schedule: str = "monthly"
    feedback_mechanism: str = ""
    sustainability: Sustainability = Field(default_factory=Sustainability)

    # Meta
    version: str = "1.7.7"
    last_updated: str = Field(default_factory=_utcnow_iso)
