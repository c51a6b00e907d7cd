"""
Word-compatible export of the policies & procedures manual.

The document is HTML with Office namespaces and print CSS, served as
``application/msword`` so word processors open it as a native document.
When the manual declares an activity catalog, Appendix A lists the eligible
and conditional activities.
"""

import logging
import re
from datetime import date
from typing import List, Mapping, Optional

from repair_builder.configs.config import Config
from repair_builder.export.base import ALL_ELEMENTS, ExportConfig, ExportArtifact, build_export_rows
from repair_builder.export.print_report import PillarGroup, group_rows
from repair_builder.export.templating import get_environment
from repair_builder.schemas.manual import (
    REQUIRED_POLICY_TOPICS,
    ManualData,
    priority_factor_label,
)
from repair_builder.schemas.selection import Selection, SelectionStatus
from repair_builder.schemas.taxonomy import Taxonomy

logger = logging.getLogger(__name__)

WORD_MEDIA_TYPE = "application/msword"
BOM = "\ufeff"

_APPENDIX_STATUSES = (SelectionStatus.ELIGIBLE, SelectionStatus.CONDITIONAL)

_PARTICIPATION_LABELS = {
    "required": "Required",
    "not_required": "Not Required (Recommended)",
}


def manual_filename(manual: ManualData) -> str:
    pattern = Config.get_export_defaults().get("manual_filename", "Repair_Manual_{org}_Draft.doc")
    org = re.sub(r"\s+", "_", manual.org_name.strip()) or "Organization"
    return pattern.format(org=org)


def _split_camel(key: str) -> str:
    # "homesServed" -> "Homes Served"
    words = re.sub(r"([A-Z])", r" \1", key).strip()
    return words[:1].upper() + words[1:]


def _selected_keys(flags: Mapping[str, bool]) -> List[str]:
    return [k for k, v in flags.items() if v]


def build_appendix(
    taxonomy: Taxonomy, selections: Mapping[str, Selection]
) -> List[dict]:
    """Eligible and conditional activities grouped for Appendix A."""
    rows = build_export_rows(taxonomy, selections)
    config = ExportConfig(elements=ALL_ELEMENTS)
    appendix = []
    for status in _APPENDIX_STATUSES:
        groups: List[PillarGroup] = group_rows([r for r in rows if r.status == status], config)
        appendix.append({"label": status.label.title(), "pillars": groups})
    return appendix


def render_manual_html(
    manual: ManualData,
    taxonomy: Optional[Taxonomy] = None,
    selections: Optional[Mapping[str, Selection]] = None,
    today: Optional[date] = None,
) -> str:
    """Render the manual document body (without BOM)."""
    has_catalog = manual.construction_activities.has_catalog is True
    appendix = None
    if has_catalog and taxonomy is not None:
        appendix = build_appendix(taxonomy, selections or {})

    covered_topics = [
        topic
        for topic in REQUIRED_POLICY_TOPICS
        if manual.policy_package.covered_topics.get(topic.key)
    ]

    template = get_environment().get_template("repair_manual.doc.html.j2")
    return template.render(
        m=manual,
        today=(today or date.today()).strftime("%m/%d/%Y"),
        covered_topics=covered_topics,
        policy_rows=[
            {"category": key[:1].upper() + key[1:], "entry": entry}
            for key, entry in manual.policy_map.items()
        ],
        intake_channels=[k.capitalize() for k in _selected_keys(manual.intake_methods)],
        priority_factors=[
            {"label": priority_factor_label(k), "weight": w}
            for k, w in manual.priority_factors.items()
        ],
        participation_label=_PARTICIPATION_LABELS.get(
            manual.client_services.participation.required, "N/A"
        ),
        required_docs=[k.upper() for k in _selected_keys(manual.procurement.required_docs)],
        kpis=[_split_camel(k) for k in _selected_keys(manual.kpis)],
        has_catalog=has_catalog,
        appendix=appendix,
    )


def render_manual(
    manual: ManualData,
    taxonomy: Optional[Taxonomy] = None,
    selections: Optional[Mapping[str, Selection]] = None,
    today: Optional[date] = None,
) -> ExportArtifact:
    """
    Build the Word-compatible manual artifact.

    Args:
        manual: Wizard field values.
        taxonomy: Activity taxonomy for Appendix A (optional).
        selections: Catalog decisions for Appendix A (optional).
        today: Date shown when no approval date is set.

    Returns:
        ExportArtifact with a BOM-prefixed HTML body.
    """
    html = render_manual_html(manual, taxonomy, selections, today)
    logger.info("Rendered manual for %s", manual.org_name or "unnamed organization")
    return ExportArtifact(
        filename=manual_filename(manual),
        media_type=WORD_MEDIA_TYPE,
        content=BOM + html,
    )
