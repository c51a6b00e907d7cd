"""
Print-ready HTML report of catalog decisions.

Three sections (Eligible, Conditional, Not Eligible); unselected and N/A
activities are left out. Within a section, items are grouped by pillar and
then sub-category. The document opens the host print dialog on load so the
user can print or save it as PDF.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Mapping, Optional

from repair_builder.configs.config import Config
from repair_builder.export.base import (
    CatalogExporter,
    DataElement,
    ExportArtifact,
    ExportConfig,
    ExportFormat,
    ExportRow,
    build_export_rows,
)
from repair_builder.export.templating import get_environment
from repair_builder.monitoring.logging import with_context
from repair_builder.schemas.selection import Selection, SelectionStatus
from repair_builder.schemas.taxonomy import HierarchyLevel, Taxonomy

logger = logging.getLogger(__name__)

HTML_MEDIA_TYPE = "text/html; charset=utf-8"

REPORT_SECTIONS = (
    (SelectionStatus.ELIGIBLE, "Eligible Activities"),
    (SelectionStatus.CONDITIONAL, "Conditional Activities"),
    (SelectionStatus.NOT_ELIGIBLE, "Not Eligible Activities"),
)


@dataclass
class SubCategoryGroup:
    key: Optional[str]
    name: Optional[str]
    description: str = ""
    items: List[ExportRow] = field(default_factory=list)


@dataclass
class PillarGroup:
    key: Optional[str]
    name: Optional[str]
    description: str = ""
    sub_categories: List[SubCategoryGroup] = field(default_factory=list)


@dataclass
class ReportSection:
    status: SelectionStatus
    title: str
    pillars: List[PillarGroup] = field(default_factory=list)

    @property
    def item_count(self) -> int:
        return sum(len(s.items) for p in self.pillars for s in p.sub_categories)


def group_rows(rows: List[ExportRow], config: ExportConfig) -> List[PillarGroup]:
    """
    Group rows (already in display order) by pillar, then sub-category.

    Levels that are not included collapse into a single unnamed group so the
    template can skip their headings.
    """
    show_pillar = config.has_level(HierarchyLevel.PILLAR)
    show_sub = config.has_level(HierarchyLevel.SUB_CATEGORY)

    pillars: List[PillarGroup] = []
    for row in rows:
        pillar_key = row.activity.pillar_id if show_pillar else None
        if not pillars or pillars[-1].key != pillar_key:
            pillars.append(
                PillarGroup(
                    key=pillar_key,
                    name=row.activity.pillar_name if show_pillar else None,
                    description=row.activity.pillar_description if show_pillar else "",
                )
            )

        sub_key = row.activity.sub_category_id if show_sub else None
        subs = pillars[-1].sub_categories
        if not subs or subs[-1].key != sub_key:
            subs.append(
                SubCategoryGroup(
                    key=sub_key,
                    name=row.activity.sub_category_name if show_sub else None,
                    description=row.activity.sub_category_description if show_sub else "",
                )
            )
        subs[-1].items.append(row)
    return pillars


def build_sections(rows: List[ExportRow], config: ExportConfig) -> List[ReportSection]:
    sections = []
    for status, title in REPORT_SECTIONS:
        matching = [row for row in rows if row.status == status]
        sections.append(
            ReportSection(status=status, title=title, pillars=group_rows(matching, config))
        )
    return sections


def render_report(
    rows: List[ExportRow],
    config: ExportConfig,
    title: str = "Eligible Activities Catalog",
    generated_on: Optional[date] = None,
    auto_print: bool = True,
) -> str:
    """Render the report HTML for already-resolved rows."""
    template = get_environment().get_template("catalog_report.html.j2")
    return template.render(
        title=title,
        generated_on=(generated_on or date.today()).isoformat(),
        sections=build_sections(rows, config),
        show_type=config.has_level(HierarchyLevel.TYPE),
        show_definitions=config.has_element(DataElement.DEFINITIONS),
        show_criticality=config.has_element(DataElement.CRITICALITY),
        show_notes=config.has_element(DataElement.NOTES),
        auto_print=auto_print,
    )


class PrintReportExporter(CatalogExporter):
    """HTML report handed to the host print/PDF mechanism."""

    format = ExportFormat.PDF_PRINT

    def __init__(self, auto_print: bool = True):
        self.auto_print = auto_print

    def export(
        self,
        taxonomy: Taxonomy,
        selections: Mapping[str, Selection],
        config: ExportConfig,
        today: Optional[date] = None,
    ) -> ExportArtifact:
        today = today or date.today()
        rows = build_export_rows(taxonomy, selections)
        pattern = Config.get_export_defaults().get(
            "report_filename", "Eligible_Activities_Report_{date}.html"
        )
        log = with_context(logger, export_format=self.format.value)
        log.info("Rendering print report for %d activities", len(rows))
        return ExportArtifact(
            filename=pattern.format(date=today.isoformat()),
            media_type=HTML_MEDIA_TYPE,
            content=render_report(
                rows,
                config,
                title=taxonomy.name,
                generated_on=today,
                auto_print=self.auto_print,
            ),
        )
