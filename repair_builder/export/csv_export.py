"""
CSV export of catalog decisions.

One row per activity over the full taxonomy. Every field is quoted and
embedded quotes are doubled (``csv.QUOTE_ALL``).
"""

import csv
import io
import logging
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
from repair_builder.monitoring.logging import with_context
from repair_builder.schemas.selection import Selection
from repair_builder.schemas.taxonomy import HierarchyLevel, Taxonomy

logger = logging.getLogger(__name__)

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"

_LEVEL_HEADERS = {
    HierarchyLevel.PILLAR: "Pillar",
    HierarchyLevel.SUB_CATEGORY: "Sub-Category",
    HierarchyLevel.TYPE: "Type",
}

# column order follows the hierarchy, not the order levels were configured in
_LEVEL_ORDER = (HierarchyLevel.PILLAR, HierarchyLevel.SUB_CATEGORY, HierarchyLevel.TYPE)


def _level_name(row: ExportRow, level: HierarchyLevel) -> str:
    if level == HierarchyLevel.PILLAR:
        return row.activity.pillar_name
    if level == HierarchyLevel.SUB_CATEGORY:
        return row.activity.sub_category_name
    return row.activity.type_name


def _level_description(row: ExportRow, level: HierarchyLevel) -> str:
    if level == HierarchyLevel.PILLAR:
        return row.activity.pillar_description or ""
    if level == HierarchyLevel.SUB_CATEGORY:
        return row.activity.sub_category_description or ""
    return row.activity.type_description or ""


def build_header(config: ExportConfig) -> List[str]:
    """Column names for ``config``, in output order."""
    levels = [lvl for lvl in _LEVEL_ORDER if config.has_level(lvl)]
    header = [_LEVEL_HEADERS[lvl] for lvl in levels]
    header += ["Activity", "Status"]
    if config.has_element(DataElement.CRITICALITY):
        header += ["Priority", "Urgency", "Condition"]
    if config.has_element(DataElement.DEFINITIONS):
        header += [f"{_LEVEL_HEADERS[lvl]} Definition" for lvl in levels]
    if config.has_element(DataElement.NOTES):
        header.append("Notes")
    return header


def build_record(row: ExportRow, config: ExportConfig) -> List[str]:
    """Field values for one activity, aligned with ``build_header``."""
    levels = [lvl for lvl in _LEVEL_ORDER if config.has_level(lvl)]
    record = [_level_name(row, lvl) for lvl in levels]
    record += [row.activity.name, row.status_label]
    if config.has_element(DataElement.CRITICALITY):
        record += [
            row.priority.value if row.priority is not None else "",
            row.urgency.value,
            row.condition.value,
        ]
    if config.has_element(DataElement.DEFINITIONS):
        record += [_level_description(row, lvl) for lvl in levels]
    if config.has_element(DataElement.NOTES):
        record.append(row.notes)
    return record


def render_csv(rows: List[ExportRow], config: ExportConfig) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(build_header(config))
    for row in rows:
        writer.writerow(build_record(row, config))
    return buf.getvalue()


class CsvExporter(CatalogExporter):
    """Spreadsheet-friendly export of every activity's decision."""

    format = ExportFormat.CSV

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
            "csv_filename", "Eligible_Activities_Catalog_{date}.csv"
        )
        log = with_context(logger, export_format=self.format.value)
        log.info("Exporting %d activities to CSV", len(rows))
        return ExportArtifact(
            filename=pattern.format(date=today.isoformat()),
            media_type=CSV_MEDIA_TYPE,
            content=render_csv(rows, config),
        )
