"""
Export pipeline entry points.

Usage:
    config = ExportConfig(format=ExportFormat.CSV)
    artifact = export_catalog(taxonomy, store, config)
    path = save_artifact(artifact, Path("exports"))
"""

import logging
from datetime import date
from pathlib import Path
from typing import Mapping, Optional, Union

from repair_builder.errors import UnsupportedExportFormatError
from repair_builder.export.base import (
    CatalogExporter,
    ExportArtifact,
    ExportConfig,
    ExportFormat,
)
from repair_builder.export.csv_export import CsvExporter
from repair_builder.export.print_report import PrintReportExporter
from repair_builder.monitoring.logging import with_context
from repair_builder.schemas.selection import Selection
from repair_builder.schemas.taxonomy import Taxonomy

logger = logging.getLogger(__name__)

IMAGE_UNSUPPORTED_NOTICE = "Image export is not supported; use print/PDF instead."


class ImagePlaceholderExporter(CatalogExporter):
    """
    Image export placeholder.

    Always refuses with an explicit notice so the user sees an outcome for
    every format they can pick.
    """

    format = ExportFormat.IMAGE

    def export(
        self,
        taxonomy: Taxonomy,
        selections: Mapping[str, Selection],
        config: ExportConfig,
        today: Optional[date] = None,
    ) -> ExportArtifact:
        raise UnsupportedExportFormatError(self.format.value, IMAGE_UNSUPPORTED_NOTICE)


def get_exporter(export_format: Union[ExportFormat, str]) -> CatalogExporter:
    """
    Create an exporter instance for the given format.

    Args:
        export_format: ExportFormat enum value or its string form

    Returns:
        Configured CatalogExporter instance

    Raises:
        UnsupportedExportFormatError: for strings that name no known format
    """
    try:
        export_format = ExportFormat(export_format)
    except ValueError:
        raise UnsupportedExportFormatError(str(export_format)) from None

    if export_format == ExportFormat.CSV:
        return CsvExporter()
    elif export_format == ExportFormat.PDF_PRINT:
        return PrintReportExporter()
    else:
        return ImagePlaceholderExporter()


def export_catalog(
    taxonomy: Taxonomy,
    selections: Mapping[str, Selection],
    config: Optional[ExportConfig] = None,
    today: Optional[date] = None,
) -> ExportArtifact:
    """
    Export every activity's decision in the configured format.

    Raises:
        UnsupportedExportFormatError: for formats that cannot be produced.
            Nothing is written in that case.
    """
    config = config or ExportConfig()
    exporter = get_exporter(config.format)
    log = with_context(logger, export_format=config.format.value)
    try:
        artifact = exporter.export(taxonomy, selections, config, today=today)
    except UnsupportedExportFormatError as e:
        log.warning(str(e))
        raise

    log.info(
        "Exported %s",
        artifact.filename,
        extra={"payload": {"media_type": artifact.media_type, "bytes": len(artifact.to_bytes())}},
    )
    return artifact


def save_artifact(artifact: ExportArtifact, directory: Union[str, Path]) -> Path:
    """Write ``artifact`` into ``directory`` and return its path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / artifact.filename
    path.write_bytes(artifact.to_bytes())
    logger.info("Saved %s", path)
    return path
