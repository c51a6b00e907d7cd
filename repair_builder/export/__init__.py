"""Catalog and manual exports."""

from repair_builder.export.base import (
    DataElement,
    ExportArtifact,
    ExportConfig,
    ExportFormat,
)
from repair_builder.export.pipeline import export_catalog, get_exporter, save_artifact

__all__ = [
    "DataElement",
    "ExportArtifact",
    "ExportConfig",
    "ExportFormat",
    "export_catalog",
    "get_exporter",
    "save_artifact",
]
