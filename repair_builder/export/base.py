"""
Shared types for the catalog export pipeline.

Exports always cover the full taxonomy's decisions, never just the rows that
happen to be visible under the current filters.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import FrozenSet, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from repair_builder.catalog.loader import flatten
from repair_builder.catalog.priority import (
    Priority,
    criticality_applies,
    effective_condition,
    effective_priority,
    effective_urgency,
)
from repair_builder.schemas.selection import Selection, SelectionStatus, status_label
from repair_builder.schemas.taxonomy import (
    Condition,
    FlatActivity,
    HierarchyLevel,
    Taxonomy,
    Urgency,
)


class ExportFormat(str, Enum):
    """Output encodings offered by the catalog builder."""

    CSV = "csv"
    PDF_PRINT = "pdf-print"
    IMAGE = "image-placeholder"


class DataElement(str, Enum):
    """Optional data columns/blocks in an export."""

    DEFINITIONS = "definitions"
    CRITICALITY = "criticality"
    NOTES = "notes"


ALL_LEVELS: FrozenSet[HierarchyLevel] = frozenset(HierarchyLevel)
ALL_ELEMENTS: FrozenSet[DataElement] = frozenset(DataElement)


class ExportConfig(BaseModel):
    """
    What to export and how.

    The activity level is always included and cannot be switched off;
    ``levels`` only controls the ancestors shown alongside it.
    """

    model_config = ConfigDict(frozen=True)

    format: ExportFormat = ExportFormat.CSV
    levels: FrozenSet[HierarchyLevel] = Field(default_factory=lambda: ALL_LEVELS)
    elements: FrozenSet[DataElement] = Field(default_factory=lambda: ALL_ELEMENTS)

    @field_validator("levels", mode="before")
    @classmethod
    def drop_activity_level(cls, v):
        # "activity" may be passed by callers listing every level; it is implicit
        if isinstance(v, (list, tuple, set, frozenset)):
            return frozenset(x for x in v if x != "activity")
        return v

    def has_level(self, level: HierarchyLevel) -> bool:
        return level in self.levels

    def has_element(self, element: DataElement) -> bool:
        return element in self.elements


@dataclass(frozen=True)
class ExportArtifact:
    """A finished export ready to be saved or handed to the host."""

    filename: str
    media_type: str
    content: str
    encoding: str = "utf-8"

    def to_bytes(self) -> bytes:
        return self.content.encode(self.encoding)


@dataclass(frozen=True)
class ExportRow:
    """One flattened activity with its decision and effective criticality."""

    activity: FlatActivity
    selection: Optional[Selection]
    urgency: Urgency
    condition: Condition
    priority: Optional[Priority]

    @property
    def status(self) -> Optional[SelectionStatus]:
        return self.selection.status if self.selection is not None else None

    @property
    def status_label(self) -> str:
        return status_label(self.selection)

    @property
    def notes(self) -> str:
        if self.selection is None or not self.selection.notes:
            return ""
        return self.selection.notes

    @property
    def show_criticality(self) -> bool:
        return criticality_applies(self.activity, self.selection)


def build_export_rows(
    taxonomy: Taxonomy, selections: Mapping[str, Selection]
) -> List[ExportRow]:
    """Flatten the taxonomy and resolve each activity's effective values."""
    rows: List[ExportRow] = []
    for flat in flatten(taxonomy):
        selection = selections.get(flat.id)
        rows.append(
            ExportRow(
                activity=flat,
                selection=selection,
                urgency=effective_urgency(flat, selection),
                condition=effective_condition(flat, selection),
                priority=effective_priority(flat, selection),
            )
        )
    return rows


class CatalogExporter(ABC):
    """
    Abstract base for export encodings.
    """

    format: ExportFormat

    @abstractmethod
    def export(
        self,
        taxonomy: Taxonomy,
        selections: Mapping[str, Selection],
        config: ExportConfig,
        today: Optional[date] = None,
    ) -> ExportArtifact:
        """
        Produce the artifact for the full taxonomy and its selections.
        """
        pass
