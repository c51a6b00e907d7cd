"""
Exceptions raised by the repair policy builder.

Most failure modes are recovered locally (corrupt persisted state falls back to
defaults), so this hierarchy is intentionally small.
"""


class RepairBuilderError(Exception):
    """Base class for errors raised by this package."""


class UnsupportedExportFormatError(RepairBuilderError):
    """
    Requested export format cannot be produced.

    The message is meant to be shown to the user as-is; no partial file is
    written when this is raised.
    """

    def __init__(self, export_format: str, message: str | None = None):
        self.export_format = export_format
        super().__init__(
            message or f"Export format '{export_format}' is not supported."
        )


class UnknownActivityError(RepairBuilderError, KeyError):
    """Activity id does not exist in the loaded taxonomy."""

    def __init__(self, activity_id: str):
        self.activity_id = activity_id
        super().__init__(f"Activity '{activity_id}' is not in the taxonomy")

    def __str__(self) -> str:
        return self.args[0]
