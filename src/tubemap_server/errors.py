"""Exception hierarchy for the extraction pipeline.

Every error carries a stable ``kind`` so the HTTP layer can report it to
callers without leaking internals, plus the pipeline ``stage`` it was raised
from once the assembler has seen it.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all extraction pipeline failures."""

    kind = "PipelineError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.stage: str | None = None


class WorkspaceError(PipelineError):
    """The per-request workspace could not be allocated."""

    kind = "WorkspaceError"


class ToolInvocationError(PipelineError):
    """An external ``vg`` invocation exited unsuccessfully."""

    kind = "ToolInvocationError"

    def __init__(self, message: str, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class ExtractionError(ToolInvocationError):
    kind = "ExtractionError"


class ConversionError(ToolInvocationError):
    kind = "ConversionError"


class SideFileError(PipelineError):
    """A side file expected in the workspace is missing or ambiguous."""

    kind = "SideFileError"


class AnnotationMissing(SideFileError):
    kind = "AnnotationMissing"


class AlignmentMissing(SideFileError):
    kind = "AlignmentMissing"


class AnnotationParseError(PipelineError):
    kind = "AnnotationParseError"


class RegionParseError(PipelineError):
    kind = "RegionParseError"


class AlignmentParseError(PipelineError):
    kind = "AlignmentParseError"


class PipelineTimeoutError(PipelineError):
    kind = "TimeoutError"
