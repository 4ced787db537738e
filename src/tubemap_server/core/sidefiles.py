"""Side files left in the workspace by ``vg chunk`` and their correlation.

``vg chunk`` is handed the request-scoped prefix ``<workspace>/chunk`` and
the explicit region file ``<workspace>/regions.tsv``; annotation and
alignment files are named by vg from that prefix, so discovery only ever
looks at files carrying it and insists on exactly one match.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from tubemap_server.core.workspace import Workspace
from tubemap_server.errors import (
    AlignmentMissing,
    AnnotationMissing,
    AnnotationParseError,
    PipelineError,
    RegionParseError,
    SideFileError,
)
from tubemap_server.models import AnnotationRecord, Graph, RegionRecord

logger = logging.getLogger(__name__)

CHUNK_PREFIX = "chunk"
REGIONS_FILENAME = "regions.tsv"
ANNOTATION_SUFFIX = "annotate.txt"
ALIGNMENT_SUFFIX = ".gam"


@dataclass(frozen=True)
class SideFiles:
    workspace: Workspace

    @property
    def prefix(self) -> Path:
        return self.workspace.file(CHUNK_PREFIX)

    @property
    def regions(self) -> Path:
        return self.workspace.file(REGIONS_FILENAME)

    def annotation(self) -> Path:
        return self._single(ANNOTATION_SUFFIX, AnnotationMissing, "annotation")

    def alignment(self) -> Path:
        return self._single(ALIGNMENT_SUFFIX, AlignmentMissing, "alignment")

    def _single(self, suffix: str, error: type[SideFileError], label: str) -> Path:
        matches = sorted(self.workspace.path.glob(f"{CHUNK_PREFIX}*{suffix}"))
        if not matches:
            raise error(f"No {label} file ending in '{suffix}' in {self.workspace.path}")
        if len(matches) > 1:
            names = ", ".join(m.name for m in matches)
            raise error(f"Expected one {label} file, found {len(matches)}: {names}")
        return matches[0]

    def discard(self) -> None:
        """Delete annotation and alignment side files, whichever exist."""
        for suffix in (ANNOTATION_SUFFIX, ALIGNMENT_SUFFIX):
            for path in self.workspace.path.glob(f"{CHUNK_PREFIX}*{suffix}"):
                path.unlink(missing_ok=True)


async def read_lines(path: Path, error: type[PipelineError] = PipelineError) -> list[str]:
    """Read a side file as UTF-8 lines; unreadable files raise ``error``."""
    try:
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise error(f"{path.name} is not valid UTF-8 at byte {exc.start}") from exc
    except OSError as exc:
        raise error(f"Cannot read {path.name}: {exc}") from exc
    return text.splitlines()


def _tokens(line: str) -> list[str]:
    # Whitespace runs collapse to one separator.
    return line.split()


def parse_annotation_lines(lines: Iterable[str]) -> list[AnnotationRecord]:
    records: list[AnnotationRecord] = []
    for lineno, line in enumerate(lines, start=1):
        tokens = _tokens(line)
        if not tokens:
            continue
        if len(tokens) < 2:
            raise AnnotationParseError(f"Annotation line {lineno} has no frequency: {line!r}")
        try:
            records.append(AnnotationRecord(name=tokens[0], freq=tokens[1]))  # type: ignore[arg-type]
        except ValidationError as exc:
            raise AnnotationParseError(f"Annotation line {lineno} has a non-numeric frequency: {line!r}") from exc
    return records


def parse_region_lines(lines: Iterable[str]) -> list[RegionRecord]:
    records: list[RegionRecord] = []
    for lineno, line in enumerate(lines, start=1):
        tokens = _tokens(line)
        if not tokens:
            continue
        if len(tokens) < 2:
            raise RegionParseError(f"Region line {lineno} has no start offset: {line!r}")
        try:
            records.append(RegionRecord(name=tokens[0], first_base=tokens[1]))  # type: ignore[arg-type]
        except ValidationError as exc:
            raise RegionParseError(f"Region line {lineno} has a non-integer start offset: {line!r}") from exc
    return records


def merge_annotations(graph: Graph, records: list[AnnotationRecord], request_id: str = "-") -> int:
    """Assign record N to path N. Returns the number of name mismatches.

    A mismatching line is logged and skipped rather than failing the request.
    """
    mismatches = 0
    for index, record in enumerate(records):
        if index >= len(graph.path):
            logger.warning(
                "[%s] %d annotation line(s) beyond the %d graph paths ignored",
                request_id,
                len(records) - index,
                len(graph.path),
            )
            break
        path = graph.path[index]
        if path.name == record.name:
            path.freq = record.freq
        else:
            mismatches += 1
            logger.warning(
                "[%s] Annotation mismatch at path %d: expected %r, got %r", request_id, index, path.name, record.name
            )
    return mismatches


def merge_regions(graph: Graph, records: list[RegionRecord]) -> int:
    """Set the first-base offset on every path named in ``records``.

    Returns the number of paths updated; unnamed paths keep their value.
    """
    updated = 0
    for record in records:
        for path in graph.paths_named(record.name):
            path.index_of_first_base = record.first_base
            updated += 1
    return updated
