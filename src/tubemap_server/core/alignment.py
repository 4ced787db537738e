from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from pydantic import ValidationError

from tubemap_server.core.ports.toolchain import GraphToolchain
from tubemap_server.core.sidefiles import SideFiles
from tubemap_server.errors import AlignmentParseError, ConversionError
from tubemap_server.models import AlignmentRecord

logger = logging.getLogger(__name__)


def alignment_view_args(gam_path: Path) -> list[str]:
    return ["view", "-j", "-a", str(gam_path)]


def parse_alignment_output(output: bytes) -> list[AlignmentRecord]:
    """Parse newline-delimited JSON, one aligned read per non-empty line."""
    try:
        text = output.decode()
    except UnicodeDecodeError as exc:
        raise AlignmentParseError(f"Alignment output is not valid UTF-8 at byte {exc.start}") from exc
    records: list[AlignmentRecord] = []
    for lineno, line in enumerate(text.split("\n"), start=1):
        if not line.strip():
            continue
        try:
            records.append(AlignmentRecord.model_validate_json(line))
        except ValidationError as exc:
            raise AlignmentParseError(f"Alignment record on line {lineno} is not a JSON object") from exc
    return records


async def fetch_alignments(
    toolchain: GraphToolchain, side_files: SideFiles, request_id: str = "-"
) -> list[AlignmentRecord]:
    gam_path = await asyncio.to_thread(side_files.alignment)
    output = await toolchain.run(alignment_view_args(gam_path), request_id=request_id, error=ConversionError)
    records = parse_alignment_output(output)
    logger.info("[%s] Retrieved %d alignment record(s)", request_id, len(records))
    return records
