"""Request-scoped extraction pipeline.

Stages run strictly forward::

    CREATED -> EXTRACTING -> CONVERTING -> ANNOTATION_MERGING
            -> (ALIGNMENT_FETCHING | skip) -> REGION_MERGING -> COMPLETED

Any ``PipelineError`` moves the request to FAILED. Whatever the outcome, the
request's workspace is removed before ``run_extraction`` returns or raises.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from enum import StrEnum

from tubemap_server.core.alignment import fetch_alignments
from tubemap_server.core.extraction import ChunkParams, build_chunk_args, parse_graph, stream_subgraph
from tubemap_server.core.ports.toolchain import GraphToolchain
from tubemap_server.core.sidefiles import (
    SideFiles,
    merge_annotations,
    merge_regions,
    parse_annotation_lines,
    parse_region_lines,
    read_lines,
)
from tubemap_server.core.workspace import Workspace, request_workspace
from tubemap_server.errors import (
    AnnotationParseError,
    ConversionError,
    PipelineError,
    PipelineTimeoutError,
    RegionParseError,
)
from tubemap_server.models import AlignmentRecord, ExtractionResult
from tubemap_server.settings import Settings

logger = logging.getLogger(__name__)


class PipelineStage(StrEnum):
    CREATED = "created"
    EXTRACTING = "extracting"
    CONVERTING = "converting"
    ANNOTATION_MERGING = "annotation_merging"
    ALIGNMENT_FETCHING = "alignment_fetching"
    REGION_MERGING = "region_merging"
    COMPLETED = "completed"
    FAILED = "failed"


def new_request_id() -> str:
    # uuid1 is time-ordered and unique within this process.
    return str(uuid.uuid1())


@dataclass
class RequestContext:
    request_id: str
    params: ChunkParams
    workspace: Workspace | None = None
    stage: PipelineStage = PipelineStage.CREATED

    def advance(self, stage: PipelineStage) -> None:
        logger.debug("[%s] %s -> %s", self.request_id, self.stage, stage)
        self.stage = stage


async def run_extraction(
    params: ChunkParams,
    toolchain: GraphToolchain,
    settings: Settings,
    request_id: str | None = None,
) -> ExtractionResult:
    """Extract, annotate and assemble one subgraph.

    Raises a ``PipelineError`` subclass tagged with the stage it failed in.
    An empty subgraph is not an error and yields an empty result.
    """
    context = RequestContext(request_id=request_id or new_request_id(), params=params)
    logger.info(
        "[%s] Extraction requested: xg=%s position=%s distance=%s by_node=%s gam=%s gbwt=%s",
        context.request_id,
        params.xg_file,
        params.position,
        params.distance,
        params.by_node,
        params.gam_index,
        params.gbwt_file,
    )
    try:
        return await asyncio.wait_for(_run_stages(context, toolchain, settings), timeout=settings.request_timeout)
    except TimeoutError as exc:
        error = PipelineTimeoutError(f"Extraction did not finish within {settings.request_timeout:g}s")
        error.stage = context.stage.value
        context.advance(PipelineStage.FAILED)
        logger.warning("[%s] %s", context.request_id, error.message)
        raise error from exc
    except PipelineError as exc:
        if exc.stage is None:
            exc.stage = context.stage.value
        context.advance(PipelineStage.FAILED)
        logger.warning("[%s] Extraction failed during %s: %s", context.request_id, exc.stage, exc.message)
        raise


async def _run_stages(context: RequestContext, toolchain: GraphToolchain, settings: Settings) -> ExtractionResult:
    params = context.params
    request_id = context.request_id
    data_dir = settings.data_dir(params.use_mounted_path)

    async with request_workspace(request_id, settings.workspace_root) as workspace:
        context.workspace = workspace
        side_files = SideFiles(workspace)

        context.advance(PipelineStage.EXTRACTING)
        chunk_args = build_chunk_args(params, data_dir, side_files, settings.default_context)
        try:
            output = await stream_subgraph(toolchain, chunk_args, request_id)
        except ConversionError as exc:
            # vg view fails inside the same pipe as vg chunk
            exc.stage = PipelineStage.CONVERTING.value
            raise

        context.advance(PipelineStage.CONVERTING)
        graph = parse_graph(output)
        if graph is None:
            logger.info("[%s] Conversion produced no output, returning empty result", request_id)
            context.advance(PipelineStage.COMPLETED)
            return ExtractionResult()

        context.advance(PipelineStage.ANNOTATION_MERGING)
        annotation_path = await asyncio.to_thread(side_files.annotation)
        annotations = parse_annotation_lines(await read_lines(annotation_path, AnnotationParseError))
        mismatches = merge_annotations(graph, annotations, request_id)
        if mismatches:
            logger.warning("[%s] %d annotation name mismatch(es)", request_id, mismatches)

        gam: list[AlignmentRecord] = []
        if params.with_gam:
            context.advance(PipelineStage.ALIGNMENT_FETCHING)
            gam = await fetch_alignments(toolchain, side_files, request_id)

        context.advance(PipelineStage.REGION_MERGING)
        if await asyncio.to_thread(side_files.regions.exists):
            regions = parse_region_lines(await read_lines(side_files.regions, RegionParseError))
            merge_regions(graph, regions)
        else:
            logger.warning("[%s] No region file at %s, path offsets left unset", request_id, side_files.regions)

        await asyncio.to_thread(side_files.discard)
        context.advance(PipelineStage.COMPLETED)
        logger.info(
            "[%s] Extraction complete: %d node(s), %d path(s), %d read(s)",
            request_id,
            len(graph.node),
            len(graph.path),
            len(gam),
        )
        return ExtractionResult(graph=graph, gam=gam)
