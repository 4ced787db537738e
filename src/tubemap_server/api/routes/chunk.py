from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends

from tubemap_server.api.dependencies import get_settings, get_toolchain
from tubemap_server.api.errors import error_payload
from tubemap_server.api.schemas import ChunkRequest
from tubemap_server.core.pipeline import run_extraction
from tubemap_server.core.ports.toolchain import GraphToolchain
from tubemap_server.errors import PipelineError
from tubemap_server.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["subgraph"])


@router.post("/chr22_v4")
async def extract_chunk(
    body: ChunkRequest,
    settings: Settings = Depends(get_settings),
    toolchain: GraphToolchain = Depends(get_toolchain),
) -> dict[str, Any]:
    """Extract a subgraph around a node or path interval.

    Returns ``{"graph": ..., "gam": [...]}``, ``{}`` for an empty region, or
    ``{"error": {...}}`` when the pipeline fails.
    """
    try:
        result = await run_extraction(body.to_params(), toolchain, settings)
    except PipelineError as exc:
        return error_payload(exc)
    return result.to_payload()
