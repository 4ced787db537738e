from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from tubemap_server import __version__

router = APIRouter()


@router.get("/api")
async def root() -> dict[str, Any]:
    """Discovery endpoint listing the server's routes."""
    return {
        "meta": {
            "title": "Tube Map Server",
            "description": "Extract annotated subgraphs from variation graphs with vg.",
            "version": __version__,
        },
        "links": {
            "self": "/api",
            "subgraph": "/chr22_v4",
            "filenames": "/getFilenames",
            "path-names": "/getPathNames",
            "openapi": "/openapi.json",
            "docs": "/docs",
        },
    }
