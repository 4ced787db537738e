from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from tubemap_server.api.dependencies import get_settings, get_toolchain
from tubemap_server.api.errors import error_payload
from tubemap_server.api.schemas import DatasetsResponse, PathNamesRequest, PathNamesResponse
from tubemap_server.core.catalog import list_datasets, list_path_names
from tubemap_server.core.pipeline import new_request_id
from tubemap_server.core.ports.toolchain import GraphToolchain
from tubemap_server.errors import PipelineError
from tubemap_server.settings import Settings

router = APIRouter(tags=["catalog"])


@router.post("/getFilenames", response_model=DatasetsResponse)
async def filenames(settings: Settings = Depends(get_settings)) -> DatasetsResponse:
    """Classify the mounted data directory by file extension."""
    catalog = list_datasets(settings.mounted_data_dir)
    return DatasetsResponse(
        xg_files=catalog.xg_files,
        gbwt_files=catalog.gbwt_files,
        gam_indices=catalog.gam_indices,
    )


@router.post("/getPathNames")
async def path_names(
    body: PathNamesRequest,
    settings: Settings = Depends(get_settings),
    toolchain: GraphToolchain = Depends(get_toolchain),
) -> dict[str, Any]:
    xg_path = settings.data_dir(body.use_mounted_path) / body.xg_file
    try:
        names = await list_path_names(toolchain, xg_path, request_id=new_request_id())
    except PipelineError as exc:
        return error_payload(exc)
    return PathNamesResponse(path_names=names).model_dump(by_alias=True)
