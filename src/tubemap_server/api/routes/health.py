from fastapi import APIRouter, Depends, Response, status

from tubemap_server.api.dependencies import get_toolchain
from tubemap_server.api.schemas import HealthResponse, ReadinessResponse
from tubemap_server.core.ports.toolchain import GraphToolchain

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@router.get("/healthz/live", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    """Liveness probe: is the process alive?"""
    return HealthResponse()


@router.get("/healthz/ready", response_model=ReadinessResponse)
async def readiness(
    response: Response,
    toolchain: GraphToolchain = Depends(get_toolchain),
) -> ReadinessResponse:
    """Readiness probe: checks the vg executable can be found."""
    if toolchain.available():
        return ReadinessResponse(status="ok", toolchain="up")
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(status="degraded", toolchain="down")
