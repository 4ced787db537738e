from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from tubemap_server import __version__
from tubemap_server.api import dependencies
from tubemap_server.api.lifespan import lifespan
from tubemap_server.api.middleware import RequestLoggingMiddleware
from tubemap_server.api.routes.catalog import router as catalog_router
from tubemap_server.api.routes.chunk import router as chunk_router
from tubemap_server.api.routes.health import router as health_router
from tubemap_server.api.routes.root import router as root_router
from tubemap_server.core.toolchain import VgToolchain
from tubemap_server.settings import Settings, get_settings


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application; explicit ``settings`` replace the environment for every route."""
    app = FastAPI(
        title="Tube Map Server",
        description="Extract annotated subgraphs from variation graphs with vg.",
        version=__version__,
        lifespan=lifespan,
    )
    if settings is not None:
        bound = settings
        app.dependency_overrides[dependencies.get_settings] = lambda: bound
        app.dependency_overrides[dependencies.get_toolchain] = lambda: VgToolchain(bound.vg_path)
    else:
        settings = get_settings()

    # Cross-origin access for the tube map viewer
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(root_router, include_in_schema=False)
    app.include_router(health_router, include_in_schema=False)
    app.include_router(chunk_router)
    app.include_router(catalog_router)

    # Mounted last so API routes take precedence over the static bundle
    if settings.static_dir is not None and settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app
