from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tubemap_server.api.dependencies import get_toolchain

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    toolchain_factory = app.dependency_overrides.get(get_toolchain, get_toolchain)
    if not toolchain_factory().available():
        logger.warning("vg executable not found; extraction requests will fail until it is installed")
    yield
