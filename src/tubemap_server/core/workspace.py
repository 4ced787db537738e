from __future__ import annotations

import asyncio
import logging
import shutil
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from tubemap_server.errors import WorkspaceError

logger = logging.getLogger(__name__)

WORKSPACE_PREFIX = "tmp-"


@dataclass(frozen=True)
class Workspace:
    request_id: str
    path: Path

    def file(self, name: str) -> Path:
        return self.path / name


def create_workspace(request_id: str, root: Path) -> Workspace:
    """Create the exclusive directory ``<root>/tmp-<request_id>``.

    Raises ``WorkspaceError`` if the directory cannot be allocated, including
    when it already exists.
    """
    path = root / f"{WORKSPACE_PREFIX}{request_id}"
    try:
        path.mkdir(parents=False, exist_ok=False)
    except OSError as exc:
        raise WorkspaceError(f"Cannot create workspace {path}: {exc}") from exc
    logger.debug("[%s] Created workspace %s", request_id, path)
    return Workspace(request_id=request_id, path=path)


def destroy_workspace(workspace: Workspace) -> None:
    """Remove the workspace tree. Safe to call repeatedly; never raises."""
    try:
        shutil.rmtree(workspace.path)
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.warning("[%s] Could not remove workspace %s: %s", workspace.request_id, workspace.path, exc)
        return
    logger.debug("[%s] Removed workspace %s", workspace.request_id, workspace.path)


@asynccontextmanager
async def request_workspace(request_id: str, root: Path) -> AsyncIterator[Workspace]:
    workspace = await asyncio.to_thread(create_workspace, request_id, root)
    try:
        yield workspace
    finally:
        await asyncio.to_thread(destroy_workspace, workspace)
