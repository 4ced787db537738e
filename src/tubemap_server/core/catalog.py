from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from tubemap_server.core.ports.toolchain import GraphToolchain
from tubemap_server.errors import ToolInvocationError

logger = logging.getLogger(__name__)

XG_SUFFIX = ".xg"
GBWT_SUFFIX = ".gbwt"
GAM_INDEX_SUFFIX = ".gam.index"


@dataclass
class DatasetCatalog:
    xg_files: list[str] = field(default_factory=list)
    gbwt_files: list[str] = field(default_factory=list)
    gam_indices: list[str] = field(default_factory=list)

    def to_payload(self) -> dict[str, list[str]]:
        return {"xgFiles": self.xg_files, "gbwtFiles": self.gbwt_files, "gamIndices": self.gam_indices}


def is_safe_dataset_name(name: str) -> bool:
    """True if ``name`` stays inside its data directory when joined to it."""
    if not name or "\\" in name:
        return False
    pure = PurePosixPath(name)
    return not pure.is_absolute() and ".." not in pure.parts


def list_datasets(data_dir: Path) -> DatasetCatalog:
    catalog = DatasetCatalog()
    if not data_dir.is_dir():
        logger.warning("Data directory %s does not exist", data_dir)
        return catalog
    for entry in sorted(data_dir.iterdir()):
        name = entry.name
        if name.endswith(XG_SUFFIX):
            catalog.xg_files.append(name)
        if name.endswith(GBWT_SUFFIX):
            catalog.gbwt_files.append(name)
        if name.endswith(GAM_INDEX_SUFFIX):
            catalog.gam_indices.append(name)
    return catalog


def path_names_args(xg_path: Path) -> list[str]:
    return ["paths", "-X", str(xg_path)]


async def list_path_names(toolchain: GraphToolchain, xg_path: Path, request_id: str = "-") -> list[str]:
    output = await toolchain.run(path_names_args(xg_path), request_id=request_id)
    try:
        text = output.decode()
    except UnicodeDecodeError as exc:
        raise ToolInvocationError(f"vg paths output is not valid UTF-8 at byte {exc.start}") from exc
    return [line for line in text.split("\n") if line != ""]
