from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from tubemap_server.core.ports.toolchain import GraphToolchain
from tubemap_server.core.sidefiles import SideFiles
from tubemap_server.errors import ConversionError
from tubemap_server.models import Graph

logger = logging.getLogger(__name__)

VIEW_GRAPH_ARGS: tuple[str, ...] = ("view", "-j", "-")


@dataclass(frozen=True)
class ChunkParams:
    xg_file: str
    position: int
    distance: int
    anchor_path: str = ""
    by_node: bool = False
    gam_index: str | None = None
    gbwt_file: str | None = None
    use_mounted_path: bool = False

    @property
    def with_gam(self) -> bool:
        return self.gam_index is not None


def build_chunk_args(
    params: ChunkParams,
    data_dir: Path,
    side_files: SideFiles,
    default_context: int = 20,
) -> list[str]:
    """Build the ``vg chunk`` argument list for one extraction request."""
    args = ["chunk", "-x", str(data_dir / params.xg_file)]
    if params.gam_index is not None:
        args += ["-a", str(data_dir / params.gam_index), "-g", "-A"]
    if params.gbwt_file is not None:
        args += ["--gbwt-name", str(data_dir / params.gbwt_file)]
    if params.by_node:
        args += ["-r", str(params.position), "-c", str(params.distance)]
    else:
        end = params.position + params.distance
        args += ["-c", str(default_context), "-p", f"{params.anchor_path}:{params.position}-{end}"]
    args += ["-T", "-b", str(side_files.prefix), "-E", str(side_files.regions)]
    return args


async def stream_subgraph(toolchain: GraphToolchain, chunk_args: list[str], request_id: str = "-") -> bytes:
    """Pipe ``vg chunk`` into ``vg view -j -`` and return the JSON text."""
    return await toolchain.pipe(chunk_args, VIEW_GRAPH_ARGS, request_id=request_id)


def parse_graph(output: bytes) -> Graph | None:
    """Parse converted output; ``None`` means the extracted subgraph is empty."""
    if not output.strip():
        return None
    try:
        return Graph.model_validate_json(output)
    except ValidationError as exc:
        raise ConversionError(f"vg view produced an unreadable graph: {exc.error_count()} error(s)") from exc
