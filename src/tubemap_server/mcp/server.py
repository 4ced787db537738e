"""FastMCP server exposing tube map extraction tools."""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP

from tubemap_server.core.catalog import is_safe_dataset_name, list_datasets, list_path_names
from tubemap_server.core.extraction import ChunkParams
from tubemap_server.core.pipeline import run_extraction
from tubemap_server.core.ports.toolchain import GraphToolchain
from tubemap_server.errors import PipelineError
from tubemap_server.settings import Settings


def create_mcp_server(toolchain: GraphToolchain, settings: Settings) -> FastMCP:
    """Create a FastMCP server wired to the given toolchain."""

    mcp = FastMCP("tubemap-server", instructions="Extract annotated subgraphs from variation graphs with vg.")

    @mcp.tool()
    async def extract_subgraph(
        xg_file: str,
        position: int,
        distance: int,
        anchor_path: str = "",
        by_node: bool = False,
        gam_index: str | None = None,
        gbwt_file: str | None = None,
        use_mounted_path: bool = False,
    ) -> dict[str, Any]:
        """Extract a subgraph with path frequencies, offsets and optional reads."""
        for name in (xg_file, gam_index, gbwt_file):
            if name is not None and not is_safe_dataset_name(name):
                return {"error": {"kind": "InvalidDataset", "message": f"Invalid dataset name: {name!r}"}}
        params = ChunkParams(
            xg_file=xg_file,
            position=position,
            distance=distance,
            anchor_path=anchor_path,
            by_node=by_node,
            gam_index=gam_index,
            gbwt_file=gbwt_file,
            use_mounted_path=use_mounted_path,
        )
        try:
            result = await run_extraction(params, toolchain, settings)
        except PipelineError as exc:
            return {"error": {"kind": exc.kind, "message": exc.message, "stage": exc.stage}}
        return result.to_payload()

    @mcp.tool(name="list_datasets")
    async def datasets(use_mounted_path: bool = True) -> dict[str, list[str]]:
        """List graph, haplotype and read-index files by kind."""
        return list_datasets(settings.data_dir(use_mounted_path)).to_payload()

    @mcp.tool(name="list_path_names")
    async def path_names(xg_file: str, use_mounted_path: bool = True) -> list[str]:
        """List path names stored in a graph."""
        if not is_safe_dataset_name(xg_file):
            raise ValueError(f"Invalid dataset name: {xg_file!r}")
        return await list_path_names(toolchain, settings.data_dir(use_mounted_path) / xg_file)

    return mcp
