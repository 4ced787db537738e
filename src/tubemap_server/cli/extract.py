import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from tubemap_server.core.extraction import ChunkParams
from tubemap_server.core.pipeline import run_extraction
from tubemap_server.core.toolchain import VgToolchain
from tubemap_server.errors import PipelineError
from tubemap_server.models import ExtractionResult
from tubemap_server.settings import get_settings

console = Console()


def _render_summary(result: ExtractionResult) -> None:
    assert result.graph is not None
    table = Table(show_lines=False)
    for header in ("path", "freq", "indexOfFirstBase", "mappings"):
        table.add_column(header)
    for path in result.graph.path:
        table.add_row(
            path.name,
            "" if path.freq is None else str(path.freq),
            "" if path.index_of_first_base is None else str(path.index_of_first_base),
            str(len(path.mapping)),
        )
    console.print(table)
    console.print(
        f"({len(result.graph.node)} nodes, {len(result.graph.edge)} edges, "
        f"{len(result.graph.path)} paths, {len(result.gam)} reads)"
    )


def extract(
    xg_file: Annotated[str, typer.Argument(help="Graph file name inside the data directory.")],
    position: Annotated[int, typer.Option(help="Node id (--by-node) or start coordinate on the anchor path.")],
    distance: Annotated[int, typer.Option(help="Context radius (--by-node) or interval length.")] = 100,
    anchor: Annotated[str, typer.Option(help="Anchor path name for interval extraction.")] = "",
    by_node: Annotated[
        bool, typer.Option("--by-node", help="Extract around a node id instead of a path interval.")
    ] = False,
    gam_index: Annotated[str | None, typer.Option(help="GAM index to pull aligned reads from.")] = None,
    gbwt: Annotated[str | None, typer.Option(help="GBWT haplotype overlay.")] = None,
    mounted: Annotated[
        bool, typer.Option("--mounted", help="Read datasets from the mounted data directory.")
    ] = False,
    output: Annotated[Path | None, typer.Option(help="Write the JSON result to this file.")] = None,
) -> None:
    """Extract one annotated subgraph and summarise it."""
    settings = get_settings()
    params = ChunkParams(
        xg_file=xg_file,
        position=position,
        distance=distance,
        anchor_path=anchor,
        by_node=by_node,
        gam_index=gam_index,
        gbwt_file=gbwt,
        use_mounted_path=mounted,
    )

    try:
        result = asyncio.run(run_extraction(params, VgToolchain(settings.vg_path), settings))
    except PipelineError as exc:
        console.print(f"[red]{exc.kind}[/red] during {exc.stage}: {exc.message}")
        raise typer.Exit(1) from exc

    if result.is_empty:
        console.print("[yellow]No subgraph found for this region.[/yellow]")
    else:
        _render_summary(result)
    if output is not None:
        output.write_text(json.dumps(result.to_payload()), encoding="utf-8")
        console.print(f"[green]Wrote[/green] {output}")
