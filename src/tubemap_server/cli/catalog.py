import asyncio
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from tubemap_server.core.catalog import list_datasets, list_path_names
from tubemap_server.core.toolchain import VgToolchain
from tubemap_server.errors import PipelineError
from tubemap_server.settings import get_settings

console = Console()


def datasets(
    internal: Annotated[bool, typer.Option("--internal", help="List the built-in data directory instead.")] = False,
) -> None:
    """List graph, haplotype and read-index files available for extraction."""
    settings = get_settings()
    catalog = list_datasets(settings.data_dir(not internal))
    table = Table(show_lines=False)
    table.add_column("kind")
    table.add_column("file")
    for kind, names in (("xg", catalog.xg_files), ("gbwt", catalog.gbwt_files), ("gam index", catalog.gam_indices)):
        for name in names:
            table.add_row(kind, name)
    console.print(table)


def paths(
    xg_file: Annotated[str, typer.Argument(help="Graph file name inside the data directory.")],
    internal: Annotated[bool, typer.Option("--internal", help="Read from the built-in data directory.")] = False,
) -> None:
    """List the path names stored in a graph."""
    settings = get_settings()
    xg_path = settings.data_dir(not internal) / xg_file

    try:
        names = asyncio.run(list_path_names(VgToolchain(settings.vg_path), xg_path))
    except PipelineError as exc:
        console.print(f"[red]{exc.kind}[/red]: {exc.message}")
        raise typer.Exit(1) from exc

    for name in names:
        console.print(name)
    console.print(f"({len(names)} paths)")
