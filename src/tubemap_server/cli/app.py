from typing import Annotated

import typer

from tubemap_server.cli.catalog import datasets, paths
from tubemap_server.cli.extract import extract
from tubemap_server.cli.serve import serve_app
from tubemap_server.log import configure_logging
from tubemap_server.settings import get_settings

app = typer.Typer(
    name="tubemap-server",
    help="Tube Map Server CLI: extract and annotate variation subgraphs with vg.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def _main(
    log_level: Annotated[str | None, typer.Option(help="Logging level (defaults to TUBEMAP_LOG_LEVEL).")] = None,
) -> None:
    configure_logging(log_level or get_settings().log_level)


app.command("extract")(extract)
app.command("datasets")(datasets)
app.command("paths")(paths)
app.add_typer(serve_app, name="serve")


def main() -> None:
    app()
