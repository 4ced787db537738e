import typer
from rich.console import Console

serve_app = typer.Typer(help="Start servers.")
console = Console()


@serve_app.command("api")
def api(
    host: str = "127.0.0.1",
    port: int = 3000,
) -> None:
    """Start the FastAPI HTTP server."""
    import uvicorn

    from tubemap_server.api.app import create_app

    app = create_app()
    console.print(f"[green]Starting API server on {host}:{port}[/green]")
    uvicorn.run(app, host=host, port=port)


@serve_app.command("mcp")
def mcp(
    transport: str = "stdio",
) -> None:
    """Start the MCP server."""
    from tubemap_server.core.toolchain import VgToolchain
    from tubemap_server.mcp.server import create_mcp_server
    from tubemap_server.settings import get_settings

    settings = get_settings()
    server = create_mcp_server(VgToolchain(settings.vg_path), settings)
    console.print(f"[green]Starting MCP server (transport: {transport})[/green]")
    server.run(transport=transport)  # type: ignore[arg-type]
