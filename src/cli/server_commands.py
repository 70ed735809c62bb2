"""Server CLI commands."""

import typer
from rich.panel import Panel

from .utils import console


def serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind the server to"),
    port: int = typer.Option(8000, help="Port to bind the server to"),
    reload: bool = typer.Option(False, help="Enable auto-reload on code changes"),
    log_level: str = typer.Option(
        "info", help="Log level (debug, info, warning, error, critical)"
    ),
) -> None:
    """Start the Product API server with uvicorn."""
    import uvicorn

    console.print(
        Panel.fit(
            "[bold green]Starting Product API Server[/bold green]",
            border_style="green",
        )
    )
    console.print(f"[blue]Server will be available at:[/blue] http://{host}:{port}")
    console.print("[dim]Press Ctrl+C to stop the server[/dim]")

    uvicorn.run(
        "src.product_api.api.http.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
        access_log=False,
    )
