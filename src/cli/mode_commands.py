"""Execution mode CLI commands, talking to a running server."""

import httpx
import typer
from rich.table import Table

from .utils import DEFAULT_BASE_URL, console

mode_app = typer.Typer(help="Inspect or toggle the delayed execution mode of a running server")

_URL_OPTION = typer.Option(DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the server")
_PREFIX_OPTION = typer.Option("", "--prefix", help="API prefix the server mounts its routes under")


def _request(method: str, url: str) -> dict:
    try:
        response = httpx.request(method, url, timeout=10.0)
        response.raise_for_status()
    except httpx.HTTPError as e:
        console.print(f"[red]Request to {url} failed: {e}[/red]")
        raise typer.Exit(code=1) from e
    return response.json()


def _show(status: dict) -> None:
    enabled = bool(status.get("enabled"))
    table = Table(title="Execution mode")
    table.add_column("Path")
    table.add_column("Active")
    table.add_row("delayed (async-simulated)", "[green]yes[/green]" if enabled else "no")
    table.add_row("immediate", "no" if enabled else "[green]yes[/green]")
    console.print(table)


@mode_app.command("status")
def status(url: str = _URL_OPTION, prefix: str = _PREFIX_OPTION) -> None:
    """Show the current execution mode."""
    _show(_request("GET", f"{url.rstrip('/')}{prefix}/coroutines"))


@mode_app.command("enable")
def enable(url: str = _URL_OPTION, prefix: str = _PREFIX_OPTION) -> None:
    """Enable the delayed execution path."""
    _show(_request("POST", f"{url.rstrip('/')}{prefix}/coroutines/enable"))


@mode_app.command("disable")
def disable(url: str = _URL_OPTION, prefix: str = _PREFIX_OPTION) -> None:
    """Disable the delayed execution path."""
    _show(_request("POST", f"{url.rstrip('/')}{prefix}/coroutines/disable"))
