"""Product store CLI commands."""

import typer
from rich.prompt import Confirm
from sqlalchemy.exc import SQLAlchemyError

from .utils import console

db_app = typer.Typer(help="Manage the product store")


@db_app.command("init")
def init() -> None:
    """Create the product tables if they do not exist."""
    from src.product_api.runtime.init_db import init_db

    try:
        init_db()
    except SQLAlchemyError as e:
        console.print(f"[red]Failed to initialise the database: {e}[/red]")
        raise typer.Exit(code=1) from e
    console.print("[green]Database initialised[/green]")


@db_app.command("clear")
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Delete every stored product."""
    from src.product_api.core.services import DbSessionService
    from src.product_api.entities.service.product import ProductRepository

    if not yes and not Confirm.ask("Delete all products?"):
        console.print("[yellow]Aborted[/yellow]")
        raise typer.Exit(code=0)

    database_service = DbSessionService()
    try:
        with database_service.session_scope() as session:
            repository = ProductRepository(session)
            removed = repository.count()
            repository.delete_all()
    except SQLAlchemyError as e:
        console.print(f"[red]Failed to clear products: {e}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        database_service.dispose()

    console.print(f"[green]Deleted {removed} product(s)[/green]")
