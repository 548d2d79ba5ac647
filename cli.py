"""
CLI tool for the book catalog service.

Provides commands for running the server, preparing the database and
printing the GraphQL schema.
"""

import asyncio

import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from catalog.settings import app_settings

# Initialize Typer app with help text
typer_app = typer.Typer(
    name="catalog-cli",
    help="Book Catalog CLI - Run the service and manage its database",
    add_completion=False,
)
console = Console()


@typer_app.command(name="serve")
def serve(
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(
        False, "--reload", help="Restart the server on code changes"
    ),
):
    """
    Run the catalog API with uvicorn.

    Example:
        python cli.py serve --port 8080
    """
    table = Table("Setting", "Value", title="Catalog service", show_lines=True)
    table.add_row("Environment", app_settings.ENV.value)
    table.add_row("GraphQL", f"http://{host}:{port}{app_settings.GRAPHQL_PATH}")
    table.add_row("GraphiQL", "enabled" if app_settings.GRAPHIQL_ENABLED else "disabled")
    console.print(table)

    uvicorn.run("catalog:app", host=host, port=port, reload=reload)


@typer_app.command(name="init-db")
def init_db():
    """
    Wait for the database and create missing tables.

    Example:
        python cli.py init-db
    """
    from catalog.storage.db import wait_and_init_db

    console.print()
    console.print(
        Panel.fit("[bold cyan]Database initialization[/bold cyan]", border_style="cyan")
    )

    if not asyncio.run(wait_and_init_db()):
        console.print("[red]✗ Database is not reachable[/red]")
        raise typer.Exit(code=1)

    console.print("[green]✓[/green] Tables created")
    console.print()


@typer_app.command(name="schema")
def print_schema():
    """
    Print the GraphQL schema in SDL.

    Example:
        python cli.py schema > schema.graphql
    """
    from catalog.api.graphql.schema import schema

    typer.echo(schema.as_str())


if __name__ == "__main__":
    typer_app()
