"""CLI for Marketplace Payments.

Provides command-line interface for database setup, sample data and serving.
"""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from marketplace_payments.config import get_settings
from marketplace_payments.database.connection import close_db, get_session_factory, init_db
from marketplace_payments.database.seed import seed_database
from marketplace_payments.monitoring.logging import setup_logging

# Initialize Typer app
app = typer.Typer(
    name="marketplace-payments",
    help="Marketplace Payments - job settlement, deposits and earnings reports",
    add_completion=False,
)

console = Console()


@app.command("init-db")
def init_db_command() -> None:
    """Create all tables if they don't exist."""
    setup_logging()

    async def _run() -> None:
        try:
            await init_db()
        finally:
            await close_db()

    asyncio.run(_run())
    console.print(f"[green]Tables created[/green] on {get_settings().database_url}")


@app.command("seed")
def seed_command() -> None:
    """Replace all data with the sample dataset."""
    setup_logging()

    async def _run() -> dict[str, int]:
        try:
            await init_db()
            async with get_session_factory()() as session:
                return await seed_database(session)
        finally:
            await close_db()

    counts = asyncio.run(_run())

    table = Table(title="Seeded rows")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right")
    for name, count in counts.items():
        table.add_row(name, str(count))
    console.print(table)


@app.command("serve")
def serve_command(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "marketplace_payments.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        workers=1 if reload else settings.api_workers,
        log_level=settings.log_level.lower(),
    )


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
