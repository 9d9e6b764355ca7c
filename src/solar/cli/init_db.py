"""CLI command for creating the database schema.

Usage:
    solar init-db
"""

from __future__ import annotations

import asyncio

import typer

from solar.config import settings
from solar.persistence import create_engine, init_db

app = typer.Typer(help="Create the planet catalog tables")


async def _create_tables() -> None:
    engine = create_engine(settings)
    try:
        await init_db(engine)
    finally:
        await engine.dispose()


@app.callback(invoke_without_command=True)
def init_db_command() -> None:
    """Create the planets table if it does not exist."""
    typer.echo(f"Creating tables in {settings.database_url.rsplit('@', 1)[-1]}")
    asyncio.run(_create_tables())
    typer.echo("Done")
