"""CLI commands for the planet catalog.

Provides command-line interface using Typer:
- solar serve: Run the API server
- solar init-db: Create the database tables

Usage:
    solar --help
    solar serve --port 9000
    solar init-db
"""

import typer

from solar.cli.init_db import app as init_db_app
from solar.cli.serve import app as serve_app

# Main CLI application
app = typer.Typer(
    name="solar",
    help="Solar System Info: planet catalog API",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.add_typer(init_db_app, name="init-db")


@app.callback()
def callback() -> None:
    """Solar System Info: planet catalog API."""


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
