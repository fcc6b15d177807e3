"""CLI commands for the student portal.

Provides command-line interface using Typer:
- portal serve: Run the API server
- portal cache keys: List namespaced cache keys
- portal cache flush: Remove namespaced keys matching a pattern
- portal cache reset: Flush the whole namespace

Usage:
    portal --help
    portal serve --port 8000
    portal cache keys "Student*"
"""

import typer

from portal.cli.cache_cmd import app as cache_app
from portal.cli.serve import app as serve_app

app = typer.Typer(
    name="portal",
    help="Student portal API with a Redis cache-aside store",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.add_typer(cache_app, name="cache")


@app.callback()
def callback() -> None:
    """Student portal API with a Redis cache-aside store."""


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
