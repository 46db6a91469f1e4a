"""CLI for the ``finance_tracker`` package.

Typer-based console interface over :mod:`finance_tracker.api`. Environment
variables (notably ``DATABASE_URL``) are loaded from a local ``.env`` using
``python-dotenv`` before any command runs. Results are printed to stdout as
JSON; file-level import errors go to stderr with exit status 2.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import ArgumentInfo

from .config import log_level_from_env
from .errors import ImportFileError, StorageError
from .logging_setup import configure_logging
from .models import ColumnMapping

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Preview and import bank CSV exports into the finance tracker database.",
)

# Module-level argument object to satisfy ruff B008 (no calls in parameter
# defaults).
CSV_PATH_ARGUMENT: ArgumentInfo = typer.Argument(
    help="Path to a comma- or semicolon-delimited bank export",
    dir_okay=False,
    file_okay=True,
    exists=True,
    readable=True,
)


def _echo_json(payload: object) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def _fail(message: str, *, code: int) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(code=code)


@app.command("preview")
def preview_cmd(csv_path: Annotated[Path, CSV_PATH_ARGUMENT]) -> None:
    """Show the header, the first rows and the row count of a CSV."""

    from .api import preview_csv_file

    try:
        result = preview_csv_file(csv_path)
    except ImportFileError as e:
        raise _fail(str(e), code=2) from e
    _echo_json(result.to_dict())


@app.command("import")
def import_cmd(
    csv_path: Annotated[Path, CSV_PATH_ARGUMENT],
    *,
    amount_col: str | None = typer.Option(None, help="Column holding the amount (required)."),
    date_col: str | None = typer.Option(None, help="Column holding the date (required)."),
    description_col: str | None = typer.Option(None, help="Column holding the description."),
    category_col: str | None = typer.Option(None, help="Column holding a category label."),
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
) -> None:
    """Import a CSV; duplicate rows are skipped and bad rows are reported."""

    from .api import import_csv_file

    mapping = ColumnMapping.from_form(
        amount_col=amount_col,
        date_col=date_col,
        description_col=description_col,
        category_col=category_col,
    )
    try:
        result = asyncio.run(import_csv_file(csv_path, mapping, database_url=database_url))
    except ImportFileError as e:
        raise _fail(str(e), code=2) from e
    except StorageError as e:
        raise _fail(f"storage unavailable: {e}", code=1) from e

    payload = result.to_dict()
    payload["createdCategories"] = result.created_categories
    _echo_json(payload)


@app.command("seed")
def seed_cmd(
    *,
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
    create_schema: bool = typer.Option(False, help="Create missing tables before seeding."),
) -> None:
    """Insert the default categories that are not present yet."""

    from .ingest.seed_taxonomy import reseed_taxonomy

    try:
        count = asyncio.run(
            reseed_taxonomy(database_url=database_url, create_tables=create_schema)
        )
    except StorageError as e:
        raise _fail(f"seeding failed: {e}", code=1) from e
    typer.echo(f"{count} default categories present.")


@app.command("serve")
def serve_cmd(
    *,
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(5000, help="Port to listen on."),
) -> None:
    """Run the HTTP API with uvicorn."""

    import uvicorn

    from .web import create_app

    uvicorn.run(create_app(), host=host, port=port)


@app.callback()
def _root() -> None:
    """Load ``.env`` from the working directory and configure logging."""

    # override=False keeps variables already set in the environment
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level_from_env())


if __name__ == "__main__":  # pragma: no cover
    app()
