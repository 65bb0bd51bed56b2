"""ragindex remove — delete a resource and all its chunks from the index.

Usage:
  ragindex remove --source docs/guide.md
  ragindex remove --source https://example.com/a.md --yes
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from ragindex.cli.errors import err_no_db, err_resource_not_found
from ragindex.cli.index import resolve_db_path
from ragindex.db.connection import Database
from ragindex.db.repository import Repository

console = Console()


def remove_cmd(
    source: Annotated[
        str,
        typer.Option("--source", "-s", help="Source path or URL to remove."),
    ],
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the index database (default: configured path)."),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Remove a resource and its chunks from the index."""
    database = Database(resolve_db_path(db))
    if not database.exists():
        console.print(err_no_db(str(database.db_path)))
        raise typer.Exit(1)

    conn = database.open()
    repo = Repository(conn)

    try:
        existing = repo.get_resource_by_source_uri(source)

        if existing is None:
            console.print(err_resource_not_found(source))
            raise typer.Exit(0)

        chunk_count = repo.count_chunks_by_resource(existing.id)
        console.print(f"\nRemove resource: [bold]{source}[/]")
        console.print(f"  Type: {existing.source_type.value}  |  Chunks: {chunk_count}")

        if not yes:
            if not typer.confirm("Confirm removal?", default=False):
                console.print("[dim]Cancelled.[/]")
                raise typer.Exit(0)

        # Chunks go with the resource (ON DELETE CASCADE)
        repo.delete_resource_by_source_uri(source)

        console.print(f"\n[green]✓[/] Removed: {source}")
        console.print(f"  {chunk_count} chunks deleted")

    finally:
        conn.close()
