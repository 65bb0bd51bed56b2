"""ragindex status — list indexed resources with their chunk counts."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from ragindex.cli.errors import err_no_db
from ragindex.cli.index import resolve_db_path
from ragindex.db.connection import Database
from ragindex.db.repository import Repository
from ragindex.models import SourceType

console = Console()


def status_cmd(
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the index database (default: configured path)."),
    ] = None,
    source_type: Annotated[
        SourceType | None,
        typer.Option("--type", "-t", help="Only show resources of this type."),
    ] = None,
) -> None:
    """Show indexed resources."""
    database = Database(resolve_db_path(db))
    if not database.exists():
        console.print(err_no_db(str(database.db_path)))
        raise typer.Exit(1)

    conn = database.open()
    repo = Repository(conn)
    try:
        if source_type is None:
            resources = repo.list_resources()
        else:
            resources = repo.get_resources_by_source_type(source_type)

        if not resources:
            console.print("[dim]No resources indexed.[/]")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Source")
        table.add_column("Type")
        table.add_column("Chunks", justify="right")
        table.add_column("Updated")
        total_chunks = 0
        for resource in resources:
            n = repo.count_chunks_by_resource(resource.id)
            total_chunks += n
            table.add_row(
                resource.source_uri,
                resource.source_type.value,
                str(n),
                (resource.updated_at or "")[:19],
            )
        console.print(table)
        console.print(f"  {len(resources)} resources · {total_chunks} chunks")
    finally:
        conn.close()
