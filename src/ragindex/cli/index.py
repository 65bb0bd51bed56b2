"""ragindex index — index a directory or an llms.txt manifest.

Source selection:
  --path DIR   → FileSystemDataSource (Markdown files under DIR)
  --url URL    → ManifestDataSource (files linked from an llms.txt)

Unchanged documents (same content hash as the stored resource) are skipped
without embedding. Changed documents are re-chunked, re-embedded and replaced
in a single transaction.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from ragindex.cli.errors import (
    err_config,
    err_index_failed,
    err_invalid_source,
    err_manifest_unreachable,
    err_no_source,
)
from ragindex.config import IndexerConfig, load_config
from ragindex.db.connection import Database
from ragindex.db.repository import Repository
from ragindex.errors import ConfigurationError, IndexerError, ManifestFetchError
from ragindex.indexer import Indexer, IndexStats
from ragindex.ingest.embedder import EmbeddingConfig, EmbeddingGenerator
from ragindex.sources.base import DataSource
from ragindex.sources.filesystem import FileSystemDataSource, FileSystemOptions
from ragindex.sources.http import fetch
from ragindex.sources.manifest import ManifestDataSource, ManifestOptions

console = Console()


def index_cmd(
    path: Annotated[
        Path | None,
        typer.Option("--path", "-p", help="Directory of documents to index."),
    ] = None,
    url: Annotated[
        str | None,
        typer.Option("--url", "-u", help="llms.txt manifest URL to index."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the index database (created if missing)."),
    ] = None,
    max_files: Annotated[
        int | None,
        typer.Option("--max-files", help="Process at most N documents."),
    ] = None,
    delay: Annotated[
        int | None,
        typer.Option("--delay", help="Milliseconds between downloads (manifest only)."),
    ] = None,
    fail_fast: Annotated[
        bool,
        typer.Option("--fail-fast", help="Stop at the first document that fails."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Discover and chunk only; no embedding, the index is left untouched."),
    ] = False,
) -> None:
    """Index documents from a directory or an llms.txt manifest."""
    if (path is None) == (url is None):
        console.print(err_no_source())
        raise typer.Exit(1)

    try:
        cfg = load_config()
    except ConfigurationError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)

    source = _build_source(cfg, path=path, url=url)
    label = str(path) if path is not None else str(url)

    embedder = EmbeddingGenerator(
        EmbeddingConfig(
            model=cfg.embedding.model,
            dimensions=cfg.embedding.dimensions,
            batch_size=cfg.embedding.batch_size,
        )
    )
    if not dry_run:
        try:
            embedder.check_api_key()
        except ConfigurationError as exc:
            console.print(err_config(str(exc)))
            raise typer.Exit(1)

    db_path = db or Path(cfg.database.path)
    database = Database.for_dry_run(db_path) if dry_run else Database(db_path)
    conn = database.open()
    indexer = Indexer(
        Repository(conn),
        embedder,
        chunk_size=cfg.chunking.chunk_size,
        chunk_overlap=cfg.chunking.chunk_overlap,
        separators=cfg.chunking.separators,
    )
    options = {"max_files": max_files, "delay": delay}

    console.print(f"\n[bold]→ {label}[/]")
    try:
        stats = indexer.index_source(source, options, fail_fast=fail_fast, dry_run=dry_run)
    except ConfigurationError:
        console.print(err_invalid_source(label))
        raise typer.Exit(1)
    except ManifestFetchError as exc:
        console.print(err_manifest_unreachable(exc.url, exc.reason))
        raise typer.Exit(1)
    except IndexerError as exc:
        failed_uri = getattr(exc, "source_uri", label)
        console.print(err_index_failed(failed_uri, str(exc)))
        raise typer.Exit(1)
    finally:
        conn.close()

    _print_summary(stats, dry_run=dry_run)
    if stats.failed:
        raise typer.Exit(1)


# ------------------------------------------------------------------
# Source construction
# ------------------------------------------------------------------


def _build_source(cfg: IndexerConfig, path: Path | None, url: str | None) -> DataSource:
    if path is not None:
        return FileSystemDataSource(
            FileSystemOptions(
                root=path,
                extensions=cfg.filesystem.extensions,
                recursive=cfg.filesystem.recursive,
                exclude=cfg.filesystem.exclude,
                max_files=cfg.filesystem.max_files,
            )
        )
    return ManifestDataSource(
        ManifestOptions(
            url=url or "",
            concurrency=cfg.manifest.concurrency,
            delay=cfg.manifest.delay,
            max_files=cfg.manifest.max_files,
            max_depth=cfg.manifest.max_depth,
            allowed_domains=cfg.manifest.allowed_domains,
            fetcher=fetch,
        )
    )


# ------------------------------------------------------------------
# DB helpers
# ------------------------------------------------------------------


def resolve_db_path(db: Path | None) -> Path:
    """Return --db when given, else the configured index path (ragindex.yaml, RAGINDEX_DB)."""
    if db is not None:
        return db
    try:
        cfg = load_config()
    except ConfigurationError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)
    return Path(cfg.database.path)


# ------------------------------------------------------------------
# Output
# ------------------------------------------------------------------


def _print_summary(stats: IndexStats, dry_run: bool) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Result")
    table.add_column("Documents", justify="right")
    if dry_run:
        table.add_row("[cyan]would index[/]", str(stats.planned))
    else:
        table.add_row("[green]created[/]", str(stats.created))
        table.add_row("[green]updated[/]", str(stats.updated))
    table.add_row("[dim]unchanged[/]", str(stats.unchanged))
    table.add_row("[red]failed[/]", str(stats.failed))
    console.print(table)

    chunk_word = "chunks to embed" if dry_run else "chunks stored"
    console.print(f"  {stats.chunks} {chunk_word}")
    for source_uri, exc in stats.failures:
        console.print(f"  [red]✗[/] {source_uri}: {exc}")
