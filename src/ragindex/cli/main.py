"""ragindex CLI entry point."""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from ragindex.cli.index import index_cmd
from ragindex.cli.remove import remove_cmd
from ragindex.cli.status import status_cmd


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"ragindex {_installed_version()}")
        raise typer.Exit()


def _installed_version() -> str:
    try:
        return importlib.metadata.version("ragindex")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


app = typer.Typer(
    name="ragindex",
    help=(
        "ragindex — keep a vector index in sync with your documents.\n\n"
        "  ragindex index   Chunk, embed and store new or changed documents.\n"
        "  ragindex status  List indexed resources."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose logging."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """ragindex — document indexing for retrieval."""
    _setup_logging(verbose)


app.command("index")(index_cmd)
app.command("remove")(remove_cmd)
app.command("status")(status_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed ragindex version."""
    typer.echo(f"ragindex {_installed_version()}")


if __name__ == "__main__":
    app()
