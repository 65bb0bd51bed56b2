"""Rich error messages for the CLI — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from ragindex.cli.errors import err_no_db
    console.print(err_no_db(".ragindex.db"))
    raise typer.Exit(1)
"""

from __future__ import annotations


def err_no_source() -> str:
    """Neither --path nor --url given (or both)."""
    return (
        "[red]Error:[/] Specify exactly one source.\n"
        "  Use:  ragindex index --path docs/\n"
        "   or:  ragindex index --url https://example.com/llms.txt"
    )


def err_invalid_source(source: str) -> str:
    """Data source failed validation."""
    return (
        f"[red]Error:[/] Invalid source: '{source}'\n"
        "  Directories must exist; manifest URLs must be http(s) and end with /llms.txt.\n"
        "  Run with --verbose for details."
    )


def err_manifest_unreachable(url: str, reason: str) -> str:
    """Root llms.txt could not be fetched."""
    return (
        f"[red]Error:[/] Could not fetch manifest '{url}': {reason}\n"
        "  Check the URL in a browser and try again."
    )


def err_config(message: str) -> str:
    """Config file or API key problem."""
    return f"[red]Error:[/] {message}"


def err_no_db(db_path: str = ".ragindex.db") -> str:
    """No index database at *db_path*."""
    return (
        f"[red]Error:[/] No database found at '{db_path}'.\n"
        "  Run:  ragindex index --path <dir>  or  --url <llms.txt>  to create it."
    )


def err_resource_not_found(source: str) -> str:
    """Resource not found in database."""
    return (
        f"[yellow]Resource not found:[/] '{source}' is not in the index.\n"
        "  Run:  ragindex status  to see all indexed resources."
    )


def err_index_failed(source_uri: str, message: str) -> str:
    """A document failed to index under --fail-fast."""
    return (
        f"[red]Error:[/] Indexing stopped at '{source_uri}': {message}\n"
        "  Fix the problem and re-run; unchanged documents are skipped."
    )
