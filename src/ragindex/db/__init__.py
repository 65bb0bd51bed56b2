"""ragindex database layer."""

from ragindex.db.connection import Database
from ragindex.db.migrations import MIGRATIONS, run_migrations
from ragindex.db.repository import Repository
from ragindex.db.schema import initialize

__all__ = [
    "Database",
    "Repository",
    "initialize",
    "run_migrations",
    "MIGRATIONS",
]
