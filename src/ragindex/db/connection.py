"""Index database handle: SQLite with sqlite-vec, schema migrated on open."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

import sqlite_vec

from ragindex.db.schema import initialize

LOGGER = logging.getLogger(__name__)

MEMORY = ":memory:"


class Database:
    """The ragindex index: one SQLite file holding resources, chunks and embeddings.

    ``Database(MEMORY)`` is a throwaway index that lives only as long as its
    connection; dry runs use it when no index file exists yet.
    """

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None

    @classmethod
    def for_dry_run(cls, db_path: Path | str) -> Database:
        """The index at *db_path* if it exists, otherwise an in-memory one."""
        if Path(db_path).exists():
            return cls(db_path)
        LOGGER.debug("No index at %s; dry run plans against an empty index", db_path)
        return cls(MEMORY)

    @property
    def in_memory(self) -> bool:
        return str(self.db_path) == MEMORY

    def exists(self) -> bool:
        return self.in_memory or self.db_path.is_file()

    def connect(self) -> sqlite3.Connection:
        """Open a raw connection with sqlite-vec loaded. Creates the file if missing."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.enable_load_extension(True)
        sqlite_vec.load(conn)
        conn.enable_load_extension(False)
        conn.execute("PRAGMA foreign_keys = ON")
        if not self.in_memory:
            conn.execute("PRAGMA journal_mode = WAL")
        return conn

    def open(self) -> sqlite3.Connection:
        """Connect and bring the schema up to the current version."""
        conn = self.connect()
        try:
            initialize(conn)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    def __enter__(self) -> sqlite3.Connection:
        self._conn = self.open()
        return self._conn

    def __exit__(self, *args: object) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
