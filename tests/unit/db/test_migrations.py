"""Tests for the migration runner and schema."""

from __future__ import annotations

import sqlite3

import pytest

from ragindex.db.connection import Database
from ragindex.db.migrations import MIGRATIONS, current_version, run_migrations
from ragindex.db.schema import CURRENT_VERSION, initialize


@pytest.fixture
def conn(tmp_path):
    c = Database(tmp_path / ".ragindex.db").connect()
    yield c
    c.close()


def _tables(conn) -> set[str]:
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    return {r[0] for r in rows}


def test_initialize_creates_tables(conn):
    initialize(conn)
    assert {"schema_version", "resource", "resource_chunk"} <= _tables(conn)


def test_initialize_records_version(conn):
    initialize(conn)
    assert current_version(conn) == CURRENT_VERSION == MIGRATIONS[-1][0]


def test_run_migrations_idempotent(conn):
    run_migrations(conn)
    run_migrations(conn)
    rows = conn.execute("SELECT COUNT(*) FROM schema_version").fetchone()[0]
    assert rows == len(MIGRATIONS)


def test_migrations_versions_ascending():
    versions = [v for v, _ in MIGRATIONS]
    assert versions == sorted(versions)
    assert len(set(versions)) == len(versions)


def test_source_type_check_constraint(conn):
    initialize(conn)
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute(
            "INSERT INTO resource (id, source_type, source_uri, content_hash) VALUES ('r', 'ftp', 'x', 'h')"
        )


def test_source_uri_unique(conn):
    initialize(conn)
    conn.execute(
        "INSERT INTO resource (id, source_type, source_uri, content_hash) VALUES ('r1', 'file', 'a.md', 'h')"
    )
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute(
            "INSERT INTO resource (id, source_type, source_uri, content_hash) VALUES ('r2', 'file', 'a.md', 'h')"
        )


def test_chunk_cascade_on_resource_delete(conn):
    initialize(conn)
    conn.execute(
        "INSERT INTO resource (id, source_type, source_uri, content_hash) VALUES ('r1', 'file', 'a.md', 'h')"
    )
    conn.execute(
        "INSERT INTO resource_chunk (resource_id, chunk_index, content, embedding) "
        "VALUES ('r1', 0, 'text', vec_f32('[0.1, 0.2]'))"
    )
    conn.execute("DELETE FROM resource WHERE id = 'r1'")
    assert conn.execute("SELECT COUNT(*) FROM resource_chunk").fetchone()[0] == 0
