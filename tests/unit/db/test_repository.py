"""Tests for the Repository pattern."""

from __future__ import annotations

import sqlite3

import pytest

from ragindex.db.repository import Repository
from ragindex.errors import DuplicateResourceError, StorageError
from ragindex.models import DocumentChunk, SourceType


def _pairs(*texts: str, dims: int = 3):
    return [
        (DocumentChunk(content=t, start_index=0, end_index=len(t)), [float(i)] * dims)
        for i, t in enumerate(texts)
    ]


def _create(repo: Repository, uri: str = "docs/a.md", content_hash: str = "h1", source_type=SourceType.FILE):
    return repo.create_resource(source_type, uri, content_hash)


# ------------------------------------------------------------------
# Resources
# ------------------------------------------------------------------

def test_create_and_get_resource(repo):
    created = _create(repo)
    assert created.id
    assert created.source_type is SourceType.FILE
    assert created.source_uri == "docs/a.md"
    assert created.content_hash == "h1"
    assert created.created_at is not None
    assert created.updated_at is not None

    fetched = repo.get_resource(created.id)
    assert fetched == created


def test_get_resource_by_source_uri(repo):
    created = _create(repo, uri="https://x/a.md", source_type=SourceType.URL)
    result = repo.get_resource_by_source_uri("https://x/a.md")
    assert result is not None
    assert result.id == created.id
    assert result.source_type is SourceType.URL


def test_get_resource_by_source_uri_not_found(repo):
    assert repo.get_resource_by_source_uri("missing.md") is None


def test_get_resource_not_found(repo):
    assert repo.get_resource("nonexistent") is None


def test_create_resource_duplicate_uri_raises(repo):
    _create(repo)
    with pytest.raises(DuplicateResourceError, match="docs/a.md"):
        _create(repo, content_hash="h2")


def test_duplicate_resource_error_is_storage_error(repo):
    _create(repo)
    with pytest.raises(StorageError):
        _create(repo)


def test_create_resource_ids_unique(repo):
    a = _create(repo, uri="a.md")
    b = _create(repo, uri="b.md")
    assert a.id != b.id


def test_update_resource_content_hash(repo):
    created = _create(repo)
    updated = repo.update_resource_content_hash(created.id, "h2")
    assert updated is not None
    assert updated.content_hash == "h2"
    assert updated.created_at == created.created_at
    assert updated.updated_at >= created.updated_at


def test_update_resource_content_hash_missing_returns_none(repo):
    assert repo.update_resource_content_hash("nope", "h2") is None


def test_get_resources_by_source_type(repo):
    _create(repo, uri="b.md")
    _create(repo, uri="a.md")
    _create(repo, uri="https://x/c.md", source_type=SourceType.URL)

    files = repo.get_resources_by_source_type(SourceType.FILE)
    assert [r.source_uri for r in files] == ["a.md", "b.md"]
    urls = repo.get_resources_by_source_type(SourceType.URL)
    assert [r.source_uri for r in urls] == ["https://x/c.md"]


def test_get_resources_by_source_type_accepts_string(repo):
    _create(repo, uri="a.md")
    assert len(repo.get_resources_by_source_type("file")) == 1


def test_list_resources(repo):
    assert repo.list_resources() == []
    _create(repo, uri="a.md")
    _create(repo, uri="https://x/b.md", source_type=SourceType.URL)
    assert len(repo.list_resources()) == 2


def test_delete_resource_cascades_chunks(repo):
    created = _create(repo)
    repo.create_resource_chunks(created.id, _pairs("one", "two"))
    repo.delete_resource(created.id)

    assert repo.get_resource(created.id) is None
    assert repo.get_resource_by_source_uri("docs/a.md") is None
    assert repo.count_chunks_by_resource(created.id) == 0


def test_delete_resource_by_source_uri(repo):
    created = _create(repo)
    repo.create_resource_chunks(created.id, _pairs("one"))
    assert repo.delete_resource_by_source_uri("docs/a.md") is True
    assert repo.get_resource_by_source_uri("docs/a.md") is None
    assert repo.count_chunks_by_resource(created.id) == 0


def test_delete_resource_by_source_uri_missing(repo):
    assert repo.delete_resource_by_source_uri("missing.md") is False


# ------------------------------------------------------------------
# Resource chunks
# ------------------------------------------------------------------

def test_create_resource_chunks_returns_count(repo):
    created = _create(repo)
    assert repo.create_resource_chunks(created.id, _pairs("a", "b", "c")) == 3
    assert repo.count_chunks_by_resource(created.id) == 3


def test_create_resource_chunks_empty(repo):
    created = _create(repo)
    assert repo.create_resource_chunks(created.id, []) == 0
    assert repo.count_chunks_by_resource(created.id) == 0


def test_get_resource_chunks_roundtrip(repo):
    created = _create(repo)
    repo.create_resource_chunks(
        created.id,
        [(DocumentChunk(content="first", start_index=0, end_index=5), [0.5, 0.25, 1.0])],
    )
    chunks = repo.get_resource_chunks(created.id)
    assert len(chunks) == 1
    assert chunks[0].content == "first"
    assert chunks[0].chunk_index == 0
    assert chunks[0].resource_id == created.id
    assert chunks[0].id is not None
    assert chunks[0].embedding == pytest.approx([0.5, 0.25, 1.0])


def test_get_resource_chunks_in_order(repo):
    created = _create(repo)
    repo.create_resource_chunks(created.id, _pairs("zero", "one", "two"))
    chunks = repo.get_resource_chunks(created.id)
    assert [c.content for c in chunks] == ["zero", "one", "two"]
    assert [c.chunk_index for c in chunks] == [0, 1, 2]


def test_delete_resource_chunks_by_resource_id(repo):
    created = _create(repo)
    repo.create_resource_chunks(created.id, _pairs("a", "b"))
    assert repo.delete_resource_chunks_by_resource_id(created.id) == 2
    assert repo.count_chunks_by_resource(created.id) == 0
    # the resource itself stays
    assert repo.get_resource(created.id) is not None


def test_create_resource_chunks_unknown_resource_raises(repo):
    with pytest.raises(StorageError, match="nope"):
        repo.create_resource_chunks("nope", _pairs("a"))


def test_chunks_isolated_between_resources(repo):
    a = _create(repo, uri="a.md")
    b = _create(repo, uri="b.md")
    repo.create_resource_chunks(a.id, _pairs("a1", "a2"))
    repo.create_resource_chunks(b.id, _pairs("b1"))
    repo.delete_resource_chunks_by_resource_id(a.id)
    assert repo.count_chunks_by_resource(a.id) == 0
    assert repo.count_chunks_by_resource(b.id) == 1


# ------------------------------------------------------------------
# Transactions
# ------------------------------------------------------------------

def test_transaction_commits(repo, tmp_db):
    with repo.transaction():
        created = _create(repo)
        repo.create_resource_chunks(created.id, _pairs("a"))
    assert not tmp_db.in_transaction
    assert repo.count_chunks_by_resource(created.id) == 1


def test_transaction_rolls_back_on_error(repo):
    created = _create(repo)
    repo.create_resource_chunks(created.id, _pairs("old"))

    with pytest.raises(RuntimeError):
        with repo.transaction():
            repo.delete_resource_chunks_by_resource_id(created.id)
            repo.update_resource_content_hash(created.id, "h2")
            raise RuntimeError("embedding exploded")

    current = repo.get_resource(created.id)
    assert current.content_hash == "h1"
    assert [c.content for c in repo.get_resource_chunks(created.id)] == ["old"]


def test_transaction_rolls_back_on_storage_error(repo):
    with pytest.raises(DuplicateResourceError):
        with repo.transaction():
            _create(repo, uri="new.md")
            _create(repo, uri="new.md")
    assert repo.get_resource_by_source_uri("new.md") is None


def test_nested_transaction_joins_outer(repo):
    with pytest.raises(RuntimeError):
        with repo.transaction():
            _create(repo, uri="outer.md")
            with repo.transaction():
                _create(repo, uri="inner.md")
            raise RuntimeError("abort")
    assert repo.list_resources() == []


def test_transaction_changes_visible_to_second_connection_only_after_commit(repo, tmp_db, tmp_path):
    from ragindex.db.connection import Database

    other = Database(tmp_path / ".ragindex.db").connect()
    try:
        with repo.transaction():
            _create(repo, uri="a.md")
            seen = other.execute("SELECT COUNT(*) FROM resource").fetchall()[0][0]
            assert seen == 0
        seen = other.execute("SELECT COUNT(*) FROM resource").fetchall()[0][0]
        assert seen == 1
    finally:
        other.close()


def test_storage_error_wraps_sqlite_error(tmp_path):
    conn = sqlite3.connect(tmp_path / "empty.db")
    try:
        with pytest.raises(StorageError, match="a.md"):
            Repository(conn).get_resource_by_source_uri("a.md")
    finally:
        conn.close()
