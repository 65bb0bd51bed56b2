"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from ragindex.db.connection import Database
from ragindex.db.repository import Repository


@pytest.fixture
def tmp_db(tmp_path):
    """File-based DB in tmp_path with schema initialized, closed after test."""
    conn = Database(tmp_path / ".ragindex.db").open()
    yield conn
    conn.close()


@pytest.fixture
def repo(tmp_db):
    return Repository(tmp_db)


@pytest.fixture
def no_proxy_env(monkeypatch):
    """Keep urllib from routing real requests through an environment proxy."""
    for name in ("http_proxy", "https_proxy", "all_proxy", "HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY"):
        monkeypatch.delenv(name, raising=False)
