"""Tests for the ragindex config loader."""

from __future__ import annotations

import warnings
from pathlib import Path

import pytest
import yaml

from ragindex.config import (
    ChunkingCfg,
    EmbeddingCfg,
    IndexerConfig,
    load_config,
)
from ragindex.errors import ConfigurationError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_yaml(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.dump(data), encoding="utf-8")


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    monkeypatch.delenv("RAGINDEX_EMBEDDING_MODEL", raising=False)
    monkeypatch.delenv("RAGINDEX_DB", raising=False)


@pytest.fixture
def no_global(tmp_path: Path) -> Path:
    return tmp_path / "nonexistent" / "config.yaml"


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


def test_load_config_defaults_no_files(tmp_path: Path, no_global: Path) -> None:
    """No config files → all hardcoded defaults."""
    cfg = load_config(project_dir=tmp_path, global_config_path=no_global)

    assert isinstance(cfg, IndexerConfig)
    assert cfg.database.path == ".ragindex.db"
    assert cfg.embedding == EmbeddingCfg()
    assert cfg.embedding.model == "openai/text-embedding-3-small"
    assert cfg.chunking == ChunkingCfg()
    assert cfg.chunking.chunk_size == 1000
    assert cfg.chunking.chunk_overlap == 200
    assert cfg.filesystem.extensions == [".md", ".mdx", ".markdown"]
    assert cfg.filesystem.recursive is True
    assert cfg.manifest.delay == 250
    assert cfg.manifest.concurrency == 4
    assert cfg.manifest.max_files is None


# ---------------------------------------------------------------------------
# Layering
# ---------------------------------------------------------------------------


def test_global_config_applied(tmp_path: Path) -> None:
    global_path = tmp_path / "global" / "config.yaml"
    _write_yaml(global_path, {"embedding": {"model": "ollama/nomic-embed-text", "dimensions": 768}})

    cfg = load_config(project_dir=tmp_path, global_config_path=global_path)

    assert cfg.embedding.model == "ollama/nomic-embed-text"
    assert cfg.embedding.dimensions == 768
    assert cfg.embedding.batch_size == 96


def test_project_overrides_global(tmp_path: Path) -> None:
    global_path = tmp_path / "global" / "config.yaml"
    _write_yaml(global_path, {"chunking": {"chunk_size": 800, "chunk_overlap": 100}})
    _write_yaml(tmp_path / "ragindex.yaml", {"chunking": {"chunk_size": 500}})

    cfg = load_config(project_dir=tmp_path, global_config_path=global_path)

    assert cfg.chunking.chunk_size == 500
    assert cfg.chunking.chunk_overlap == 100


def test_project_config_sections(tmp_path: Path, no_global: Path) -> None:
    _write_yaml(
        tmp_path / "ragindex.yaml",
        {
            "database": {"path": "index/docs.db"},
            "filesystem": {"extensions": [".md", ".txt"], "exclude": ["drafts"], "max_files": 20},
            "manifest": {"delay": 0, "max_files": 5, "allowed_domains": ["example.com"]},
        },
    )
    cfg = load_config(project_dir=tmp_path, global_config_path=no_global)

    assert cfg.database.path == "index/docs.db"
    assert cfg.filesystem.extensions == [".md", ".txt"]
    assert cfg.filesystem.exclude == ["drafts"]
    assert cfg.filesystem.max_files == 20
    assert cfg.manifest.delay == 0
    assert cfg.manifest.max_files == 5
    assert cfg.manifest.allowed_domains == ["example.com"]


def test_empty_project_file_uses_defaults(tmp_path: Path, no_global: Path) -> None:
    (tmp_path / "ragindex.yaml").write_text("", encoding="utf-8")
    cfg = load_config(project_dir=tmp_path, global_config_path=no_global)
    assert cfg.chunking.chunk_size == 1000


def test_env_overrides(tmp_path: Path, no_global: Path, monkeypatch) -> None:
    _write_yaml(tmp_path / "ragindex.yaml", {"embedding": {"model": "openai/text-embedding-3-large"}})
    monkeypatch.setenv("RAGINDEX_EMBEDDING_MODEL", "cohere/embed-english-v3.0")
    monkeypatch.setenv("RAGINDEX_DB", "/tmp/other.db")

    cfg = load_config(project_dir=tmp_path, global_config_path=no_global)

    assert cfg.embedding.model == "cohere/embed-english-v3.0"
    assert cfg.database.path == "/tmp/other.db"


def test_null_dimensions_disables_check(tmp_path: Path, no_global: Path) -> None:
    _write_yaml(tmp_path / "ragindex.yaml", {"embedding": {"dimensions": None}})
    cfg = load_config(project_dir=tmp_path, global_config_path=no_global)
    assert cfg.embedding.dimensions is None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def test_global_config_rejects_api_key(tmp_path: Path) -> None:
    global_path = tmp_path / "global" / "config.yaml"
    _write_yaml(global_path, {"embedding": {"api_key": "sk-secret"}})

    with pytest.raises(ConfigurationError, match="embedding.api_key"):
        load_config(project_dir=tmp_path, global_config_path=global_path)


def test_unknown_key_warns(tmp_path: Path, no_global: Path) -> None:
    _write_yaml(tmp_path / "ragindex.yaml", {"retrieval": {"top_k": 5}})
    with pytest.warns(UserWarning, match="retrieval"):
        load_config(project_dir=tmp_path, global_config_path=no_global)


def test_known_keys_do_not_warn(tmp_path: Path, no_global: Path) -> None:
    _write_yaml(tmp_path / "ragindex.yaml", {"chunking": {"chunk_size": 600}})
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        load_config(project_dir=tmp_path, global_config_path=no_global)


@pytest.mark.parametrize(
    "data,match",
    [
        ({"chunking": {"chunk_size": 0}}, "chunk_size"),
        ({"chunking": {"chunk_size": 100, "chunk_overlap": 100}}, "chunk_overlap"),
        ({"chunking": {"chunk_overlap": -1}}, "chunk_overlap"),
        ({"embedding": {"batch_size": 0}}, "batch_size"),
        ({"manifest": {"delay": -5}}, "delay"),
        ({"manifest": {"concurrency": 0}}, "concurrency"),
    ],
)
def test_out_of_range_values_rejected(tmp_path: Path, no_global: Path, data, match) -> None:
    _write_yaml(tmp_path / "ragindex.yaml", data)
    with pytest.raises(ConfigurationError, match=match):
        load_config(project_dir=tmp_path, global_config_path=no_global)


def test_malformed_value_rejected(tmp_path: Path, no_global: Path) -> None:
    _write_yaml(tmp_path / "ragindex.yaml", {"chunking": {"chunk_size": "big"}})
    with pytest.raises(ConfigurationError, match="Invalid config value"):
        load_config(project_dir=tmp_path, global_config_path=no_global)


def test_configuration_error_is_value_error(tmp_path: Path, no_global: Path) -> None:
    _write_yaml(tmp_path / "ragindex.yaml", {"chunking": {"chunk_size": 0}})
    with pytest.raises(ValueError):
        load_config(project_dir=tmp_path, global_config_path=no_global)
