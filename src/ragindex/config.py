"""ragindex configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site — not in this module)
  2. Environment variables  (RAGINDEX_EMBEDDING_MODEL, RAGINDEX_DB)
  3. Per-project ragindex.yaml
  4. Global ~/.ragindex/config.yaml  (no API keys)
  5. Hardcoded defaults

Global config must never contain API keys; use environment variables instead.
All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ragindex.errors import ConfigurationError
from ragindex.ingest.plaintext import DEFAULT_SEPARATORS
from ragindex.sources.filesystem import DEFAULT_EXTENSIONS

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".ragindex"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "ragindex.yaml"

# Key names that suggest a credential. Does NOT match max_tokens and friends.
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"
    r"|_token$"
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_KNOWN_SECTIONS: frozenset[str] = frozenset(
    ["database", "embedding", "chunking", "filesystem", "manifest"]
)


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class DatabaseCfg:
    """Index database location (ragindex.yaml: database:)."""

    path: str = ".ragindex.db"


@dataclass
class EmbeddingCfg:
    """Embedding model configuration (ragindex.yaml: embedding:)."""

    model: str = "openai/text-embedding-3-small"
    dimensions: int | None = 1536
    batch_size: int = 96


@dataclass
class ChunkingCfg:
    """Chunk size and overlap in characters (ragindex.yaml: chunking:)."""

    chunk_size: int = 1000
    chunk_overlap: int = 200
    separators: list[str] = field(default_factory=lambda: list(DEFAULT_SEPARATORS))


@dataclass
class FileSystemCfg:
    """Defaults for filesystem sources (ragindex.yaml: filesystem:)."""

    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    recursive: bool = True
    exclude: list[str] = field(default_factory=list)
    max_files: int | None = None


@dataclass
class ManifestCfg:
    """Defaults for llms.txt manifest sources (ragindex.yaml: manifest:).

    Attributes:
        concurrency: Reserved; downloads are sequential.
        delay: Milliseconds between consecutive downloads.
        max_files: Optional cap on linked files per run.
        max_depth: Reserved; only direct manifest links are indexed.
        allowed_domains: Reserved.
    """

    concurrency: int = 4
    delay: int = 250
    max_files: int | None = None
    max_depth: int | None = None
    allowed_domains: list[str] = field(default_factory=list)


@dataclass
class IndexerConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    database: DatabaseCfg = field(default_factory=DatabaseCfg)
    embedding: EmbeddingCfg = field(default_factory=EmbeddingCfg)
    chunking: ChunkingCfg = field(default_factory=ChunkingCfg)
    filesystem: FileSystemCfg = field(default_factory=FileSystemCfg)
    manifest: ManifestCfg = field(default_factory=ManifestCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigurationError if *data* contains any API-key-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ConfigurationError(
                        f"Global config '{source}' contains a forbidden key '{full}'.\n"
                        f"  API keys must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export {str(k).upper().replace('-', '_')}=<value>"
                    )
                _scan(v, full)

    _scan(data, "")


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def _validate(cfg: IndexerConfig) -> None:
    ch = cfg.chunking
    if ch.chunk_size < 1:
        raise ConfigurationError(f"chunking.chunk_size must be >= 1, got {ch.chunk_size}")
    if not 0 <= ch.chunk_overlap < ch.chunk_size:
        raise ConfigurationError(
            f"chunking.chunk_overlap must be in [0, chunk_size), got {ch.chunk_overlap}"
        )
    if cfg.embedding.batch_size < 1:
        raise ConfigurationError(
            f"embedding.batch_size must be >= 1, got {cfg.embedding.batch_size}"
        )
    if cfg.manifest.delay < 0:
        raise ConfigurationError(f"manifest.delay must be >= 0, got {cfg.manifest.delay}")
    if cfg.manifest.concurrency < 1:
        raise ConfigurationError(
            f"manifest.concurrency must be >= 1, got {cfg.manifest.concurrency}"
        )


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


def _cfg_from_dict(data: dict[str, Any]) -> IndexerConfig:
    """Build an *IndexerConfig* from a merged raw YAML dict."""
    cfg = IndexerConfig()

    try:
        if "database" in data:
            d = data["database"]
            cfg.database = DatabaseCfg(path=str(d.get("path", cfg.database.path)))

        if "embedding" in data:
            e = data["embedding"]
            cfg.embedding = EmbeddingCfg(
                model=str(e.get("model", cfg.embedding.model)),
                dimensions=_optional_int(e.get("dimensions", cfg.embedding.dimensions)),
                batch_size=int(e.get("batch_size", cfg.embedding.batch_size)),
            )

        if "chunking" in data:
            c = data["chunking"]
            cfg.chunking = ChunkingCfg(
                chunk_size=int(c.get("chunk_size", cfg.chunking.chunk_size)),
                chunk_overlap=int(c.get("chunk_overlap", cfg.chunking.chunk_overlap)),
                separators=[str(s) for s in c.get("separators", cfg.chunking.separators)],
            )

        if "filesystem" in data:
            f = data["filesystem"]
            cfg.filesystem = FileSystemCfg(
                extensions=[str(x) for x in f.get("extensions", cfg.filesystem.extensions)],
                recursive=bool(f.get("recursive", cfg.filesystem.recursive)),
                exclude=[str(x) for x in f.get("exclude", cfg.filesystem.exclude)],
                max_files=_optional_int(f.get("max_files", cfg.filesystem.max_files)),
            )

        if "manifest" in data:
            m = data["manifest"]
            cfg.manifest = ManifestCfg(
                concurrency=int(m.get("concurrency", cfg.manifest.concurrency)),
                delay=int(m.get("delay", cfg.manifest.delay)),
                max_files=_optional_int(m.get("max_files", cfg.manifest.max_files)),
                max_depth=_optional_int(m.get("max_depth", cfg.manifest.max_depth)),
                allowed_domains=[
                    str(x) for x in m.get("allowed_domains", cfg.manifest.allowed_domains)
                ],
            )
    except (TypeError, ValueError, AttributeError) as exc:
        raise ConfigurationError(f"Invalid config value: {exc}") from exc

    return cfg


def _apply_env_overrides(cfg: IndexerConfig) -> IndexerConfig:
    """Apply RAGINDEX_* environment variable overrides (layer 2)."""
    if model := os.environ.get("RAGINDEX_EMBEDDING_MODEL"):
        cfg.embedding.model = model
    if db_path := os.environ.get("RAGINDEX_DB"):
        cfg.database.path = db_path
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> IndexerConfig:
    """Load and return a merged *IndexerConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *ragindex.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ConfigurationError: If global config contains API-key-like fields, or
            a value is malformed or out of range.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    # Layer 1: global config
    if global_path.exists():
        raw_global = yaml.safe_load(global_path.read_text(encoding="utf-8")) or {}
        _check_no_api_keys(raw_global, global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    # Layer 2: per-project config
    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = yaml.safe_load(project_cfg_path.read_text(encoding="utf-8")) or {}
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _cfg_from_dict(merged)

    # Layer 3: env var overrides
    cfg = _apply_env_overrides(cfg)

    _validate(cfg)
    return cfg
