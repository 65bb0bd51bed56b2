"""ragindex — incremental document indexing for retrieval-augmented generation."""

from ragindex.errors import (
    ChunkingError,
    ConfigurationError,
    DownloadError,
    DuplicateResourceError,
    EmbeddingError,
    IndexerError,
    ManifestFetchError,
    StorageError,
)
from ragindex.models import DocumentChunk, Embedding, IndexableDocument, SourceType

__all__ = [
    "ChunkingError",
    "ConfigurationError",
    "DocumentChunk",
    "DownloadError",
    "DuplicateResourceError",
    "Embedding",
    "EmbeddingError",
    "IndexableDocument",
    "IndexerError",
    "ManifestFetchError",
    "SourceType",
    "StorageError",
]
