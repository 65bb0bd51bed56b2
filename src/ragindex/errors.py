"""Exception hierarchy for the indexing pipeline.

Source-level failures (a single linked file that cannot be downloaded) are
logged and skipped by the data source itself. Everything that goes wrong while
indexing one document (chunking, embedding, storage) propagates to the caller.
"""

from __future__ import annotations


class IndexerError(Exception):
    """Base class for all ragindex errors."""


class ConfigurationError(IndexerError, ValueError):
    """Raised when a config file or data source setting is invalid."""


class ManifestFetchError(IndexerError):
    """Raised when the root manifest of a manifest source cannot be read."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch manifest '{url}': {reason}")
        self.url = url
        self.reason = reason


class DownloadError(IndexerError):
    """Raised by the transport when a URL cannot be downloaded."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Download failed for '{url}': {reason}")
        self.url = url
        self.reason = reason


class ChunkingError(IndexerError):
    """Raised when a document cannot be split into chunks."""

    def __init__(self, source_uri: str, reason: str) -> None:
        super().__init__(f"Failed to split document '{source_uri}': {reason}")
        self.source_uri = source_uri


class EmbeddingError(IndexerError):
    """Raised when the embedding model call fails or returns unusable output."""


class StorageError(IndexerError):
    """Raised when a database operation fails. The transaction is rolled back."""


class DuplicateResourceError(StorageError):
    """Raised when a resource with the same source URI already exists."""

    def __init__(self, source_uri: str) -> None:
        super().__init__(f"Resource already exists for '{source_uri}'")
        self.source_uri = source_uri
