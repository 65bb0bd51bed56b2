"""Indexing pipeline: change detection → chunking → embedding → storage."""

from __future__ import annotations

import logging
from contextlib import closing
from dataclasses import dataclass, field

from ragindex.db.repository import Repository
from ragindex.errors import ChunkingError, ConfigurationError, EmbeddingError, StorageError
from ragindex.ingest.embedder import EmbeddingGenerator
from ragindex.ingest.splitting import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    split_document_into_chunks,
)
from ragindex.models import DocumentChunk, IndexableDocument
from ragindex.sources.base import DataSource, DataSourceOptions

LOGGER = logging.getLogger(__name__)

CREATED = "created"
UPDATED = "updated"
UNCHANGED = "unchanged"
PLANNED = "planned"


def should_reindex(existing_hash: str | None, new_hash: str) -> bool:
    """True unless a stored hash exists and equals *new_hash*."""
    return existing_hash != new_hash


@dataclass
class DocumentResult:
    source_uri: str
    status: str
    chunk_count: int = 0


@dataclass
class IndexStats:
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    planned: int = 0
    chunks: int = 0
    failures: list[tuple[str, Exception]] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def processed(self) -> int:
        return self.created + self.updated + self.unchanged + self.planned + self.failed

    def record(self, result: DocumentResult) -> None:
        if result.status == CREATED:
            self.created += 1
        elif result.status == UPDATED:
            self.updated += 1
        elif result.status == PLANNED:
            self.planned += 1
        else:
            self.unchanged += 1
        self.chunks += result.chunk_count


class Indexer:
    """Coordinates change detection, chunking, embedding and persistence.

    Each changed document is written in its own transaction: old chunks are
    deleted, the resource row is created or its hash updated, and the new
    chunk set is inserted. A failure at any step leaves the resource as it was.
    """

    def __init__(
        self,
        repo: Repository,
        embedder: EmbeddingGenerator,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
        separators: list[str] | None = None,
    ) -> None:
        self.repo = repo
        self.embedder = embedder
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.separators = separators

    def index_source(
        self,
        source: DataSource,
        options: DataSourceOptions | None = None,
        *,
        fail_fast: bool = False,
        dry_run: bool = False,
    ) -> IndexStats:
        """Index every document *source* discovers.

        Per-document chunking, embedding and storage errors are recorded in
        ``IndexStats.failures`` and the run continues, unless *fail_fast* is
        set, in which case the first one is re-raised. A manifest that cannot
        be fetched always propagates.

        Raises:
            ConfigurationError: if ``source.validate()`` fails.
        """
        if not source.validate():
            raise ConfigurationError(
                f"Invalid {source.get_source_type().value} data source configuration"
            )

        stats = IndexStats()
        with closing(source.discover_documents(options)) as documents:
            for document in documents:
                try:
                    if dry_run:
                        result = self.plan_document(document)
                    else:
                        result = self.index_document(document)
                except (ChunkingError, EmbeddingError, StorageError) as exc:
                    LOGGER.error("Failed to index %s: %s", document.source_uri, exc)
                    stats.failures.append((document.source_uri, exc))
                    if fail_fast:
                        raise
                    continue
                stats.record(result)
        return stats

    def index_document(self, document: IndexableDocument) -> DocumentResult:
        """Bring the stored copy of *document* up to date.

        Unchanged content costs one lookup and nothing else. Errors propagate.
        """
        existing = self.repo.get_resource_by_source_uri(document.source_uri)
        if not should_reindex(existing.content_hash if existing else None, document.content_hash):
            LOGGER.debug("Unchanged: %s", document.source_uri)
            return DocumentResult(document.source_uri, UNCHANGED)

        chunks = self._chunk(document)
        chunks_with_embeddings = self.embedder.embed_chunks(chunks)

        with self.repo.transaction():
            # Re-read under the write lock: another writer may have indexed
            # this URI since the lookup above.
            current = self.repo.get_resource_by_source_uri(document.source_uri)
            if current is None:
                resource = self.repo.create_resource(
                    document.source_type, document.source_uri, document.content_hash
                )
                status = CREATED
            elif not should_reindex(current.content_hash, document.content_hash):
                return DocumentResult(document.source_uri, UNCHANGED)
            else:
                self.repo.delete_resource_chunks_by_resource_id(current.id)
                self.repo.update_resource_content_hash(current.id, document.content_hash)
                resource = current
                status = UPDATED
            self.repo.create_resource_chunks(resource.id, chunks_with_embeddings)

        LOGGER.info("Indexed %s (%s, %d chunks)", document.source_uri, status, len(chunks))
        return DocumentResult(document.source_uri, status, len(chunks))

    def plan_document(self, document: IndexableDocument) -> DocumentResult:
        """Report what ``index_document`` would do, without embedding or writing."""
        existing = self.repo.get_resource_by_source_uri(document.source_uri)
        if not should_reindex(existing.content_hash if existing else None, document.content_hash):
            return DocumentResult(document.source_uri, UNCHANGED)
        return DocumentResult(document.source_uri, PLANNED, len(self._chunk(document)))

    def _chunk(self, document: IndexableDocument) -> list[DocumentChunk]:
        return split_document_into_chunks(
            document,
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
            separators=self.separators,
        )
