"""Repository pattern for all index database operations.

Single interface for resources and their chunk/embedding sets. Every method
is atomic on its own: outside ``transaction()`` it commits (or rolls back)
immediately; inside, it joins the enclosing transaction.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

from ragindex.db.models import Resource, ResourceChunk
from ragindex.errors import DuplicateResourceError, StorageError
from ragindex.models import DocumentChunk, Embedding, SourceType

LOGGER = logging.getLogger(__name__)

_NOW = "strftime('%Y-%m-%d %H:%M:%f', 'now')"
_RESOURCE_COLUMNS = "id, source_type, source_uri, content_hash, created_at, updated_at"


class Repository:
    """Data access layer for resources and resource chunks.

    Wraps an open sqlite3.Connection. The connection is owned by the caller
    and must be closed after use.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialise with an open database connection.

        Args:
            conn: An open sqlite3.Connection with sqlite-vec loaded and schema
                initialised (see ragindex.db.schema.initialize).
        """
        self._conn = conn
        self._in_transaction = False

    @contextmanager
    def transaction(self) -> Iterator[Repository]:
        """Run the enclosed operations as one write transaction.

        Uses ``BEGIN IMMEDIATE`` so the write lock is held from the first
        read, which makes check-then-write sequences safe across processes.
        Commits on normal exit and rolls back on any exception. Nested calls
        join the outer transaction.
        """
        if self._in_transaction:
            yield self
            return

        try:
            if self._conn.in_transaction:
                self._conn.commit()
            self._conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as exc:
            LOGGER.error("Failed to begin transaction: %s", exc)
            raise StorageError(f"Failed to begin transaction: {exc}") from exc

        self._in_transaction = True
        try:
            yield self
        except BaseException:
            self._conn.rollback()
            raise
        else:
            try:
                self._conn.commit()
            except sqlite3.Error as exc:
                self._conn.rollback()
                LOGGER.error("Failed to commit transaction: %s", exc)
                raise StorageError(f"Failed to commit transaction: {exc}") from exc
        finally:
            self._in_transaction = False

    @contextmanager
    def _statement(self, action: str, ident: str) -> Iterator[None]:
        """Commit after the block unless inside transaction(); map sqlite errors."""
        try:
            yield
            if not self._in_transaction:
                self._conn.commit()
        except sqlite3.Error as exc:
            if not self._in_transaction:
                self._conn.rollback()
            LOGGER.error("Failed to %s (%s): %s", action, ident, exc)
            raise StorageError(f"Failed to {action} ({ident}): {exc}") from exc

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def get_resource(self, resource_id: str) -> Resource | None:
        with self._statement("get resource", resource_id):
            row = self._conn.execute(
                f"SELECT {_RESOURCE_COLUMNS} FROM resource WHERE id = ?", (resource_id,)
            ).fetchone()
        return _row_to_resource(row) if row else None

    def get_resource_by_source_uri(self, source_uri: str) -> Resource | None:
        """Return the resource indexed from *source_uri*, or None."""
        with self._statement("get resource by source URI", source_uri):
            row = self._conn.execute(
                f"SELECT {_RESOURCE_COLUMNS} FROM resource WHERE source_uri = ?",
                (source_uri,),
            ).fetchone()
        return _row_to_resource(row) if row else None

    def get_resources_by_source_type(self, source_type: SourceType) -> list[Resource]:
        with self._statement("get resources by source type", SourceType(source_type).value):
            rows = self._conn.execute(
                f"SELECT {_RESOURCE_COLUMNS} FROM resource WHERE source_type = ? ORDER BY source_uri",
                (SourceType(source_type).value,),
            ).fetchall()
        return [_row_to_resource(r) for r in rows]

    def list_resources(self) -> list[Resource]:
        """Return all resources ordered by source URI."""
        with self._statement("list resources", "*"):
            rows = self._conn.execute(
                f"SELECT {_RESOURCE_COLUMNS} FROM resource ORDER BY source_uri"
            ).fetchall()
        return [_row_to_resource(r) for r in rows]

    def create_resource(
        self, source_type: SourceType, source_uri: str, content_hash: str
    ) -> Resource:
        """Insert a new resource and return it.

        Raises:
            DuplicateResourceError: if *source_uri* is already indexed.
        """
        resource_id = str(uuid.uuid4())
        try:
            with self._statement("create resource", source_uri):
                self._conn.execute(
                    "INSERT INTO resource (id, source_type, source_uri, content_hash) VALUES (?, ?, ?, ?)",
                    (resource_id, SourceType(source_type).value, source_uri, content_hash),
                )
        except StorageError as exc:
            if "UNIQUE constraint failed: resource.source_uri" in str(exc.__cause__):
                raise DuplicateResourceError(source_uri) from exc.__cause__
            raise
        resource = self.get_resource(resource_id)
        assert resource is not None
        return resource

    def update_resource_content_hash(self, resource_id: str, content_hash: str) -> Resource | None:
        """Set a new content hash and refresh ``updated_at``.

        Returns the updated resource, or None if *resource_id* does not exist.
        """
        with self._statement("update resource content hash", resource_id):
            self._conn.execute(
                f"UPDATE resource SET content_hash = ?, updated_at = {_NOW} WHERE id = ?",
                (content_hash, resource_id),
            )
        return self.get_resource(resource_id)

    def delete_resource(self, resource_id: str) -> None:
        """Delete a resource. Its chunks are removed by ON DELETE CASCADE."""
        with self._statement("delete resource", resource_id):
            self._conn.execute("DELETE FROM resource WHERE id = ?", (resource_id,))

    def delete_resource_by_source_uri(self, source_uri: str) -> bool:
        """Delete the resource for *source_uri*. Returns False if none existed."""
        with self._statement("delete resource by source URI", source_uri):
            cur = self._conn.execute("DELETE FROM resource WHERE source_uri = ?", (source_uri,))
        return cur.rowcount > 0

    # ------------------------------------------------------------------
    # Resource chunks
    # ------------------------------------------------------------------

    def create_resource_chunks(
        self,
        resource_id: str,
        chunks_with_embeddings: list[tuple[DocumentChunk, Embedding]],
    ) -> int:
        """Bulk-insert one row per (chunk, embedding) pair. Returns the row count."""
        rows = [
            (resource_id, i, chunk.content, json.dumps(embedding))
            for i, (chunk, embedding) in enumerate(chunks_with_embeddings)
        ]
        if not rows:
            return 0
        with self._statement("create resource chunks", resource_id):
            self._conn.executemany(
                """
                INSERT INTO resource_chunk (resource_id, chunk_index, content, embedding)
                VALUES (?, ?, ?, vec_f32(?))
                """,
                rows,
            )
        return len(rows)

    def get_resource_chunks(self, resource_id: str) -> list[ResourceChunk]:
        """Return the chunks of *resource_id* in chunk order, embeddings decoded."""
        with self._statement("get resource chunks", resource_id):
            rows = self._conn.execute(
                """
                SELECT id, resource_id, chunk_index, content, vec_to_json(embedding) AS embedding
                FROM resource_chunk WHERE resource_id = ? ORDER BY chunk_index
                """,
                (resource_id,),
            ).fetchall()
        return [_row_to_chunk(r) for r in rows]

    def count_chunks_by_resource(self, resource_id: str) -> int:
        with self._statement("count resource chunks", resource_id):
            return self._conn.execute(
                "SELECT COUNT(*) FROM resource_chunk WHERE resource_id = ?", (resource_id,)
            ).fetchone()[0]

    def delete_resource_chunks_by_resource_id(self, resource_id: str) -> int:
        """Delete every chunk of *resource_id*. Returns the number removed."""
        with self._statement("delete resource chunks", resource_id):
            cur = self._conn.execute(
                "DELETE FROM resource_chunk WHERE resource_id = ?", (resource_id,)
            )
        return cur.rowcount


# ------------------------------------------------------------------
# Row → model helpers
# ------------------------------------------------------------------

def _row_to_resource(row: sqlite3.Row) -> Resource:
    return Resource(
        id=row["id"],
        source_type=SourceType(row["source_type"]),
        source_uri=row["source_uri"],
        content_hash=row["content_hash"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_chunk(row: sqlite3.Row) -> ResourceChunk:
    return ResourceChunk(
        id=row["id"],
        resource_id=row["resource_id"],
        chunk_index=row["chunk_index"],
        content=row["content"],
        embedding=json.loads(row["embedding"]),
    )
