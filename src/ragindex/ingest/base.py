"""Base chunker interface for all ragindex content types."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from langchain_text_splitters import TextSplitter

from ragindex.errors import ChunkingError
from ragindex.models import DocumentChunk, IndexableDocument

if TYPE_CHECKING:
    from langchain_core.documents import Document

LOGGER = logging.getLogger(__name__)


class BaseChunker(ABC):
    """Abstract base for all chunkers.

    Subclasses implement ``_build_splitter()``; ``chunk()`` runs the splitter
    and maps its output to DocumentChunk objects with character offsets into
    the original content.

    Sizes are measured in characters.
    """

    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 200) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if not 0 <= chunk_overlap < chunk_size:
            raise ValueError("chunk_overlap must be in [0, chunk_size)")
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    @property
    def stride(self) -> int:
        return self.chunk_size - self.chunk_overlap

    @abstractmethod
    def _build_splitter(self) -> TextSplitter:
        """Return a splitter configured with ``add_start_index=True``."""

    def chunk(self, document: IndexableDocument) -> list[DocumentChunk]:
        """Split *document* into ordered, overlapping chunks.

        Raises:
            ChunkingError: if the splitter fails. No partial result is returned.
        """
        if not document.content.strip():
            return []
        try:
            pieces = self._build_splitter().create_documents([document.content])
        except Exception as exc:
            LOGGER.error("Failed to split document %s: %s", document.source_uri, exc)
            raise ChunkingError(document.source_uri, str(exc)) from exc
        return self._make_chunks(pieces)

    def _make_chunks(self, pieces: list[Document]) -> list[DocumentChunk]:
        """Convert splitter output into DocumentChunks.

        The splitter records where it found each piece in the source text.
        When it could not locate a piece (start_index -1 or missing), the
        offset falls back to ``index * stride``.
        """
        chunks: list[DocumentChunk] = []
        for i, piece in enumerate(pieces):
            start = piece.metadata.get("start_index", -1)
            if start is None or start < 0:
                start = i * self.stride
            text = piece.page_content
            chunks.append(DocumentChunk(content=text, start_index=start, end_index=start + len(text)))
        return chunks
