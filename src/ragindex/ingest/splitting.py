"""Chunker dispatch by document URI."""

from __future__ import annotations

from ragindex.ingest.base import BaseChunker
from ragindex.ingest.markdown import MarkdownChunker, is_markdown_uri
from ragindex.ingest.plaintext import RecursiveChunker
from ragindex.models import DocumentChunk, IndexableDocument

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_CHUNK_OVERLAP = 200


def chunker_for(
    source_uri: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    separators: list[str] | None = None,
) -> BaseChunker:
    """Markdown URIs (.md / .mdx / .markdown) get MarkdownChunker, the rest RecursiveChunker."""
    if is_markdown_uri(source_uri):
        return MarkdownChunker(chunk_size=chunk_size, chunk_overlap=chunk_overlap)
    return RecursiveChunker(chunk_size=chunk_size, chunk_overlap=chunk_overlap, separators=separators)


def split_document_into_chunks(
    document: IndexableDocument,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    separators: list[str] | None = None,
) -> list[DocumentChunk]:
    chunker = chunker_for(document.source_uri, chunk_size, chunk_overlap, separators)
    return chunker.chunk(document)
