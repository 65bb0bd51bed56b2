"""ragindex ingest pipeline — chunkers and embedding generator."""

from ragindex.ingest.base import BaseChunker
from ragindex.ingest.embedder import EmbeddingConfig, EmbeddingGenerator
from ragindex.ingest.markdown import MarkdownChunker
from ragindex.ingest.plaintext import RecursiveChunker
from ragindex.ingest.splitting import chunker_for, split_document_into_chunks

__all__ = [
    "BaseChunker",
    "EmbeddingConfig",
    "EmbeddingGenerator",
    "MarkdownChunker",
    "RecursiveChunker",
    "chunker_for",
    "split_document_into_chunks",
]
