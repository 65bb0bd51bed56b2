"""Markdown chunker — block-aware splits via LangChain's MarkdownTextSplitter."""

from __future__ import annotations

from langchain_text_splitters import MarkdownTextSplitter, TextSplitter

from ragindex.ingest.base import BaseChunker

MARKDOWN_SUFFIXES: tuple[str, ...] = (".md", ".mdx", ".markdown")


class MarkdownChunker(BaseChunker):
    """Split Markdown on structural boundaries.

    Tries headings first, then code fences, horizontal rules, paragraphs,
    lines and words, so a chunk only breaks mid-block when a single block is
    larger than ``chunk_size``.
    """

    def _build_splitter(self) -> TextSplitter:
        return MarkdownTextSplitter(
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
            add_start_index=True,
        )


def is_markdown_uri(source_uri: str) -> bool:
    return source_uri.lower().endswith(MARKDOWN_SUFFIXES)
