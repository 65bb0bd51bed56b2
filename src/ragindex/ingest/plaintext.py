"""Recursive chunker for everything that is not Markdown."""

from __future__ import annotations

from langchain_text_splitters import RecursiveCharacterTextSplitter, TextSplitter

from ragindex.ingest.base import BaseChunker

DEFAULT_SEPARATORS: list[str] = ["\n\n", "\n", " ", ""]


class RecursiveChunker(BaseChunker):
    """Split on the coarsest separator that yields pieces within ``chunk_size``.

    Separators are tried in order: paragraph break, line break, word break,
    then single characters.
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        separators: list[str] | None = None,
    ) -> None:
        super().__init__(chunk_size=chunk_size, chunk_overlap=chunk_overlap)
        self.separators = list(separators) if separators is not None else list(DEFAULT_SEPARATORS)

    def _build_splitter(self) -> TextSplitter:
        return RecursiveCharacterTextSplitter(
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
            separators=self.separators,
            length_function=len,
            add_start_index=True,
        )
