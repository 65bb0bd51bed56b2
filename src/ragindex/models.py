"""Value types that flow through the indexing pipeline."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

Embedding = list[float]


class SourceType(str, Enum):
    """Which kind of data source produced a document."""

    FILE = "file"
    URL = "url"


def compute_content_hash(content: str) -> str:
    """SHA-256 hex digest of the UTF-8 encoding of *content*."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class IndexableDocument:
    """A document produced by a data source, ready for change detection.

    ``content_hash`` is derived from ``content`` on construction and cannot be
    passed in, so the two never disagree.
    """

    source_uri: str
    source_type: SourceType
    content: str
    section_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    content_hash: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "content_hash", compute_content_hash(self.content))

    @property
    def title(self) -> str | None:
        return self.metadata.get("title")


@dataclass
class DocumentChunk:
    content: str
    start_index: int
    end_index: int
