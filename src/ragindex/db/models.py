"""Persistent records of the index database."""

from __future__ import annotations

from dataclasses import dataclass, field

from ragindex.models import Embedding, SourceType


@dataclass
class Resource:
    id: str
    source_type: SourceType
    source_uri: str
    content_hash: str
    created_at: str | None = None
    updated_at: str | None = None


@dataclass
class ResourceChunk:
    resource_id: str
    chunk_index: int
    content: str
    embedding: Embedding = field(default_factory=list)
    id: int | None = None  # set after insert; None for unsaved chunks
