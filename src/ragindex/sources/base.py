"""Base data source interface for all document producers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Generator
from typing import Any

from ragindex.models import IndexableDocument, SourceType

DataSourceOptions = dict[str, Any]


class DataSource(ABC):
    """Abstract base for all data sources.

    Subclasses implement ``validate()`` and ``discover_documents()``.
    Discovery is a single-pass generator: callers may stop iterating at any
    point, and every document already yielded stays complete and usable.
    """

    def __init__(self, source_type: SourceType) -> None:
        self.source_type = source_type

    @abstractmethod
    def validate(self) -> bool:
        """Return True if the source is configured correctly and reachable.

        Expected configuration problems are logged and reported as False;
        this method does not raise for them.
        """

    @abstractmethod
    def discover_documents(
        self, options: DataSourceOptions | None = None
    ) -> Generator[IndexableDocument, None, None]:
        """Yield indexable documents one at a time.

        Args:
            options: Per-run overrides for settings given at construction.

        Returns:
            Generator of fully formed IndexableDocument objects, in the order
            the source enumerates them.
        """

    def get_source_type(self) -> SourceType:
        return self.source_type

    @staticmethod
    def _option(options: DataSourceOptions | None, key: str, default: Any) -> Any:
        """Return ``options[key]`` when present and not None, else *default*."""
        if options and options.get(key) is not None:
            return options[key]
        return default
