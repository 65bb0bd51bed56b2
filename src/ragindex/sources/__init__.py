"""Data sources — document producers for the indexer."""

from ragindex.sources.base import DataSource, DataSourceOptions
from ragindex.sources.filesystem import FileSystemDataSource, FileSystemOptions
from ragindex.sources.manifest import ManifestDataSource, ManifestOptions

__all__ = [
    "DataSource",
    "DataSourceOptions",
    "FileSystemDataSource",
    "FileSystemOptions",
    "ManifestDataSource",
    "ManifestOptions",
]
