"""Filesystem data source — one document per matching file under a root directory."""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Generator, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from ragindex.models import IndexableDocument, SourceType
from ragindex.sources.base import DataSource, DataSourceOptions

LOGGER = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = (".md", ".mdx", ".markdown")


@dataclass
class FileSystemOptions:
    """Settings for FileSystemDataSource.

    Attributes:
        root: Directory to walk.
        extensions: File suffixes to include (case-insensitive).
        recursive: Descend into subdirectories.
        exclude: fnmatch patterns matched against entry names; matches are
            skipped (directories included).
        max_depth: Deepest subdirectory level visited when recursive.
        max_files: Optional cap on the number of documents yielded.
    """

    root: Path | str
    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    recursive: bool = True
    exclude: list[str] = field(default_factory=list)
    max_depth: int = 10
    max_files: int | None = None


class FileSystemDataSource(DataSource):
    """Walk a directory tree in sorted order and yield each supported file.

    Files are read as bytes and decoded as strict UTF-8, so the document's
    content hash equals the SHA-256 of the file on disk. Files that cannot be
    read or decoded are skipped with a warning.
    """

    def __init__(self, options: FileSystemOptions) -> None:
        super().__init__(SourceType.FILE)
        self.options = options
        self.root = Path(options.root)
        self.extensions = {_normalise_ext(e) for e in options.extensions if e.strip()}

    def validate(self) -> bool:
        if not self.extensions:
            LOGGER.error("No supported extensions configured for %s", self.root)
            return False
        if not self.root.exists():
            LOGGER.error("Directory does not exist: %s", self.root)
            return False
        if not self.root.is_dir():
            LOGGER.error("Not a directory: %s", self.root)
            return False
        return True

    def discover_documents(
        self, options: DataSourceOptions | None = None
    ) -> Generator[IndexableDocument, None, None]:
        exclude = self._option(options, "exclude", self.options.exclude)
        max_files = self._option(options, "max_files", self.options.max_files)

        yielded = 0
        for path in self._scan_dir(self.root, exclude=exclude, depth=0):
            if max_files is not None and yielded >= max_files:
                LOGGER.info("Reached max_files=%d under %s", max_files, self.root)
                return
            document = self._read_document(path)
            if document is None:
                continue
            yielded += 1
            yield document

    # ------------------------------------------------------------------
    # Directory walk
    # ------------------------------------------------------------------

    def _scan_dir(self, directory: Path, exclude: list[str], depth: int) -> Iterator[Path]:
        """Yield supported files in *directory*, depth-first in name order."""
        try:
            entries = sorted(directory.iterdir())
        except OSError as exc:
            LOGGER.warning("Cannot list directory %s: %s", directory, exc)
            return
        for entry in entries:
            if any(fnmatch.fnmatch(entry.name, pat) for pat in exclude):
                continue
            if entry.is_file():
                if entry.suffix.lower() in self.extensions:
                    yield entry
            elif entry.is_dir() and self.options.recursive and depth < self.options.max_depth:
                yield from self._scan_dir(entry, exclude=exclude, depth=depth + 1)

    @staticmethod
    def _read_document(path: Path) -> IndexableDocument | None:
        try:
            raw = path.read_bytes()
            stat = path.stat()
        except OSError as exc:
            LOGGER.warning("Skipping unreadable file %s: %s", path, exc)
            return None
        try:
            content = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            LOGGER.warning("Skipping non-UTF-8 file %s: %s", path, exc)
            return None

        return IndexableDocument(
            source_uri=str(path),
            source_type=SourceType.FILE,
            content=content,
            metadata={
                "title": path.stem,
                "last_modified": datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                "file_size": stat.st_size,
            },
        )


def _normalise_ext(ext: str) -> str:
    ext = ext.strip().lower()
    return ext if ext.startswith(".") else f".{ext}"
