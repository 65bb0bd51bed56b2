"""Manifest data source — index the Markdown files linked from an llms.txt.

Discovery flow:
  1. Fetch the llms.txt manifest (failure aborts discovery).
  2. Collect every section link whose path ends in .md / .mdx.
  3. Optionally truncate to ``max_files`` links, in manifest order.
  4. Download each file one by one; a failed download is logged and skipped.
  5. Sleep ``delay`` ms between downloads to go easy on the remote host.
"""

from __future__ import annotations

import logging
import time
import urllib.parse
from collections.abc import Generator
from dataclasses import dataclass, field

from ragindex.errors import DownloadError, ManifestFetchError
from ragindex.models import IndexableDocument, SourceType
from ragindex.sources.base import DataSource, DataSourceOptions
from ragindex.sources.http import Fetcher, fetch
from ragindex.sources.llms_txt import parse_llms_txt

LOGGER = logging.getLogger(__name__)

MANIFEST_SUFFIX = "/llms.txt"
CONTENT_SUFFIXES: tuple[str, ...] = (".md", ".mdx")


@dataclass
class ManifestOptions:
    """Settings for ManifestDataSource.

    Attributes:
        url: Manifest URL; must end with /llms.txt.
        concurrency: Accepted for forward compatibility. Downloads are
            always sequential.
        delay: Pause between consecutive downloads, in milliseconds.
        max_files: Optional cap on the number of linked files processed.
        max_depth: Reserved. Only links listed directly in the manifest are
            followed.
        allowed_domains: Reserved, see ``max_depth``.
        fetcher: Transport callable; defaults to ``ragindex.sources.http.fetch``.
    """

    url: str
    concurrency: int = 4
    delay: int = 250
    max_files: int | None = None
    max_depth: int | None = None
    allowed_domains: list[str] = field(default_factory=list)
    fetcher: Fetcher = fetch


@dataclass
class _ContentLink:
    url: str
    title: str
    section_name: str
    desc: str | None = None


class ManifestDataSource(DataSource):
    """Yield one document per Markdown file linked from an llms.txt manifest."""

    def __init__(self, options: ManifestOptions) -> None:
        super().__init__(SourceType.URL)
        self.options = options
        self.url = options.url
        self._fetch = options.fetcher

    def validate(self) -> bool:
        try:
            parsed = urllib.parse.urlparse(self.url)
            if parsed.scheme not in ("http", "https") or not parsed.hostname:
                raise ValueError("expected an absolute http(s) URL")
            _ = parsed.port  # ValueError on a non-numeric or out-of-range port
        except ValueError as exc:
            LOGGER.error("Invalid URL: %s (%s)", self.url, exc)
            return False
        if not parsed.path.endswith(MANIFEST_SUFFIX):
            LOGGER.error("URL must end with %s: %s", MANIFEST_SUFFIX, self.url)
            return False
        if self.options.concurrency < 1:
            LOGGER.error("concurrency must be >= 1, got %d", self.options.concurrency)
            return False
        if self.options.delay < 0:
            LOGGER.error("delay must be >= 0, got %d", self.options.delay)
            return False
        if self.options.max_depth is not None and self.options.max_depth > 1:
            LOGGER.warning(
                "max_depth=%d ignored: only links listed in %s are indexed",
                self.options.max_depth,
                self.url,
            )
        return True

    def discover_documents(
        self, options: DataSourceOptions | None = None
    ) -> Generator[IndexableDocument, None, None]:
        max_files = self._option(options, "max_files", self.options.max_files)
        delay = self._option(options, "delay", self.options.delay)

        manifest_text = self._fetch_manifest()
        links = self.get_content_links(manifest_text)

        if max_files is not None and len(links) > max_files:
            LOGGER.info(
                "Limiting processing to %d files out of %d found (%d dropped)",
                max_files,
                len(links),
                len(links) - max_files,
            )
            links = links[:max_files]

        for i, link in enumerate(links):
            if i > 0 and delay:
                time.sleep(delay / 1000)
            document = self._download(link)
            if document is not None:
                yield document

    # ------------------------------------------------------------------
    # Manifest
    # ------------------------------------------------------------------

    def _fetch_manifest(self) -> str:
        try:
            response = self._fetch(self.url)
        except DownloadError as exc:
            LOGGER.error("Error fetching manifest %s: %s", self.url, exc.reason)
            raise ManifestFetchError(self.url, exc.reason) from exc
        if not response.ok:
            reason = f"{response.status} {response.status_text}"
            LOGGER.error("Error fetching manifest %s: %s", self.url, reason)
            raise ManifestFetchError(self.url, reason)
        return response.text()

    def get_content_links(self, manifest_text: str) -> list[_ContentLink]:
        """Return all Markdown links in *manifest_text*, in manifest order.

        Relative URLs are resolved against the manifest URL.
        """
        manifest = parse_llms_txt(manifest_text)
        links: list[_ContentLink] = []
        for section_name, section_links in manifest.sections.items():
            for link in section_links:
                if not link.url or not link.title:
                    continue
                url = urllib.parse.urljoin(self.url, link.url)
                if not urllib.parse.urlparse(url).path.endswith(CONTENT_SUFFIXES):
                    continue
                links.append(
                    _ContentLink(
                        url=url,
                        title=link.title,
                        section_name=section_name,
                        desc=link.desc,
                    )
                )
        return links

    # ------------------------------------------------------------------
    # Linked files
    # ------------------------------------------------------------------

    def _download(self, link: _ContentLink) -> IndexableDocument | None:
        """Fetch one linked file. Returns None (after logging) on failure."""
        LOGGER.info("Downloading %s", link.url)
        try:
            response = self._fetch(link.url)
            if not response.ok:
                raise DownloadError(link.url, f"HTTP {response.status}: {response.status_text}")
        except DownloadError as exc:
            LOGGER.error("Download failed for %s: %s", link.url, exc.reason)
            return None

        return IndexableDocument(
            source_uri=link.url,
            source_type=SourceType.URL,
            content=response.text(),
            section_name=link.section_name,
            metadata={"title": link.title, "description": link.desc},
        )
