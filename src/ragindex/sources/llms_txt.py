"""Minimal llms.txt manifest parser.

Recognised structure:

    # Project title
    > One-line summary
    free text ...
    ## Section name
    - [Link title](https://example.com/page.md): optional description

Only link extraction matters to the indexer; free text is ignored. Links that
appear before the first ``##`` heading do not belong to a section and are
dropped.

Usage:
    manifest = parse_llms_txt(text)
    for section, links in manifest.sections.items():
        ...
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_TITLE_RE = re.compile(r"^#\s+(?P<title>.+?)\s*$")
_SECTION_RE = re.compile(r"^##\s+(?P<name>.+?)\s*$")
_SUMMARY_RE = re.compile(r"^>\s?(?P<summary>.*)$")
# "- [title](url)" with an optional ": description" tail
_LINK_RE = re.compile(
    r"^\s*[-*]\s*\[(?P<title>[^\]]*)\]\((?P<url>[^)\s]*)\)(?:\s*:\s*(?P<desc>.*?))?\s*$"
)


@dataclass
class ManifestLink:
    url: str
    title: str
    desc: str | None = None


@dataclass
class ParsedManifest:
    title: str | None = None
    summary: str | None = None
    sections: dict[str, list[ManifestLink]] = field(default_factory=dict)


def parse_llms_txt(text: str) -> ParsedManifest:
    """Parse llms.txt *text* into its title, summary and sections of links.

    Section order and link order follow the document.
    """
    manifest = ParsedManifest()
    current: str | None = None

    for line in text.splitlines():
        if match := _SECTION_RE.match(line):
            current = match.group("name")
            manifest.sections.setdefault(current, [])
            continue
        if manifest.title is None and (match := _TITLE_RE.match(line)):
            manifest.title = match.group("title")
            continue
        if current is None:
            if manifest.summary is None and (match := _SUMMARY_RE.match(line)):
                manifest.summary = match.group("summary").strip() or None
            continue
        if match := _LINK_RE.match(line):
            manifest.sections[current].append(
                ManifestLink(
                    url=match.group("url").strip(),
                    title=match.group("title").strip(),
                    desc=(match.group("desc") or None),
                )
            )

    return manifest
