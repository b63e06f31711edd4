"""Structural post-processing of sanitized content."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Tag

from zenreader.extractors.text import normalize_whitespace, visible_text

logger = logging.getLogger(__name__)

SECTION_CLASS = "rm-section"
HEADING_TAGS: tuple[str, ...] = ("h1", "h2", "h3", "h4", "h5", "h6")


def wrap_sections(content: Tag) -> Tag:
    """Group the direct children of *content* into ``div.rm-section`` wrappers.

    A new section starts at every heading (and at the very start), so
    reading order is unchanged.
    """
    factory = BeautifulSoup("", "lxml")
    children = [child.extract() for child in list(content.contents)]
    section: Tag | None = None
    for node in children:
        if section is None or (isinstance(node, Tag) and node.name in HEADING_TAGS):
            section = factory.new_tag("div", attrs={"class": SECTION_CLASS})
            content.append(section)
        section.append(node)
    return content


def _normalize_title(text: str | None) -> str:
    return normalize_whitespace(text).lower()


def remove_duplicate_title(content: Tag, title: str) -> bool:
    """Remove the first ``h1``/``h2`` when it repeats *title*; return True if removed."""
    normalized_title = _normalize_title(title)
    if not normalized_title:
        return False
    heading = content.find(["h1", "h2"])
    if not isinstance(heading, Tag):
        return False
    heading_text = _normalize_title(visible_text(heading, " "))
    if not heading_text:
        return False
    if (
        heading_text == normalized_title
        or normalized_title.startswith(heading_text)
        or heading_text.startswith(normalized_title)
    ):
        logger.debug("Removing heading duplicating the title: %r", heading_text)
        heading.decompose()
        return True
    return False
