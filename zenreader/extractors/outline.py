"""Heading outline for in-reader navigation."""

from __future__ import annotations

import logging
from typing import NamedTuple

from bs4 import Tag

from zenreader.extractors.text import normalize_whitespace, safe_str, visible_text
from zenreader.items import OutlineEntry
from zenreader.settings import OUTLINE_MAX_ENTRIES

logger = logging.getLogger(__name__)

ANCHOR_PREFIX = "rm-outline-"
PSEUDO_HEADING_LEVEL = 3
_HEADING_LEVELS: dict[str, int] = {f"h{i}": i for i in range(1, 7)}

# Bold-led paragraphs used as headings when the content has none
_PSEUDO_MIN_CHARS = 4
_PSEUDO_MAX_CHARS = 120

# Gap kept above a heading scrolled into view
SCROLL_MARGIN = 12.0


class Rect(NamedTuple):
    """Bounding rectangle in viewport coordinates."""

    top: float
    left: float = 0.0
    width: float = 0.0
    height: float = 0.0


def _heading_level(el: Tag) -> int | None:
    if el.name in _HEADING_LEVELS:
        return _HEADING_LEVELS[el.name]
    if safe_str(el.get("role")).strip().lower() == "heading":
        try:
            level = int(safe_str(el.get("aria-level")).strip())
        except ValueError:
            return None
        return min(max(level, 1), 6)
    return None


def _headings(content: Tag) -> list[tuple[Tag, int, str]]:
    found: list[tuple[Tag, int, str]] = []
    for el in content.find_all(True):
        level = _heading_level(el)
        if level is None:
            continue
        text = normalize_whitespace(visible_text(el, " "))
        if text:
            found.append((el, level, text))
    return found


def _pseudo_headings(content: Tag) -> list[tuple[Tag, int, str]]:
    found: list[tuple[Tag, int, str]] = []
    for p in content.find_all("p"):
        if not p.find(["b", "strong"]):
            continue
        text = normalize_whitespace(visible_text(p, " "))
        if _PSEUDO_MIN_CHARS < len(text) < _PSEUDO_MAX_CHARS:
            found.append((p, PSEUDO_HEADING_LEVEL, text))
    return found


def _ensure_anchor(el: Tag, used: set[str], claimed: set[str], counter: list[int]) -> str:
    existing = safe_str(el.get("id")).strip()
    if existing and existing not in claimed:
        return existing
    while True:
        counter[0] += 1
        candidate = f"{ANCHOR_PREFIX}{counter[0]}"
        if candidate not in used:
            break
    el["id"] = candidate
    used.add(candidate)
    return candidate


def build_outline(content: Tag, max_entries: int = OUTLINE_MAX_ENTRIES) -> list[OutlineEntry]:
    """Return up to *max_entries* outline entries for *content* in document order.

    Headings without an ``id`` get one assigned in place; existing ids are
    kept, so calling this again yields the same anchors.
    """
    nodes = _headings(content) or _pseudo_headings(content)
    used = {safe_str(el.get("id")).strip() for el in content.find_all(True) if el.get("id")}
    claimed: set[str] = set()
    counter = [0]
    entries: list[OutlineEntry] = []
    for el, level, text in nodes[:max_entries]:
        anchor = _ensure_anchor(el, used, claimed, counter)
        claimed.add(anchor)
        entries.append(OutlineEntry(level=level, text=text, anchor_id=anchor))
    logger.debug("Outline built with %d entries", len(entries))
    return entries


def scroll_offset(
    target: Rect,
    container: Rect,
    scroll_top: float,
    margin: float = SCROLL_MARGIN,
) -> float:
    """Return the container ``scrollTop`` that brings *target* into view.

    Both rectangles are viewport-relative, so the target's position inside
    the scrolling panel is its distance from the container's top edge plus
    whatever the container has already scrolled.
    """
    return max(scroll_top + (target.top - container.top) - margin, 0.0)
