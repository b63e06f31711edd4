"""Small text and node helpers shared by every extraction stage."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any

import dateparser
from bs4 import Tag
from bs4.element import NavigableString, PageElement, PreformattedString

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")

# Elements whose text a browser never renders
INVISIBLE_TAGS: frozenset[str] = frozenset({"script", "style", "noscript", "template"})

# ---------------------------------------------------------------------------
# Boilerplate classification tables
# ---------------------------------------------------------------------------

# Matched anywhere inside "class id role"
UNWANTED_SUBSTRINGS: tuple[str, ...] = (
    "related",
    "recommend",
    "trending",
    "comment",
    "promo",
    "footer",
    "sidebar",
    "sponsored",
    "nav",
    "more-articles",
    "more-stories",
    "newsletter",
)

# Matched only as whole tokens ("ad" must not hit "header" or "read")
UNWANTED_TOKENS: frozenset[str] = frozenset(
    {"ad", "ads", "advert", "adverts", "advertisement", "advertising"},
)

_TOKEN_SPLIT_RE = re.compile(r"[^a-z0-9]+")


def safe_str(val: Any, default: str = "") -> str:
    """Convert a BeautifulSoup attribute value (str | list | None) to str."""
    if val is None:
        return default
    if isinstance(val, list):
        return " ".join(str(v) for v in val)
    return str(val)


def normalize_whitespace(text: str | None) -> str:
    return _WHITESPACE_RE.sub(" ", text or "").strip()


def _iter_visible_strings(node: PageElement) -> Iterable[str]:
    if isinstance(node, NavigableString):
        if not isinstance(node, PreformattedString):
            yield str(node)
        return
    if not isinstance(node, Tag) or node.name in INVISIBLE_TAGS:
        return
    for child in node.children:
        yield from _iter_visible_strings(child)


def visible_text(node: PageElement | None, separator: str = "") -> str:
    """Return the text a reader would see: script/style/template/noscript excluded."""
    if node is None:
        return ""
    return separator.join(_iter_visible_strings(node))


def collapsed_text_length(node: PageElement | str | None) -> int:
    """Length of the node's visible text with every whitespace character removed."""
    if node is None:
        return 0
    text = visible_text(node) if isinstance(node, PageElement) else node
    return len(_WHITESPACE_RE.sub("", text))


def class_id_role(tag: Tag) -> str:
    return " ".join(
        [
            safe_str(tag.get("class")),
            safe_str(tag.get("id")),
            safe_str(tag.get("role")),
        ],
    ).lower()


def is_unwanted(node: PageElement | None) -> bool:
    """Return True if *node* looks like boilerplate (related links, ads, comments...)."""
    if not isinstance(node, Tag):
        return False
    combined = class_id_role(node)
    if not combined.strip():
        return False
    if any(keyword in combined for keyword in UNWANTED_SUBSTRINGS):
        return True
    return any(token in UNWANTED_TOKENS for token in _TOKEN_SPLIT_RE.split(combined))


def closest(tag: Tag | None, names: Iterable[str], stop: Tag | None = None) -> Tag | None:
    """Return *tag* or its nearest ancestor named in *names*, not climbing past *stop*."""
    wanted = frozenset(names)
    current = tag
    while isinstance(current, Tag):
        if current.name in wanted:
            return current
        if current is stop:
            return None
        current = current.parent
    return None


def has_ancestor(tag: Tag, names: Iterable[str]) -> bool:
    wanted = frozenset(names)
    return any(parent.name in wanted for parent in tag.parents)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def format_date(raw: str | None) -> str:
    """Render *raw* as ``"Jan 15, 2024, 10:30 AM"``; unparseable input comes back trimmed."""
    if not raw:
        return ""
    cleaned = normalize_whitespace(raw)
    if not cleaned:
        return ""
    try:
        parsed = dateparser.parse(
            cleaned,
            settings={"PREFER_DAY_OF_MONTH": "first"},
        )
    except Exception as exc:
        logger.debug("Date parse failed for %r: %s", cleaned, exc)
        parsed = None
    if parsed is None:
        return raw.strip()
    hour = parsed.hour % 12 or 12
    return f"{parsed:%b} {parsed.day}, {parsed.year}, {hour}:{parsed:%M} {parsed:%p}"
