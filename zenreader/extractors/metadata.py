"""Title and byline metadata resolution.

Title priority chain (first candidate longer than 10 characters wins)::

    extractor hint → og:title → twitter:title → <meta name=title>
    → <meta itemprop=headline> → <title>

Author / date are looked up in the sanitized content first and the page
second.  Nodes found *inside the content* are removed afterwards, so the
reader chrome shows the byline once instead of twice.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from bs4 import BeautifulSoup, Tag
from bs4.element import NavigableString

from zenreader.extractors.text import (
    closest,
    format_date,
    normalize_whitespace,
    safe_str,
    visible_text,
)
from zenreader.items import Metadata
from zenreader.settings import DEFAULT_TITLE

logger = logging.getLogger(__name__)

_PREFERRED_TITLE_MIN = 10

_TITLE_META_SELECTORS: tuple[str, ...] = (
    'meta[property="og:title"]',
    'meta[name="twitter:title"]',
    'meta[name="title"]',
    'meta[itemprop="headline"]',
)

_AUTHOR_SELECTORS: tuple[str, ...] = (
    '[rel="author"]',
    ".author, .byline, .post-author",
)

_DATE_ELEMENT_SELECTOR = 'time[datetime], time, [itemprop="datePublished"]'

_DATE_META_SELECTOR = (
    'meta[property="article:published_time"], meta[name="pubdate"], '
    'meta[name="date"], meta[itemprop="datePublished"]'
)

# Containers that may hold a whole "By Jane Doe · Jan 1" line
_BYLINE_CONTAINERS: tuple[str, ...] = ("p", "div", "span", "header", "footer", "section")
_BY_WORD_RE = re.compile(r"\bby\b", re.IGNORECASE)
_BY_ONLY_RE = re.compile(r"^\s*by\s*:?\s*$", re.IGNORECASE)


def _select_one(root: Tag | None, selector: str) -> Tag | None:
    if root is None:
        return None
    try:
        found = root.select_one(selector)
    except Exception as exc:
        logger.debug("Selector %r failed: %s", selector, exc)
        return None
    return found if isinstance(found, Tag) else None


def _meta_content(document: Tag, selector: str) -> str:
    el = _select_one(document, selector)
    return safe_str(el.get("content")).strip() if el is not None else ""


# ---------------------------------------------------------------------------
# Title
# ---------------------------------------------------------------------------

def title_candidates(document: Tag, hint: str = "") -> list[str]:
    """Return normalised, case-sensitively deduplicated title candidates in priority order."""
    raw: list[str] = []
    if hint:
        raw.append(hint)
    raw.extend(_meta_content(document, selector) for selector in _TITLE_META_SELECTORS)
    title_tag = document.find("title")
    if isinstance(title_tag, Tag):
        raw.append(title_tag.get_text())

    candidates: list[str] = []
    for value in raw:
        cleaned = normalize_whitespace(value)
        if cleaned and cleaned not in candidates:
            candidates.append(cleaned)
    return candidates


def resolve_title(document: Tag, hint: str = "") -> str:
    """Pick the best title for *document*, falling back to :data:`DEFAULT_TITLE`."""
    candidates = title_candidates(document, hint)
    for candidate in candidates:
        if len(candidate) > _PREFERRED_TITLE_MIN:
            return candidate
    return candidates[0] if candidates else DEFAULT_TITLE


# ---------------------------------------------------------------------------
# Author / date
# ---------------------------------------------------------------------------

def _find_author_element(content: Tag, document: Tag) -> Tag | None:
    for root in (content, document):
        for selector in _AUTHOR_SELECTORS:
            el = _select_one(root, selector)
            if el is not None:
                return el
    return None


def _author_link(author_el: Tag | None) -> str:
    if author_el is None:
        return ""
    link = closest(author_el, ("a",))
    if link is None:
        found = author_el.find("a")
        link = found if isinstance(found, Tag) else None
    return safe_str(link.get("href")).strip() if link is not None else ""


def _find_date_element(content: Tag, document: Tag) -> Tag | None:
    return _select_one(content, _DATE_ELEMENT_SELECTOR) or _select_one(
        document, _DATE_ELEMENT_SELECTOR,
    )


def _date_value(el: Tag | None) -> str:
    if el is None:
        return ""
    return (
        safe_str(el.get("content")).strip()
        or safe_str(el.get("datetime")).strip()
        or el.get_text().strip()
    )


def _is_inside(el: Tag, root: Tag) -> bool:
    return el is root or any(parent is root for parent in el.parents)


def remove_byline(el: Tag | None, content: Tag) -> None:
    """Remove *el* from *content*, taking its whole line with it when it reads "By ..."."""
    if el is None or el is content or not _is_inside(el, content):
        return
    container = closest(el, _BYLINE_CONTAINERS, stop=content)
    if container is content:
        container = None
    target = el
    if container is not None and _BY_WORD_RE.search(visible_text(container, " ")):
        target = container
    else:
        # unwrapped byline line: drop the bare "By" left beside the link
        prefix = el.previous_sibling
        if isinstance(prefix, NavigableString) and _BY_ONLY_RE.match(str(prefix)):
            prefix.extract()
    logger.debug("Removing byline node <%s>", target.name)
    target.decompose()


def resolve_metadata(
    content: Tag,
    document: Tag | BeautifulSoup,
    hints: Mapping[str, Any] | None = None,
) -> Metadata:
    """Resolve author/date/site metadata and strip the matched byline from *content*.

    Args:
        content:  Sanitized article content (mutated: byline nodes are removed).
        document: The working document, searched after *content*.
        hints:    Optional extractor hints: ``byline``, ``author_url``,
                  ``published``, ``site_name``.
    """
    hints = hints or {}
    hint_byline = normalize_whitespace(safe_str(hints.get("byline")))
    hint_published = safe_str(hints.get("published")).strip()

    author_el = _find_author_element(content, document)
    author = (
        hint_byline
        or (normalize_whitespace(author_el.get_text(" ")) if author_el is not None else "")
        or _meta_content(document, 'meta[name="author"]')
    )
    author_url = safe_str(hints.get("author_url")).strip() or _author_link(author_el)

    date_el = _find_date_element(content, document)
    if hint_published:
        published = format_date(hint_published)
    else:
        date_source = _select_one(document, _DATE_META_SELECTOR) or date_el
        published = format_date(_date_value(date_source))

    site_name = safe_str(hints.get("site_name")).strip() or _meta_content(
        document, 'meta[property="og:site_name"]',
    )

    remove_byline(author_el, content)
    if date_el is not None and not date_el.decomposed:
        remove_byline(date_el, content)

    return Metadata(author=author, author_url=author_url, published=published, site_name=site_name)
