"""Extraction orchestrator.

Strategies are tried in a fixed precision-to-recall order and the first
one whose sanitized output clears its threshold wins:

1. ``candidate``          best-scoring candidate, text > primary threshold
2. ``external:<name>``    injected third-party extractor, text > external threshold
3. ``candidate_salvage``  the same candidate, text > salvage threshold
4. ``paragraph_fallback`` every prose/media node of the page, > 3 nodes

The source document is never touched: the page is re-parsed into a working
copy and hydrated once per call.  When no strategy is accepted the result
is ``None``; no exception escapes :func:`extract_article`.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup, Tag

from zenreader.extractors.candidates import select_candidate
from zenreader.extractors.external import ExternalExtractorConfig, parse_external_content
from zenreader.extractors.hydration import hydrate_document
from zenreader.extractors.metadata import resolve_metadata, resolve_title
from zenreader.extractors.sanitizer import sanitize
from zenreader.extractors.sections import remove_duplicate_title, wrap_sections
from zenreader.extractors.text import (
    collapsed_text_length,
    has_ancestor,
    is_unwanted,
    visible_text,
)
from zenreader.items import ExtractedArticle
from zenreader.language import detect_language, normalize_language_hint
from zenreader.settings import ALLOWED_VIDEO_RE, ExtractionConfig

if TYPE_CHECKING:
    from zenreader.plugins import ExternalExtractor

logger = logging.getLogger(__name__)

FALLBACK_CLASS = "rm-reader-fallback"

_FALLBACK_TAGS: tuple[str, ...] = (
    "p", "h1", "h2", "h3", "blockquote", "li", "figure", "img", "picture", "table",
)
_FALLBACK_EXCLUDED_ANCESTORS: tuple[str, ...] = ("nav", "header", "footer", "aside", "form")


@dataclass
class _Draft:
    """Sanitized content accepted by one strategy, before post-processing."""

    content: Tag
    method: str
    title_hint: str = ""
    hints: dict[str, str] = field(default_factory=dict)
    language_hint: str = ""


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

def parse_document(source: str | BeautifulSoup) -> BeautifulSoup:
    if isinstance(source, BeautifulSoup):
        return source
    return BeautifulSoup(source or "", "lxml")


def clone_document(source: BeautifulSoup) -> BeautifulSoup:
    """Return an independent working copy of *source*."""
    return BeautifulSoup(str(source), "lxml")


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def _candidate_strategy(candidate: Tag | None, threshold: int, method: str) -> _Draft | None:
    if candidate is None:
        return None
    cleaned = sanitize(candidate)
    length = collapsed_text_length(cleaned)
    logger.debug("%s: %d chars (threshold %d)", method, length, threshold)
    if length > threshold:
        return _Draft(content=cleaned, method=method)
    return None


def _external_strategy(
    working: BeautifulSoup,
    extractor: ExternalExtractor | None,
    config: ExtractionConfig,
    url: str,
) -> _Draft | None:
    if extractor is None:
        return None
    ext_config = ExternalExtractorConfig(
        debug=config.debug,
        source_uri=url,
        allowed_video_pattern=ALLOWED_VIDEO_RE,
        min_char_threshold=config.external_char_threshold,
    )
    try:
        article = extractor.try_extract(clone_document(working), ext_config)
    except Exception as exc:
        logger.warning("External extractor %s failed: %s", getattr(extractor, "name", "?"), exc)
        return None
    if article is None:
        return None
    parsed = parse_external_content(article)
    if parsed is None:
        return None
    cleaned = sanitize(parsed)
    length = collapsed_text_length(cleaned)
    method = f"external:{getattr(extractor, 'name', 'unknown')}"
    logger.debug("%s: %d chars (threshold %d)", method, length, config.external_threshold)
    if length <= config.external_threshold:
        return None
    return _Draft(
        content=cleaned,
        method=method,
        title_hint=article.title,
        hints={
            "byline": article.byline,
            "published": article.published_time,
            "site_name": article.site_name,
        },
        language_hint=article.lang,
    )


def build_paragraph_fallback(root: Tag, config: ExtractionConfig | None = None) -> Tag | None:
    """Collect every prose/media node of *root* into a new ``<article>``, or None if too few."""
    config = config or ExtractionConfig()
    factory = BeautifulSoup("", "lxml")
    fallback = factory.new_tag("article", attrs={"class": FALLBACK_CLASS})
    collected: list[Tag] = []
    collected_ids: set[int] = set()
    for node in root.find_all(list(_FALLBACK_TAGS)):
        if is_unwanted(node) or has_ancestor(node, _FALLBACK_EXCLUDED_ANCESTORS):
            continue
        if node.name != "table" and has_ancestor(node, ("table",)):
            continue
        if any(id(parent) in collected_ids for parent in node.parents):
            continue
        if node.name == "p" and len(visible_text(node).strip()) < config.fallback_min_paragraph_chars:
            continue
        collected.append(node)
        collected_ids.add(id(node))
        fallback.append(copy.copy(node))
    logger.debug("Paragraph fallback collected %d nodes", len(collected))
    if len(collected) > config.fallback_min_nodes:
        return fallback
    return None


def _fallback_strategy(working: BeautifulSoup, config: ExtractionConfig) -> _Draft | None:
    fallback = build_paragraph_fallback(working, config)
    if fallback is None:
        return None
    return _Draft(content=sanitize(fallback), method="paragraph_fallback")


# ---------------------------------------------------------------------------
# Post-processing
# ---------------------------------------------------------------------------

def _finish(draft: _Draft, working: BeautifulSoup, url: str) -> ExtractedArticle:
    content = draft.content
    title = resolve_title(working, draft.title_hint)
    remove_duplicate_title(content, title)
    metadata = resolve_metadata(content, working, draft.hints)
    wrap_sections(content)
    language = normalize_language_hint(draft.language_hint) or detect_language(content)
    return ExtractedArticle(
        title=title,
        metadata=metadata,
        content_node=content,
        language=language,
        method=draft.method,
        url=url,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_article(
    source: str | BeautifulSoup,
    url: str = "",
    *,
    extractor: ExternalExtractor | None = None,
    config: ExtractionConfig | None = None,
) -> ExtractedArticle | None:
    """Extract the primary readable content of *source*.

    Args:
        source:    Raw HTML or an already-parsed page.  Never modified.
        url:       Page URL, passed to the external extractor and echoed
                   on the result.
        extractor: Optional :class:`~zenreader.plugins.ExternalExtractor`.
        config:    Thresholds and limits; defaults from :mod:`zenreader.settings`.

    Returns:
        An :class:`~zenreader.items.ExtractedArticle`, or None when no
        strategy found reader-suitable content.
    """
    config = config or ExtractionConfig()
    try:
        working = clone_document(parse_document(source))
        hydrate_document(working)
        candidate = select_candidate(working)
    except Exception as exc:
        logger.warning("Could not prepare document %s: %s", url or "<document>", exc)
        return None

    strategies: list[tuple[str, Callable[[], _Draft | None]]] = [
        ("candidate", lambda: _candidate_strategy(candidate, config.primary_threshold, "candidate")),
        ("external", lambda: _external_strategy(working, extractor, config, url)),
        (
            "candidate_salvage",
            lambda: _candidate_strategy(candidate, config.salvage_threshold, "candidate_salvage"),
        ),
        ("paragraph_fallback", lambda: _fallback_strategy(working, config)),
    ]

    for name, strategy in strategies:
        try:
            draft = strategy()
            if draft is None:
                continue
            article = _finish(draft, working, url)
        except Exception as exc:
            logger.warning("Strategy %s failed for %s: %s", name, url or "<document>", exc)
            continue
        logger.debug("Accepted %s for %s", article.method, url or "<document>")
        return article

    logger.info("No reader-suitable content found for %s", url or "<document>")
    return None
