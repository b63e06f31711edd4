"""Adapters that wrap third-party article extractors as one extraction strategy.

Each adapter takes the hydrated working document and an
:class:`ExternalExtractorConfig`, and returns an
:class:`~zenreader.items.ExternalArticle` or ``None``.  Whatever the
library raises is caught here, logged as a warning and turned into
``None`` so the orchestrator moves on to its next strategy.
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup, Tag
from pydantic import BaseModel

from zenreader.items import ExternalArticle
from zenreader.settings import ALLOWED_VIDEO_RE, EXTERNAL_CHAR_THRESHOLD

logger = logging.getLogger(__name__)


class ExternalExtractorConfig(BaseModel):
    """Options handed to an external extractor."""

    debug: bool = False
    source_uri: str = ""
    allowed_video_pattern: re.Pattern = ALLOWED_VIDEO_RE
    min_char_threshold: int = EXTERNAL_CHAR_THRESHOLD


def _markup(document: Tag | str) -> str:
    return document if isinstance(document, str) else str(document)


_EMBED_TAGS: tuple[str, ...] = ("iframe", "embed", "object")
_EMBED_SRC_ATTRS: tuple[str, ...] = ("src", "data-src", "data")


def drop_untrusted_embeds(content_html: str, pattern: re.Pattern) -> str:
    """Remove iframes, embeds and objects whose source does not match *pattern*."""
    if not content_html or not any(f"<{name}" in content_html.lower() for name in _EMBED_TAGS):
        return content_html
    soup = BeautifulSoup(content_html, "lxml")
    removed = 0
    for el in soup.find_all(_EMBED_TAGS):
        src = next((str(el[name]) for name in _EMBED_SRC_ATTRS if el.get(name)), "")
        if not src or not pattern.search(src):
            el.decompose()
            removed += 1
    if not removed:
        return content_html
    logger.debug("Dropped %d untrusted embed(s) from extractor output", removed)
    body = soup.find("body")
    return body.decode_contents() if isinstance(body, Tag) else str(soup)


# ---------------------------------------------------------------------------
# readability-lxml
# ---------------------------------------------------------------------------

class ReadabilityExtractor:
    """Mozilla Readability port (``readability-lxml``)."""

    name = "readability"

    def try_extract(
        self,
        document: Tag | str,
        config: ExternalExtractorConfig,
    ) -> ExternalArticle | None:
        try:
            from readability import Document  # type: ignore[import-untyped]

            doc = Document(
                _markup(document),
                url=config.source_uri or None,
                retry_length=config.min_char_threshold,
            )
            content = doc.summary(html_partial=True)
            title = doc.short_title() or doc.title()
        except Exception as exc:
            logger.warning("readability failed for %s: %s", config.source_uri or "<document>", exc)
            return None

        if not content or not content.strip():
            return None
        content = drop_untrusted_embeds(content, config.allowed_video_pattern)
        if config.debug:
            logger.debug("readability returned %d bytes of HTML", len(content))
        return ExternalArticle(title=title, content_html=content)


# ---------------------------------------------------------------------------
# trafilatura
# ---------------------------------------------------------------------------

class TrafilaturaExtractor:
    """Second-opinion extractor backed by ``trafilatura``."""

    name = "trafilatura"

    def try_extract(
        self,
        document: Tag | str,
        config: ExternalExtractorConfig,
    ) -> ExternalArticle | None:
        html = _markup(document)
        try:
            import trafilatura  # type: ignore[import-untyped]
            from trafilatura.metadata import extract_metadata  # type: ignore[import-untyped]

            content = trafilatura.extract(
                html,
                url=config.source_uri or None,
                output_format="html",
                include_links=True,
                include_images=True,
                include_tables=True,
                favor_recall=True,
            )
            meta = extract_metadata(html, default_url=config.source_uri or None)
        except Exception as exc:
            logger.warning("trafilatura failed for %s: %s", config.source_uri or "<document>", exc)
            return None

        if not content:
            return None
        content = drop_untrusted_embeds(content, config.allowed_video_pattern)
        if config.debug:
            logger.debug("trafilatura returned %d bytes of HTML", len(content))
        return ExternalArticle(
            title=getattr(meta, "title", None) or "",
            content_html=content,
            byline=getattr(meta, "author", None) or "",
            published_time=getattr(meta, "date", None) or "",
            site_name=getattr(meta, "sitename", None) or "",
        )


def parse_external_content(article: ExternalArticle) -> Tag | None:
    """Parse an extractor's HTML output into a tree; None for empty or unparseable markup."""
    if not article.content_html.strip():
        return None
    try:
        soup = BeautifulSoup(article.content_html, "lxml")
    except Exception as exc:
        logger.debug("External extractor returned unparseable HTML: %s", exc)
        return None
    body = soup.find("body")
    return body if isinstance(body, Tag) else soup
