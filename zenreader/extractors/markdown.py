"""Render reader content as Markdown."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from zenreader.items import ExtractedArticle

logger = logging.getLogger(__name__)

_EXCESSIVE_BLANK_LINES_RE = re.compile(r"\n{3,}")
_TRAILING_WHITESPACE_RE = re.compile(r"[ \t]+$", re.MULTILINE)


def html_to_markdown(html: str) -> str:
    """Convert sanitized reader *html* to Markdown.

    Uses markdownify with ATX headings and ``-`` bullets, then collapses
    runs of blank lines and strips trailing whitespace.
    """
    if not html or not html.strip():
        return ""

    try:
        from markdownify import markdownify  # type: ignore[import-untyped]

        md = markdownify(
            html,
            heading_style="ATX",
            bullets="-",
            code_language_callback=_code_language,
            strip=["iframe", "video", "source"],
        )
    except Exception as exc:
        logger.debug("markdownify failed, falling back to plain text: %s", exc)
        from bs4 import BeautifulSoup

        md = BeautifulSoup(html, "lxml").get_text(separator="\n")

    md = _TRAILING_WHITESPACE_RE.sub("", md)
    md = _EXCESSIVE_BLANK_LINES_RE.sub("\n\n", md)
    return md.strip()


def _code_language(el: object) -> str:
    """Return the ``language-*`` class suffix of a ``<pre>``/``<code>`` element."""
    getter = getattr(el, "get", None)
    classes = (getter("class") if getter else None) or []
    code = getattr(el, "code", None)
    if not classes and code is not None:
        classes = code.get("class") or []
    for cls in classes:
        if isinstance(cls, str) and cls.startswith("language-"):
            return cls[len("language-"):]
    return ""


def format_markdown_article(
    title: str,
    author: str | None,
    published: str | None,
    site_name: str | None,
    url: str | None,
    content_markdown: str,
) -> str:
    """Render a complete Markdown document with a byline header."""
    lines: list[str] = [f"# {title}", ""]

    meta_parts: list[str] = []
    if author:
        meta_parts.append(f"**Author:** {author}")
    if published:
        meta_parts.append(f"**Published:** {published}")
    if site_name:
        meta_parts.append(f"**Site:** {site_name}")
    if url:
        meta_parts.append(f"**Source:** <{url}>")
    if meta_parts:
        # two trailing spaces keep the lines apart in rendered Markdown
        lines.extend(f"{part}  " for part in meta_parts)
        lines.append("")

    lines.append("---")
    lines.append("")
    lines.append(content_markdown)
    return "\n".join(lines).rstrip() + "\n"


def article_to_markdown(article: ExtractedArticle) -> str:
    return format_markdown_article(
        title=article.title,
        author=article.metadata.author,
        published=article.metadata.published,
        site_name=article.metadata.site_name,
        url=article.url,
        content_markdown=html_to_markdown(article.content_html),
    )
