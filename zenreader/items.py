"""Data model for extracted articles.

Pydantic models describe the serialisable pieces (metadata, outline
entries, external extractor output, the final JSON schema);
:class:`ExtractedArticle` is a plain dataclass because it carries a live
BeautifulSoup ``Tag`` that the outline builder and the presentation layer
keep working on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from bs4 import Tag
from pydantic import BaseModel, Field, field_validator

Language = Literal["en", "zh"]

_OUTLINE_LABEL_MAX = 140


def _blank_if_none(v: Any) -> Any:
    if v is None:
        return ""
    if isinstance(v, str):
        return v.strip()
    return v


class Metadata(BaseModel):
    """Byline information; every field defaults to an empty string."""

    author: str = ""
    author_url: str = ""
    published: str = ""
    site_name: str = ""

    @field_validator("author", "author_url", "published", "site_name", mode="before")
    @classmethod
    def strip_fields(cls, v: Any) -> Any:
        return _blank_if_none(v)


class OutlineEntry(BaseModel):
    """One navigable heading reference inside the content."""

    level: int = Field(ge=1, le=6)
    text: str
    anchor_id: str

    @property
    def label(self) -> str:
        """Display text, condensed for the outline panel."""
        if len(self.text) > _OUTLINE_LABEL_MAX:
            return f"{self.text[:_OUTLINE_LABEL_MAX - 3]}..."
        return self.text


class ExternalArticle(BaseModel):
    """Normalised output of a third-party extractor."""

    title: str = ""
    content_html: str = ""
    byline: str = ""
    published_time: str = ""
    site_name: str = ""
    lang: str = ""

    @field_validator("title", "byline", "published_time", "site_name", "lang", mode="before")
    @classmethod
    def strip_fields(cls, v: Any) -> Any:
        return _blank_if_none(v)

    @field_validator("content_html", mode="before")
    @classmethod
    def content_not_none(cls, v: Any) -> Any:
        return "" if v is None else v


class ArticleSchema(BaseModel):
    """Canonical serialisable output of one extraction."""

    url: str = ""
    title: str = ""
    author: str = ""
    author_url: str = ""
    published: str = ""
    site_name: str = ""
    language: Language = "en"
    content_html: str = ""
    content_markdown: str = ""
    content_text: str = ""
    outline: list[OutlineEntry] = Field(default_factory=list)
    extraction_method_used: str = ""
    extracted_at: str = ""


@dataclass
class ExtractedArticle:
    """The single accepted result of an extraction call."""

    title: str
    metadata: Metadata
    content_node: Tag
    language: Language = "en"
    method: str = ""
    url: str = ""
    extracted_at: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    @property
    def content_html(self) -> str:
        return str(self.content_node)

    @property
    def text(self) -> str:
        from zenreader.extractors.text import normalize_whitespace, visible_text

        return normalize_whitespace(visible_text(self.content_node, " "))

    def outline(self, max_entries: int | None = None) -> list[OutlineEntry]:
        """Rebuild the outline from the current content (never cached)."""
        from zenreader.extractors.outline import build_outline

        if max_entries is None:
            return build_outline(self.content_node)
        return build_outline(self.content_node, max_entries=max_entries)

    def to_markdown(self) -> str:
        from zenreader.extractors.markdown import article_to_markdown

        return article_to_markdown(self)

    def to_schema(self) -> ArticleSchema:
        from zenreader.extractors.markdown import html_to_markdown

        return ArticleSchema(
            url=self.url,
            title=self.title,
            author=self.metadata.author,
            author_url=self.metadata.author_url,
            published=self.metadata.published,
            site_name=self.metadata.site_name,
            language=self.language,
            content_html=self.content_html,
            content_markdown=html_to_markdown(self.content_html),
            content_text=self.text,
            outline=self.outline(),
            extraction_method_used=self.method,
            extracted_at=self.extracted_at,
        )
