"""zenreader.reader - Stateful host entry point.

:class:`ZenReader` bundles the extraction settings, the optional external
extractor, the preference store and the "is the reader open" flag into one
explicit object, so a host can wire its command channel straight to
:meth:`ZenReader.handle_message`.

Usage::

    from zenreader import ZenReader
    from zenreader.preferences import MemoryPreferenceStore

    reader = ZenReader(store=MemoryPreferenceStore())
    article = reader.toggle(html, url="https://example.com/post")   # opens
    reader.toggle(html)                                              # closes, returns None
    reader.handle_message({"type": "SET_READER_PREFS", "theme": "beige"})
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from zenreader.extractors.pipeline import extract_article
from zenreader.preferences import (
    ReaderPreferences,
    apply_update,
    ensure_font_for_language,
    load_preferences,
    save_preferences,
    style_variables,
)
from zenreader.settings import ExtractionConfig

if TYPE_CHECKING:
    from bs4 import BeautifulSoup

    from zenreader.items import ExtractedArticle
    from zenreader.plugins import ExternalExtractor
    from zenreader.preferences import PreferenceStore

logger = logging.getLogger(__name__)

TOGGLE_READER_ACTION = "TOGGLE_READER_ACTION"
SET_READER_PREFS = "SET_READER_PREFS"


class ZenReader:
    """Reader session for one page.

    Args:
        store:     Preference persistence; ``None`` keeps preferences in
                   memory only.
        extractor: Optional external extractor consulted by the pipeline.
        config:    Extraction thresholds; defaults from
                   :mod:`zenreader.settings`.
    """

    def __init__(
        self,
        store: PreferenceStore | None = None,
        extractor: ExternalExtractor | None = None,
        config: ExtractionConfig | None = None,
    ) -> None:
        self._store = store
        self._extractor = extractor
        self._config = config or ExtractionConfig()
        self.preferences: ReaderPreferences = load_preferences(store)
        self.article: ExtractedArticle | None = None

    # ------------------------------------------------------------------
    # Public methods
    # ------------------------------------------------------------------

    @property
    def active(self) -> bool:
        return self.article is not None

    def toggle(self, source: str | BeautifulSoup, url: str = "") -> ExtractedArticle | None:
        """Open the reader on *source*, or close it when it is already open.

        Returns:
            The extracted article when the reader was opened; ``None`` when
            it was closed or no readable content was found.
        """
        if self.article is not None:
            logger.debug("Closing reader for %s", self.article.url or "<document>")
            self.article = None
            return None

        article = extract_article(source, url, extractor=self._extractor, config=self._config)
        if article is None:
            logger.warning("No primary article content found on %s", url or "<document>")
            return None

        self.preferences = ensure_font_for_language(self.preferences, article.language)
        save_preferences(self._store, self.preferences)
        self.article = article
        return article

    def apply_preferences(self, update: Mapping[str, Any]) -> ReaderPreferences:
        """Apply a partial preference *update* and persist the result."""
        self.preferences = apply_update(self.preferences, update)
        save_preferences(self._store, self.preferences)
        return self.preferences

    def style(self) -> dict[str, str]:
        """CSS custom properties for the open article (or the page defaults)."""
        language = self.article.language if self.article is not None else "en"
        return style_variables(self.preferences, language)

    def handle_message(self, message: Mapping[str, Any]) -> dict[str, str]:
        """Dispatch one host command and return its acknowledgement.

        ``TOGGLE_READER_ACTION`` reads the page from the ``html`` and
        ``url`` keys; ``SET_READER_PREFS`` takes any preference keys.
        """
        kind = message.get("type")
        if kind == TOGGLE_READER_ACTION:
            self.toggle(message.get("html") or "", str(message.get("url") or ""))
            return {"status": "ok"}
        if kind == SET_READER_PREFS:
            self.apply_preferences({k: v for k, v in message.items() if k != "type"})
            return {"status": "ok"}
        logger.debug("Ignoring message of type %r", kind)
        return {"status": "ignored"}
