"""Tests for zenreader.plugins and the external extractor adapters."""

from __future__ import annotations

from unittest.mock import patch

import pytest


class _Dummy:
    name = "dummy"

    def try_extract(self, document, config):
        return None


class TestRegistry:
    def test_none_means_no_extractor(self):
        from zenreader.plugins import get_extractor

        assert get_extractor(None) is None
        assert get_extractor("none") is None
        assert get_extractor("") is None

    def test_unknown_name(self):
        from zenreader.plugins import get_extractor

        with pytest.raises(KeyError):
            get_extractor("does-not-exist")

    def test_builtins_available(self):
        from zenreader.extractors.external import ReadabilityExtractor, TrafilaturaExtractor
        from zenreader.plugins import available_extractors, get_extractor

        assert {"readability", "trafilatura"} <= set(available_extractors())
        assert isinstance(get_extractor("readability"), ReadabilityExtractor)
        assert isinstance(get_extractor("trafilatura"), TrafilaturaExtractor)

    def test_register_and_clear(self):
        from zenreader.plugins import (
            ExternalExtractor,
            available_extractors,
            clear_plugins,
            get_extractor,
            register_extractor,
        )

        register_extractor("dummy", _Dummy)
        extractor = get_extractor("dummy")
        assert isinstance(extractor, ExternalExtractor)
        assert "dummy" in available_extractors()
        clear_plugins()
        assert "dummy" not in available_extractors()


class TestAdapters:
    def test_readability_extracts_article(self, article_html):
        from zenreader.extractors.external import ExternalExtractorConfig, ReadabilityExtractor

        article = ReadabilityExtractor().try_extract(article_html, ExternalExtractorConfig())
        assert article is not None
        assert "tide" in article.content_html.lower()

    def test_readability_failure_returns_none(self, article_html, caplog):
        from zenreader.extractors.external import ExternalExtractorConfig, ReadabilityExtractor

        with patch("readability.Document", side_effect=ValueError("bad document")):
            result = ReadabilityExtractor().try_extract(article_html, ExternalExtractorConfig())
        assert result is None
        assert "bad document" in caplog.text

    def test_trafilatura_failure_returns_none(self, article_html):
        from zenreader.extractors.external import ExternalExtractorConfig, TrafilaturaExtractor

        with patch("trafilatura.extract", side_effect=RuntimeError("nope")):
            result = TrafilaturaExtractor().try_extract(article_html, ExternalExtractorConfig())
        assert result is None

    def test_trafilatura_empty_returns_none(self, article_html):
        from zenreader.extractors.external import ExternalExtractorConfig, TrafilaturaExtractor

        with patch("trafilatura.extract", return_value=None):
            result = TrafilaturaExtractor().try_extract(article_html, ExternalExtractorConfig())
        assert result is None

    def test_untrusted_embeds_dropped_from_output(self, article_html):
        import re

        from zenreader.extractors.external import ExternalExtractorConfig, TrafilaturaExtractor

        output = (
            '<p>Readable text.</p><iframe src="https://videos.example.org/e/1"></iframe>'
            '<iframe src="https://tracker.example.net/frame"></iframe>'
        )
        config = ExternalExtractorConfig(allowed_video_pattern=re.compile(r"//videos\.example\.org"))
        with patch("trafilatura.extract", return_value=output):
            result = TrafilaturaExtractor().try_extract(article_html, config)
        assert "videos.example.org" in result.content_html
        assert "tracker.example.net" not in result.content_html
        assert "Readable text." in result.content_html

    def test_drop_untrusted_embeds(self):
        from zenreader.extractors.external import drop_untrusted_embeds
        from zenreader.settings import ALLOWED_VIDEO_RE

        html = (
            '<p>Intro</p><iframe src="https://www.youtube.com/embed/abc"></iframe>'
            '<embed src="https://ads.example.net/x.swf"><object data="y.swf"></object>'
        )
        cleaned = drop_untrusted_embeds(html, ALLOWED_VIDEO_RE)
        assert "youtube.com/embed/abc" in cleaned
        assert "ads.example.net" not in cleaned
        assert "y.swf" not in cleaned
        assert drop_untrusted_embeds("<p>plain</p>", ALLOWED_VIDEO_RE) == "<p>plain</p>"

    def test_parse_external_content(self):
        from zenreader.extractors.external import parse_external_content
        from zenreader.items import ExternalArticle

        body = parse_external_content(ExternalArticle(content_html="<p>Hello</p>"))
        assert body.name == "body"
        assert body.p.get_text() == "Hello"
        assert parse_external_content(ExternalArticle(content_html="  ")) is None

    def test_config_defaults(self):
        from zenreader.extractors.external import ExternalExtractorConfig
        from zenreader.settings import ALLOWED_VIDEO_RE, EXTERNAL_CHAR_THRESHOLD

        config = ExternalExtractorConfig()
        assert config.min_char_threshold == EXTERNAL_CHAR_THRESHOLD
        assert config.allowed_video_pattern.pattern == ALLOWED_VIDEO_RE.pattern
