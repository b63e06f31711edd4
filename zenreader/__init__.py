"""zenreader - pull the readable article out of a web page.

Single-page usage::

    from zenreader import extract_article

    article = extract_article(html, url="https://example.com/post")
    if article is not None:
        print(article.title, article.metadata.author)
        print(article.to_markdown())

Host integration::

    from zenreader import ZenReader
    from zenreader.preferences import JsonFilePreferenceStore

    reader = ZenReader(store=JsonFilePreferenceStore("~/.zenreader.json"))
    reader.handle_message({"type": "TOGGLE_READER_ACTION", "html": html})

Plugin extension point::

    from zenreader import register_extractor

    class MyExtractor:
        name = "mine"
        def try_extract(self, document, config):
            return None

    register_extractor("mine", MyExtractor)
"""

from zenreader.extractors.pipeline import extract_article
from zenreader.items import ExtractedArticle, Metadata, OutlineEntry
from zenreader.plugins import get_extractor, register_extractor
from zenreader.preferences import ReaderPreferences
from zenreader.reader import ZenReader
from zenreader.settings import ExtractionConfig

__version__ = "0.1.0"
__all__ = [
    "ExtractedArticle",
    "ExtractionConfig",
    "Metadata",
    "OutlineEntry",
    "ReaderPreferences",
    "ZenReader",
    "extract_article",
    "get_extractor",
    "register_extractor",
]
