"""Extraction sub-package: hydration, candidate scoring, sanitizing and post-processing."""

from .candidates import select_candidate
from .hydration import hydrate_document
from .markdown import html_to_markdown
from .outline import build_outline
from .pipeline import extract_article
from .sanitizer import sanitize, sanitize_html

__all__ = [
    "build_outline",
    "extract_article",
    "html_to_markdown",
    "hydrate_document",
    "sanitize",
    "sanitize_html",
    "select_candidate",
]
