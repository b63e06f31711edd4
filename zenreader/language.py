"""Language detection helpers.

Only two answers are needed: ``"zh"`` selects the CJK font stack and
heading conventions, everything else reads as ``"en"``.
"""

from __future__ import annotations

import logging

from bs4.element import PageElement

from zenreader.extractors.text import visible_text
from zenreader.settings import LANGUAGE_SAMPLE_SIZE

logger = logging.getLogger(__name__)

# Basic Latin letters through Latin Extended-B, plus Latin Extended Additional
_LATIN_RANGES: tuple[tuple[int, int], ...] = ((0x0041, 0x024F), (0x1E00, 0x1EFF))

# CJK Unified Ideographs, Extension A, Compatibility Ideographs
_CJK_RANGES: tuple[tuple[int, int], ...] = (
    (0x3400, 0x4DBF),
    (0x4E00, 0x9FFF),
    (0xF900, 0xFAFF),
)


def _in_ranges(code: int, ranges: tuple[tuple[int, int], ...]) -> bool:
    return any(low <= code <= high for low, high in ranges)


def count_scripts(text: str) -> tuple[int, int]:
    """Return ``(latin, cjk)`` character counts for *text*."""
    latin = cjk = 0
    for ch in text:
        code = ord(ch)
        if _in_ranges(code, _LATIN_RANGES):
            latin += 1
        elif _in_ranges(code, _CJK_RANGES):
            cjk += 1
    return latin, cjk


def detect_language(source: str | PageElement | None, sample_size: int = LANGUAGE_SAMPLE_SIZE) -> str:
    """Classify the dominant script of *source* as ``"zh"`` or ``"en"``.

    Ties go to ``"en"``.
    """
    if source is None:
        return "en"
    text = visible_text(source) if isinstance(source, PageElement) else source
    latin, cjk = count_scripts(text[:sample_size])
    logger.debug("Language sample: latin=%d cjk=%d", latin, cjk)
    return "zh" if cjk > latin else "en"


def normalize_language_hint(hint: str | None) -> str | None:
    """Map an extractor-supplied language code onto ``"zh"``/``"en"``; None when absent."""
    if not hint or not hint.strip():
        return None
    return "zh" if hint.strip().lower().startswith("zh") else "en"
