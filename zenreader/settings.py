"""Tunable extraction settings for zenreader.

Module-level constants are the defaults; :class:`ExtractionConfig` carries
them into a single :func:`~zenreader.extractors.pipeline.extract_article`
call so callers (and YAML profiles, see :mod:`zenreader.profiles`) can
override any of them without touching global state.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Acceptance thresholds (collapsed, whitespace-free character counts)
# ---------------------------------------------------------------------------

# Candidate strategy, first pass
PRIMARY_TEXT_THRESHOLD = 300

# External extractor output
EXTERNAL_TEXT_THRESHOLD = 120

# Candidate strategy, salvage pass
SALVAGE_TEXT_THRESHOLD = 80

# Passed to the external extractor as its own minimum article size
EXTERNAL_CHAR_THRESHOLD = 200

# ---------------------------------------------------------------------------
# Paragraph fallback
# ---------------------------------------------------------------------------

# More than this many collected nodes are required
FALLBACK_MIN_NODES = 3

# <p> elements shorter than this are skipped
FALLBACK_MIN_PARAGRAPH_CHARS = 30

# ---------------------------------------------------------------------------
# Candidate scoring
# ---------------------------------------------------------------------------

CANDIDATE_MIN_PARAGRAPH_CHARS = 60
LINK_TEXT_PENALTY = 0.5

# ---------------------------------------------------------------------------
# Outline / language
# ---------------------------------------------------------------------------

OUTLINE_MAX_ENTRIES = 30
LANGUAGE_SAMPLE_SIZE = 8000

DEFAULT_TITLE = "Zen Reader"

# Video hosts whose embeds survive sanitization
ALLOWED_VIDEO_RE = re.compile(
    r"//(www\.)?((dailymotion|youtube|youtube-nocookie|player\.vimeo|v\.qq|bilibili|live\.bilibili)\.com"
    r"|(archive|upload\.wikimedia)\.org|player\.twitch\.tv|brightcove\.com)",
    re.IGNORECASE,
)


class ExtractionConfig(BaseModel):
    """Per-call extraction settings."""

    primary_threshold: int = Field(default=PRIMARY_TEXT_THRESHOLD, ge=0)
    external_threshold: int = Field(default=EXTERNAL_TEXT_THRESHOLD, ge=0)
    salvage_threshold: int = Field(default=SALVAGE_TEXT_THRESHOLD, ge=0)
    external_char_threshold: int = Field(default=EXTERNAL_CHAR_THRESHOLD, ge=0)
    fallback_min_nodes: int = Field(default=FALLBACK_MIN_NODES, ge=0)
    fallback_min_paragraph_chars: int = Field(default=FALLBACK_MIN_PARAGRAPH_CHARS, ge=0)
    outline_max_entries: int = Field(default=OUTLINE_MAX_ENTRIES, ge=1)
    debug: bool = False

    model_config = {"extra": "forbid"}
