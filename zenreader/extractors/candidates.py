"""Candidate selection: find the subtree most likely to be the article body.

There is no tag-based ground truth, so elements are ranked by how much
prose they hold::

    score = collapsed_text_length(el) - 0.5 * collapsed_text_length(link text in el)

Link-heavy blocks (navigation, link farms) fall towards zero and are
dropped; ties keep document order.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from bs4 import Tag

from zenreader.extractors.text import (
    closest,
    collapsed_text_length,
    has_ancestor,
    is_unwanted,
    visible_text,
)
from zenreader.settings import CANDIDATE_MIN_PARAGRAPH_CHARS, LINK_TEXT_PENALTY

logger = logging.getLogger(__name__)

# Semantic / structural containers tried before paragraph parents
CANDIDATE_SELECTORS: tuple[str, ...] = (
    "article",
    "main",
    '[role="main"]',
    ".article",
    ".article-body",
    ".post",
    ".post-content",
    ".entry-content",
    ".content",
)

# Nearest block container of a long paragraph
_PARAGRAPH_CONTAINERS: tuple[str, ...] = ("article", "section", "div")

# Never the article, whatever their text density
_EXCLUDED_TAGS: frozenset[str] = frozenset({"nav", "aside", "footer", "form"})


class Candidate(NamedTuple):
    element: Tag
    score: float


def score_element(el: Tag) -> float:
    """Return the link-penalised text density score of *el*."""
    link_text = " ".join(visible_text(a) for a in el.find_all("a"))
    return collapsed_text_length(el) - collapsed_text_length(link_text) * LINK_TEXT_PENALTY


def _is_excluded(el: Tag) -> bool:
    return is_unwanted(el) or el.name in _EXCLUDED_TAGS or has_ancestor(el, _EXCLUDED_TAGS)


def _selector_candidates(root: Tag) -> list[Tag]:
    found: list[Tag] = []
    try:
        found = root.select(", ".join(CANDIDATE_SELECTORS))
    except Exception as exc:
        logger.debug("Candidate selector query failed: %s", exc)
    return [el for el in found if isinstance(el, Tag)]


def _paragraph_parents(root: Tag) -> list[Tag]:
    parents: list[Tag] = []
    for p in root.find_all("p"):
        if not isinstance(p, Tag) or is_unwanted(p):
            continue
        if len(visible_text(p).strip()) <= CANDIDATE_MIN_PARAGRAPH_CHARS:
            continue
        parent = closest(p.parent, _PARAGRAPH_CONTAINERS) or p.parent
        if isinstance(parent, Tag) and parent.name != "[document]":
            parents.append(parent)
    return parents


def candidate_pool(root: Tag) -> list[Tag]:
    """Return selector matches then paragraph parents, deduplicated, boilerplate removed."""
    pool: list[Tag] = []
    seen: set[int] = set()
    for el in _selector_candidates(root) + _paragraph_parents(root):
        if id(el) in seen or _is_excluded(el):
            continue
        seen.add(id(el))
        pool.append(el)
    return pool


def rank_candidates(root: Tag) -> list[Candidate]:
    """Score the pool, drop non-positive scores and sort descending (stable)."""
    scored = [Candidate(el, score_element(el)) for el in candidate_pool(root)]
    ranked = sorted((c for c in scored if c.score > 0), key=lambda c: c.score, reverse=True)
    logger.debug("Ranked %d of %d candidates", len(ranked), len(scored))
    return ranked


def select_candidate(root: Tag) -> Tag | None:
    """Return the best-scoring candidate element, or None when the pool is empty."""
    ranked = rank_candidates(root)
    if not ranked:
        return None
    best = ranked[0]
    logger.debug("Selected <%s> with score %.1f", best.element.name, best.score)
    return best.element
