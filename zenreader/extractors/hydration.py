"""Lazy-media and deferred-content hydration.

Framework lazy-loading keeps real text and image URLs in ``data-*``
attributes, ``<template>`` blocks and ``<noscript>`` fallbacks until a
script runs.  These passes copy that payload into the live attributes of a
*working copy* of the page so scoring and sanitization see the content as
if it had loaded.

Every pass is idempotent and best-effort: malformed attributes or markup
are skipped, never raised.  Order matters; :func:`hydrate_document` runs
them as:

1. :func:`hydrate_lazy_text`
2. :func:`unwrap_noscript_images`
3. :func:`hydrate_media_sources`
4. :func:`fix_lazy_images`
"""

from __future__ import annotations

import copy
import logging
import re

from bs4 import BeautifulSoup, Tag
from bs4.element import NavigableString

from zenreader.extractors.text import normalize_whitespace, safe_str, visible_text

logger = logging.getLogger(__name__)

HYDRATED_MARKER = "data-rm-hydrated"

# ---------------------------------------------------------------------------
# Deferred attribute tables
# ---------------------------------------------------------------------------

LAZY_TEXT_ATTRS: tuple[str, ...] = (
    "data-text",
    "data-content",
    "data-body",
    "data-article-body",
    "data-description",
    "data-copy",
    "data-message",
)

LAZY_HTML_ATTRS: tuple[str, ...] = (
    "data-lazy-html",
    "data-html",
    "data-body-html",
    "data-raw-html",
)

LAZY_SRC_ATTRS: tuple[str, ...] = (
    "data-src",
    "data-original",
    "data-url",
    "data-image",
    "data-lazy",
    "data-lazy-src",
    "data-async-src",
    "data-href",
    "data-src-large",
    "data-src-medium",
    "data-src-small",
)

LAZY_SRCSET_ATTRS: tuple[str, ...] = (
    "data-srcset",
    "data-srcset-large",
    "data-srcset-medium",
    "data-srcset-small",
    "data-original-set",
    "data-lazy-srcset",
)

LAZY_POSTER_ATTRS: tuple[str, ...] = (
    "data-poster",
    "data-thumb",
    "data-thumbnail",
    "data-preview",
)

TEMPLATE_MIN_TEXT = 80
TEMPLATE_PARENT_MAX_TEXT = 40

_MARKUP_RE = re.compile(r"<.+>", re.DOTALL)
_NOSCRIPT_IMAGE_RE = re.compile(r"<img|<picture", re.IGNORECASE)
PLACEHOLDER_RE = re.compile(r"(transparent|spacer\.gif|blank\.gif|1x1)", re.IGNORECASE)
_BASE64_RE = re.compile(r"data:image/([\w+.-]+);base64,", re.IGNORECASE)
_IMAGE_EXT_RE = re.compile(r"\.(jpe?g|png|webp|gif|avif|bmp)", re.IGNORECASE)
_SRCSET_VALUE_RE = re.compile(r"\.(jpe?g|png|webp|gif|avif|bmp)\s+\d", re.IGNORECASE)
_SRC_VALUE_RE = re.compile(r"^\s*\S+\.(jpe?g|png|webp|gif|avif|bmp)\S*\s*$", re.IGNORECASE)
_LAZY_CLASS_RE = re.compile(r"lazy", re.IGNORECASE)


def _factory(root: Tag) -> BeautifulSoup:
    """Return the soup that owns *root*, used to create new tags."""
    top: Tag = root
    while top.parent is not None:
        top = top.parent
    if isinstance(top, BeautifulSoup):
        return top
    return BeautifulSoup("", "lxml")


def _parse_fragment(markup: str) -> Tag | None:
    """Parse *markup* into a detached ``<div>`` wrapper, or None when unparseable."""
    try:
        soup = BeautifulSoup(f"<div>{markup}</div>", "lxml")
    except Exception as exc:
        logger.debug("Fragment parse failed: %s", exc)
        return None
    wrapper = soup.find("div")
    return wrapper if isinstance(wrapper, Tag) else None


# ---------------------------------------------------------------------------
# 1. Text / HTML hydration
# ---------------------------------------------------------------------------

def _with_any_attr(root: Tag, names: tuple[str, ...]) -> list[Tag]:
    return [
        el for el in root.find_all(True)
        if isinstance(el, Tag) and any(el.has_attr(name) for name in names)
    ]


def _hydrate_text_attrs(root: Tag) -> None:
    for el in _with_any_attr(root, LAZY_TEXT_ATTRS):
        if el.get(HYDRATED_MARKER) or visible_text(el).strip():
            continue
        for attr in LAZY_TEXT_ATTRS:
            val = safe_str(el.get(attr)).strip()
            if val:
                el.clear()
                el.append(NavigableString(val))
                el[HYDRATED_MARKER] = "1"
                break


def _hydrate_html_attrs(root: Tag) -> None:
    for el in _with_any_attr(root, LAZY_HTML_ATTRS):
        if el.get(HYDRATED_MARKER) or el.decode_contents().strip():
            continue
        for attr in LAZY_HTML_ATTRS:
            val = safe_str(el.get(attr))
            if not val or not _MARKUP_RE.search(val):
                continue
            fragment = _parse_fragment(val)
            if fragment is None:
                continue
            for child in list(fragment.contents):
                el.append(child.extract())
            el[HYDRATED_MARKER] = "1"
            break


def _hydrate_templates(root: Tag) -> None:
    for tpl in root.find_all("template"):
        if not isinstance(tpl, Tag) or tpl.get(HYDRATED_MARKER) == "1":
            continue
        text = normalize_whitespace(tpl.get_text(" "))
        if len(text) < TEMPLATE_MIN_TEXT:
            continue
        parent = tpl.parent
        if not isinstance(parent, Tag):
            continue
        siblings_text = " ".join(
            visible_text(child) for child in parent.contents if child is not tpl
        ).strip()
        if len(parent.contents) > 1 and len(siblings_text) > TEMPLATE_PARENT_MAX_TEXT:
            continue
        for child in tpl.contents:
            parent.append(copy.copy(child))
        tpl[HYDRATED_MARKER] = "1"


def hydrate_lazy_text(root: Tag) -> None:
    """Fill empty elements from deferred text/HTML attributes and large templates."""
    _hydrate_text_attrs(root)
    _hydrate_html_attrs(root)
    _hydrate_templates(root)


# ---------------------------------------------------------------------------
# 2. <noscript> image unwrapping
# ---------------------------------------------------------------------------

def _has_visible_image(container: Tag) -> bool:
    for img in container.find_all(["img", "picture"]):
        if not any(parent.name == "noscript" for parent in img.parents):
            return True
    return False


def _noscript_markup(ns: Tag) -> str:
    # html.parser/lxml may hand back either raw text or parsed children
    if all(isinstance(child, NavigableString) for child in ns.contents):
        return ns.get_text()
    return ns.decode_contents()


def unwrap_noscript_images(root: Tag) -> None:
    """Surface images hidden in ``<noscript>`` fallbacks."""
    for ns in list(root.find_all("noscript")):
        if not isinstance(ns, Tag):
            continue
        markup = _noscript_markup(ns)
        if not _NOSCRIPT_IMAGE_RE.search(markup):
            continue
        fragment = _parse_fragment(markup)
        replacement = fragment.find(["img", "picture"]) if fragment is not None else None
        parent = ns.parent
        if not isinstance(replacement, Tag) or not isinstance(parent, Tag):
            continue
        if _has_visible_image(parent):
            continue
        clone = copy.copy(replacement)
        ns.insert_before(clone)
        if parent.name in ("figure", "figcaption"):
            ns.decompose()


# ---------------------------------------------------------------------------
# 3. Deferred source attributes
# ---------------------------------------------------------------------------

def _set_if_needed(el: Tag, attr: str, val: object) -> None:
    value = safe_str(val).strip()
    if not value:
        return
    current = safe_str(el.get(attr)).strip()
    if current and not PLACEHOLDER_RE.search(current):
        return
    el[attr] = value


def hydrate_media_sources(root: Tag) -> None:
    """Copy ``data-src``-style attributes into real ``src``/``srcset``/``poster``."""
    soup = _factory(root)
    for el in root.find_all(["img", "source", "video"]):
        for name in LAZY_SRC_ATTRS:
            _set_if_needed(el, "src", el.get(name))
        for name in LAZY_SRCSET_ATTRS:
            _set_if_needed(el, "srcset", el.get(name))

    for video in root.find_all("video"):
        for name in LAZY_POSTER_ATTRS:
            _set_if_needed(video, "poster", video.get(name))
        if not video.get("preload"):
            video["preload"] = "metadata"

    for fig in root.find_all("figure"):
        if fig.find("img"):
            continue
        src = safe_str(fig.get("data-src")).strip()
        srcset = safe_str(fig.get("data-srcset")).strip()
        if not src and not srcset:
            continue
        img = soup.new_tag("img")
        if src:
            img["src"] = src
        if srcset:
            img["srcset"] = srcset
        fig.append(img)


# ---------------------------------------------------------------------------
# 4. Heuristic src/srcset recovery
# ---------------------------------------------------------------------------

def first_srcset_url(srcset: str) -> str:
    """Return the URL of the first candidate in a ``srcset`` list."""
    first = srcset.split(",")[0].strip()
    return first.split()[0] if first else ""


def _strip_inline_base64(elem: Tag) -> None:
    src = safe_str(elem.get("src"))
    match = _BASE64_RE.search(src)
    if not match or match.group(1).lower() == "svg+xml":
        return
    for name, value in elem.attrs.items():
        if name == "src":
            continue
        if _IMAGE_EXT_RE.search(safe_str(value)):
            del elem["src"]
            return


def _has_source(elem: Tag) -> bool:
    srcset = safe_str(elem.get("srcset")).strip()
    return bool(safe_str(elem.get("src")).strip() or (srcset and srcset != "null"))


def _copy_image_attrs(elem: Tag, soup: BeautifulSoup) -> None:
    for name, raw in list(elem.attrs.items()):
        if name in ("src", "srcset", "alt"):
            continue
        value = safe_str(raw)
        if not _IMAGE_EXT_RE.search(value):
            continue
        if _SRCSET_VALUE_RE.search(value):
            copy_to = "srcset"
        elif _SRC_VALUE_RE.match(value):
            copy_to = "src"
        else:
            continue
        if elem.name in ("img", "picture", "source"):
            elem[copy_to] = value.strip()
        elif elem.name == "figure" and not elem.find(["img", "picture"]):
            img = soup.new_tag("img")
            img[copy_to] = value.strip()
            elem.append(img)


def fix_lazy_images(root: Tag) -> None:
    """Recover ``src``/``srcset`` from arbitrary attributes holding image URLs."""
    soup = _factory(root)
    for elem in root.find_all(["img", "picture", "figure", "source"]):
        _strip_inline_base64(elem)
        if not _has_source(elem) or _LAZY_CLASS_RE.search(safe_str(elem.get("class"))):
            _copy_image_attrs(elem, soup)

        srcset = safe_str(elem.get("srcset")).strip()
        if elem.name == "img" and not safe_str(elem.get("src")).strip() and srcset:
            first = first_srcset_url(srcset)
            if first:
                elem["src"] = first


def hydrate_document(root: Tag) -> Tag:
    """Run every hydration pass over *root* in order and return it."""
    for step in (hydrate_lazy_text, unwrap_noscript_images, hydrate_media_sources, fix_lazy_images):
        try:
            step(root)
        except Exception as exc:
            logger.debug("Hydration step %s failed: %s", step.__name__, exc)
    return root
