"""Allow-list sanitizer.

Rebuilds an arbitrary subtree into a fresh, inert tree that keeps only
prose-relevant structure.  The input is never mutated: :func:`clean_node`
maps one source node to zero or more *new* nodes, and :func:`sanitize`
collects them under a new ``<div class="rm-reader-article">`` container.

Rules, in the order they apply to each node:

- stripped elements (scripts, forms, navigation, ads, disallowed embeds)
  vanish with their descendants;
- text is trimmed and re-emitted with a trailing space so words from
  unwrapped inline elements never run together;
- tags outside :data:`ALLOWED_TAGS` are unwrapped (children kept);
- allowed tags are shallow-cloned without event handlers, inline styles
  or ``javascript:`` URLs, and dropped again if they end up empty (unless
  ``img`` or in :data:`ALLOWED_EMPTY_TAGS`).

Sanitizing already-sanitized output yields an identical tree.
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup, Tag
from bs4.element import NavigableString, PageElement, PreformattedString

from zenreader.extractors.text import has_ancestor, is_unwanted, safe_str
from zenreader.settings import ALLOWED_VIDEO_RE

logger = logging.getLogger(__name__)

CONTAINER_CLASS = "rm-reader-article"

ALLOWED_TAGS: frozenset[str] = frozenset(
    {
        "p",
        "h1", "h2", "h3", "h4", "h5", "h6",
        "a",
        "ul", "ol", "li",
        "blockquote",
        "b", "i", "em", "strong", "span", "code", "pre", "time", "br",
        "img", "figure", "figcaption", "picture", "source", "video", "iframe",
        "table", "thead", "tbody", "tfoot", "tr", "td", "th",
        "caption", "colgroup", "col",
    },
)

ALLOWED_EMPTY_TAGS: frozenset[str] = frozenset(
    {
        "table", "thead", "tbody", "tfoot", "tr", "td", "th",
        "caption", "colgroup", "col",
        "source", "video", "iframe", "br",
    },
)

# Removed outright, descendants included
_STRIPPED_TAGS: frozenset[str] = frozenset(
    {
        "head", "script", "style", "noscript", "template",
        "form", "button", "input", "select", "textarea",
        "nav", "aside",
    },
)
_STRIPPED_ROLES: frozenset[str] = frozenset({"navigation", "banner", "complementary"})
_STRIPPED_CLASSES: frozenset[str] = frozenset(
    {"advert", "ads", "social", "sidebar", "comment", "comments"},
)

EMBED_TAGS: frozenset[str] = frozenset({"iframe", "object", "embed", "video"})

_URL_ATTRS: frozenset[str] = frozenset(
    {"href", "src", "action", "formaction", "poster", "data", "data-src", "data-url"},
)
_UNSAFE_ATTRS: frozenset[str] = frozenset({"style", "srcdoc"})
_SCRIPT_SCHEMES: tuple[str, ...] = ("javascript:", "vbscript:")
# URL parsers drop tab/CR/LF anywhere and leading C0 controls or spaces
_URL_NOISE_RE = re.compile(r"[\t\n\r]")
_LEADING_JUNK_RE = re.compile(r"^[\x00-\x20]+")
_WEB_URL_RE = re.compile(r"^(https?:)?//", re.IGNORECASE)

_EMBED_SRC_ATTRS: tuple[str, ...] = ("src", "data-src", "data-url", "data")
_SOURCE_SRC_ATTRS: tuple[str, ...] = ("src", "data-src", "data-srcset")


def _normalize_url(value: object) -> str:
    return _LEADING_JUNK_RE.sub("", _URL_NOISE_RE.sub("", safe_str(value))).lower()


def is_script_url(value: object) -> bool:
    """Return True if *value* would run as a ``javascript:``/``vbscript:`` URL."""
    return _normalize_url(value).startswith(_SCRIPT_SCHEMES)


def is_web_url(value: object) -> bool:
    """Return True for ``http:``, ``https:`` and protocol-relative URLs."""
    return bool(_WEB_URL_RE.match(_normalize_url(value)))


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def trusted_embed_src(el: Tag, names: tuple[str, ...]) -> str:
    """Return the first web URL among *names* on *el* that points at a trusted video host."""
    for name in names:
        value = safe_str(el.get(name)).strip()
        if is_web_url(value) and ALLOWED_VIDEO_RE.search(value):
            return value
    return ""


def is_allowed_video(el: Tag) -> bool:
    """Return True for a ``<video>`` with a source or an embed from a trusted video host."""
    if el.name == "video":
        return bool(safe_str(el.get("src")).strip() or el.find("source"))
    if trusted_embed_src(el, _EMBED_SRC_ATTRS):
        return True
    return any(trusted_embed_src(source, _SOURCE_SRC_ATTRS) for source in el.find_all("source"))


def is_stripped(el: Tag) -> bool:
    """Return True if *el* must be removed together with its descendants."""
    if el.name in _STRIPPED_TAGS:
        return True
    if safe_str(el.get("role")).strip().lower() in _STRIPPED_ROLES:
        return True
    classes = {str(c).lower() for c in (el.get("class") or [])}
    if classes & _STRIPPED_CLASSES:
        return True
    if el.name in EMBED_TAGS and not is_allowed_video(el):
        return True
    return is_unwanted(el)


def clean_attrs(attrs: dict) -> dict:
    """Return a copy of *attrs* without event handlers, inline styles or script URLs."""
    cleaned: dict = {}
    for name, value in attrs.items():
        lowered = name.lower()
        if lowered.startswith("on") or lowered in _UNSAFE_ATTRS:
            continue
        if lowered in _URL_ATTRS and is_script_url(value):
            continue
        cleaned[name] = list(value) if isinstance(value, list) else value
    return cleaned


# ---------------------------------------------------------------------------
# Tree rebuild
# ---------------------------------------------------------------------------

def _clone_allowed(node: Tag, factory: BeautifulSoup) -> Tag | None:
    attrs = clean_attrs(node.attrs)
    if node.name == "img" and not safe_str(attrs.get("src")).strip():
        return None
    clone = factory.new_tag(node.name, attrs=attrs)
    if node.name == "iframe":
        src = trusted_embed_src(node, _EMBED_SRC_ATTRS[:3])
        if src:
            clone["src"] = src
        elif clone.has_attr("src"):
            del clone["src"]
        clone["loading"] = "lazy"
        clone["referrerpolicy"] = "no-referrer-when-downgrade"
    elif node.name == "video":
        clone["controls"] = "controls"
        if not clone.has_attr("preload"):
            clone["preload"] = "metadata"
    return clone


def clean_node(node: PageElement, factory: BeautifulSoup) -> list[PageElement]:
    """Map *node* to the new nodes that replace it (none, one, or its unwrapped children)."""
    if isinstance(node, NavigableString):
        if isinstance(node, PreformattedString):
            return []
        if has_ancestor(node, ("pre",)):
            return [NavigableString(str(node))]
        text = str(node).strip()
        return [NavigableString(text + " ")] if text else []

    if not isinstance(node, Tag) or is_stripped(node):
        return []

    if node.name not in ALLOWED_TAGS:
        unwrapped: list[PageElement] = []
        for child in node.children:
            unwrapped.extend(clean_node(child, factory))
        return unwrapped

    clone = _clone_allowed(node, factory)
    if clone is None:
        return []
    for child in node.children:
        for cleaned in clean_node(child, factory):
            clone.append(cleaned)
    if not clone.contents and node.name != "img" and node.name not in ALLOWED_EMPTY_TAGS:
        return []
    return [clone]


def sanitize(root: PageElement | None) -> Tag:
    """Return a new ``div.rm-reader-article`` holding the sanitized content of *root*."""
    factory = BeautifulSoup("", "lxml")
    container = factory.new_tag("div", attrs={"class": CONTAINER_CLASS})
    if root is None:
        return container
    children = root.children if isinstance(root, Tag) else [root]
    for child in children:
        for cleaned in clean_node(child, factory):
            container.append(cleaned)
    return container


def sanitize_html(html: str) -> Tag | None:
    """Parse an HTML fragment and sanitize its ``<body>``; None if it cannot be parsed."""
    if not html or not html.strip():
        return None
    try:
        soup = BeautifulSoup(html, "lxml")
    except Exception as exc:
        logger.debug("Could not parse HTML fragment: %s", exc)
        return None
    body = soup.find("body")
    return sanitize(body if isinstance(body, Tag) else soup)
