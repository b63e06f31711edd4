"""zenreader.preferences - Reader style preferences and their persistence.

Preferences are an immutable :class:`ReaderPreferences` value passed into
every formatting call; persistence is an injected :class:`PreferenceStore`
(``get(keys)`` / ``set(record)``), so nothing here keeps process-wide state.

Usage::

    from zenreader.preferences import JsonFilePreferenceStore, load_preferences

    store = JsonFilePreferenceStore("~/.zenreader.json")
    prefs = load_preferences(store)
    prefs = apply_update(prefs, {"fontSize": 22})
    save_preferences(store, prefs)
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Literal, NamedTuple, Protocol, runtime_checkable

from pydantic import BaseModel, ValidationInfo, field_validator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

FONT_FALLBACK_LATIN = '"Georgia", "Times New Roman", serif'
FONT_FALLBACK_CJK = (
    '"PingFang SC", "Hiragino Sans GB", "Microsoft YaHei", "Noto Sans SC", '
    '"WenQuanYi Micro Hei", sans-serif'
)

VALID_THEMES: frozenset[str] = frozenset({"white", "beige", "gray", "black"})
VALID_ALIGNMENTS: frozenset[str] = frozenset({"justify", "left", "center"})

FONT_SIZE_RANGE = (14.0, 30.0)
LINE_HEIGHT_RANGE = (1.2, 2.4)
MAX_WIDTH_RANGE = (600.0, 1100.0)

# Persisted record keys, by model field
STORAGE_KEYS: dict[str, str] = {
    "theme": "readerTheme",
    "font_size": "readerFontSize",
    "line_height": "readerLineHeight",
    "max_width": "readerMaxWidth",
    "text_align": "readerTextAlign",
    "font_family": "readerFontFamily",
}

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


class FontChoice(NamedTuple):
    label: str
    value: str
    fallback: str = ""


_ZH_FONTS: tuple[FontChoice, ...] = (
    FontChoice("苹方", "PingFang SC"),
    FontChoice("宋体", "Songti SC"),
    FontChoice("楷体", "Kaiti SC"),
    FontChoice("圆体", "Yuanti SC"),
)

_EN_FONTS: tuple[FontChoice, ...] = (
    FontChoice("Athelas", "Athelas"),
    FontChoice("Charter", "Charter"),
    FontChoice("Georgia", "Georgia"),
    FontChoice("Iowan", "Iowan Old Style"),
    FontChoice("New York", "New York"),
    FontChoice("Palatino", "Palatino"),
    FontChoice(
        "San Francisco",
        "SF Pro Text",
        '-apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif',
    ),
    FontChoice("Seravek", "Seravek", 'BlinkMacSystemFont, "Segoe UI", sans-serif'),
    FontChoice("Times New Roman", "Times New Roman"),
)


def _clamp(value: float, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return min(high, max(low, value))


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------

class ReaderPreferences(BaseModel):
    """Presentation preferences for the reader view.

    Out-of-range numbers are clamped, unknown themes fall back to
    ``white`` and unknown alignments to ``justify``; constructing a
    preferences value never fails on a bad stored record.
    """

    theme: Literal["white", "beige", "gray", "black"] = "white"
    font_size: float = 20
    line_height: float = 1.7
    max_width: float = 900
    text_align: Literal["justify", "left", "center"] = "justify"
    font_family: str = FONT_FALLBACK_LATIN

    model_config = {"frozen": True}

    @field_validator("theme", mode="before")
    @classmethod
    def valid_theme(cls, v: Any) -> str:
        value = str(v or "").strip().lower()
        return value if value in VALID_THEMES else "white"

    @field_validator("text_align", mode="before")
    @classmethod
    def valid_alignment(cls, v: Any) -> str:
        value = str(v or "").strip().lower()
        return value if value in VALID_ALIGNMENTS else "justify"

    @field_validator("font_size", "line_height", "max_width", mode="before")
    @classmethod
    def clamp_numbers(cls, v: Any, info: ValidationInfo) -> float:
        bounds = {
            "font_size": FONT_SIZE_RANGE,
            "line_height": LINE_HEIGHT_RANGE,
            "max_width": MAX_WIDTH_RANGE,
        }[info.field_name]
        try:
            number = float(v)
        except (TypeError, ValueError):
            number = float(cls.model_fields[info.field_name].default)
        return round(_clamp(number, bounds), 3)

    @field_validator("font_family", mode="before")
    @classmethod
    def font_not_blank(cls, v: Any) -> str:
        value = str(v or "").strip()
        return value or FONT_FALLBACK_LATIN

    def to_record(self) -> dict[str, Any]:
        """Return the persisted key/value record for this value."""
        return {STORAGE_KEYS[name]: value for name, value in self.model_dump().items()}


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

@runtime_checkable
class PreferenceStore(Protocol):
    """Key/value persistence for preferences."""

    def get(self, keys: Iterable[str]) -> dict[str, Any]:
        """Return the subset of *keys* that are stored."""
        ...

    def set(self, record: Mapping[str, Any]) -> None:
        """Merge *record* into the stored values."""
        ...


class MemoryPreferenceStore:
    """In-process store; the default for tests and one-shot CLI runs."""

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, keys: Iterable[str]) -> dict[str, Any]:
        return {key: self._data[key] for key in keys if key in self._data}

    def set(self, record: Mapping[str, Any]) -> None:
        self._data.update(record)


class JsonFilePreferenceStore:
    """Store backed by a JSON object on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def _read(self) -> dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable preferences file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, keys: Iterable[str]) -> dict[str, Any]:
        data = self._read()
        return {key: data[key] for key in keys if key in data}

    def set(self, record: Mapping[str, Any]) -> None:
        data = self._read()
        data.update(record)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def load_preferences(store: PreferenceStore | None) -> ReaderPreferences:
    """Seed preferences from *store*; missing or empty entries keep their defaults."""
    if store is None:
        return ReaderPreferences()
    stored = store.get(list(STORAGE_KEYS.values()))
    values = {
        name: stored[key]
        for name, key in STORAGE_KEYS.items()
        if stored.get(key) not in (None, "")
    }
    return ReaderPreferences(**values)


def save_preferences(store: PreferenceStore | None, prefs: ReaderPreferences) -> None:
    if store is None:
        return
    store.set(prefs.to_record())


def _field_name(key: str) -> str | None:
    if key in STORAGE_KEYS:
        return key
    for name, storage_key in STORAGE_KEYS.items():
        if key == storage_key:
            return name
    snake = _CAMEL_RE.sub("_", key).lower()
    return snake if snake in STORAGE_KEYS else None


def apply_update(prefs: ReaderPreferences, update: Mapping[str, Any]) -> ReaderPreferences:
    """Return *prefs* with the recognised, non-empty values of *update* applied.

    Keys may be snake_case (``font_size``), camelCase (``fontSize``) or the
    persisted record keys (``readerFontSize``); anything else is ignored.
    """
    changes: dict[str, Any] = {}
    for key, value in update.items():
        name = _field_name(str(key))
        if name is None or value in (None, ""):
            continue
        changes[name] = value
    if not changes:
        return prefs
    return ReaderPreferences(**{**prefs.model_dump(), **changes})


def font_fallback(language: str) -> str:
    return FONT_FALLBACK_CJK if language == "zh" else FONT_FALLBACK_LATIN


def ensure_font_for_language(prefs: ReaderPreferences, language: str) -> ReaderPreferences:
    """Swap a default font stack for the one matching *language*.

    A user-chosen font is kept; only the two built-in fallback stacks are
    exchanged when they do not fit the content's script.
    """
    fallback = font_fallback(language)
    if prefs.font_family in (FONT_FALLBACK_LATIN, FONT_FALLBACK_CJK) and prefs.font_family != fallback:
        return prefs.model_copy(update={"font_family": fallback})
    return prefs


def fonts_for_language(language: str) -> list[FontChoice]:
    """Return the font choices offered for *language*."""
    return list(_ZH_FONTS if language == "zh" else _EN_FONTS)


def resolve_font_family(name: str, fallback: str = "", language: str = "en") -> str:
    """Build a CSS ``font-family`` value from a font *name* and a fallback stack.

    Names containing whitespace are quoted; generic keywords starting with
    ``-`` (``-apple-system``) are left bare.
    """
    trimmed = (name or "").strip()
    stack = (fallback or font_fallback(language)).strip()
    if not trimmed:
        return stack
    suffix = f", {stack}" if stack else ""
    if trimmed.startswith("-") or not re.search(r"\s", trimmed):
        return f"{trimmed}{suffix}"
    return f'"{trimmed}"{suffix}'


def style_variables(prefs: ReaderPreferences, language: str = "en") -> dict[str, str]:
    """Return the CSS custom properties the reader overlay is styled with."""
    font_family = prefs.font_family or font_fallback(language)
    return {
        "--rm-font-size": f"{prefs.font_size:g}px",
        "--rm-line-height": f"{prefs.line_height:g}",
        "--rm-max-width": f"{prefs.max_width:g}px",
        "--rm-align": prefs.text_align,
        "--rm-font-family": font_family,
    }
