"""YAML extraction profiles.

A profile file holds a ``default`` block and optional per-domain
overrides; the longest domain matching the page URL wins::

    default:
      primary_threshold: 300
    domains:
      example.com:
        salvage_threshold: 40
      blog.example.com:
        fallback_min_nodes: 5
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml
from pydantic import ValidationError

from zenreader.settings import ExtractionConfig


class ConfigError(ValueError):
    """Raised when a profile file cannot be read or does not validate."""


def _matching_domain(domains: dict[str, Any], url: str) -> dict[str, Any]:
    netloc = urlparse(url).netloc.lower().split(":")[0]
    if not netloc:
        return {}
    best_key = ""
    best_cfg: dict[str, Any] = {}
    for key, cfg in domains.items():
        if not isinstance(key, str) or not isinstance(cfg, dict):
            continue
        key_lower = key.lower()
        if (netloc == key_lower or netloc.endswith("." + key_lower)) and (
            len(key_lower) > len(best_key)
        ):
            best_key = key_lower
            best_cfg = cfg
    return best_cfg


def load_profile(path: str | Path, url: str = "") -> dict[str, Any]:
    """Load the YAML profile at *path* and return the settings merged for *url*."""
    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot read profile {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Profile {path} must be a mapping")

    default = data.get("default") or {}
    domains = data.get("domains") or {}
    if not isinstance(default, dict) or not isinstance(domains, dict):
        raise ConfigError(f"Profile {path}: 'default' and 'domains' must be mappings")

    merged: dict[str, Any] = dict(default)
    merged.update(_matching_domain(domains, url))
    return merged


def load_config(path: str | Path, url: str = "") -> ExtractionConfig:
    """Return the :class:`ExtractionConfig` a profile file selects for *url*.

    Raises:
        ConfigError: when the file is unreadable, malformed or holds
            unknown / out-of-range settings.
    """
    settings = load_profile(path, url)
    try:
        return ExtractionConfig(**settings)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings in {path}: {exc}") from exc
