"""zenreader.plugins - Extension point for external article extractors.

An external extractor is any object with a ``name`` and a
``try_extract(document, config)`` method; it follows a
``runtime_checkable`` ``Protocol`` so tests can use ``isinstance()``
without inheriting from a base class.

Usage::

    from zenreader.plugins import register_extractor

    class MyExtractor:
        name = "mine"
        def try_extract(self, document, config):
            return None  # or an ExternalArticle

    register_extractor("mine", MyExtractor)

Running without any external extractor is a valid configuration.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from zenreader.extractors.external import ExternalExtractorConfig
    from zenreader.items import ExternalArticle

# ---------------------------------------------------------------------------
# Protocol definition
# ---------------------------------------------------------------------------

@runtime_checkable
class ExternalExtractor(Protocol):
    """Third-party extractor consulted as one strategy of the orchestrator."""

    name: str

    def try_extract(self, document: Any, config: ExternalExtractorConfig) -> ExternalArticle | None:
        """Return the extracted article, or None when nothing usable was found."""
        ...


# ---------------------------------------------------------------------------
# Module-level registry
# ---------------------------------------------------------------------------

ExtractorFactory = Callable[[], ExternalExtractor]

_registry: dict[str, ExtractorFactory] = {}


def _builtin_factories() -> dict[str, ExtractorFactory]:
    from zenreader.extractors.external import ReadabilityExtractor, TrafilaturaExtractor

    return {
        ReadabilityExtractor.name: ReadabilityExtractor,
        TrafilaturaExtractor.name: TrafilaturaExtractor,
    }


def register_extractor(name: str, factory: ExtractorFactory) -> None:
    """Register *factory* under *name*, replacing any previous registration."""
    _registry[name] = factory


def available_extractors() -> list[str]:
    """Return the names of every built-in and registered extractor."""
    return sorted({**_builtin_factories(), **_registry})


def get_extractor(name: str | None) -> ExternalExtractor | None:
    """Instantiate the extractor registered as *name*; None/"none" means no extractor.

    Raises:
        KeyError: when *name* is not registered.
    """
    if not name or name.lower() == "none":
        return None
    factories = {**_builtin_factories(), **_registry}
    if name not in factories:
        raise KeyError(f"Unknown extractor {name!r}; available: {', '.join(sorted(factories))}")
    return factories[name]()


def clear_plugins() -> None:
    """Remove all registered extractors. Primarily for use in tests."""
    _registry.clear()
