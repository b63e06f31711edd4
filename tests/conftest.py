"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def article_html() -> str:
    return _read_fixture("article.html")


@pytest.fixture
def chinese_html() -> str:
    return _read_fixture("chinese.html")


@pytest.fixture
def fallback_html() -> str:
    return _read_fixture("fallback.html")


@pytest.fixture
def no_content_html() -> str:
    return _read_fixture("no_content.html")


@pytest.fixture
def article_path() -> Path:
    return FIXTURES_DIR / "article.html"


@pytest.fixture(autouse=True)
def _reset_plugins():
    from zenreader.plugins import clear_plugins

    clear_plugins()
    yield
    clear_plugins()
