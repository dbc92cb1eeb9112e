"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"

ARTICLE_URL = "https://example.com/blog/growing-tomatoes"


def _read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def article_html() -> str:
    return _read_fixture("article.html")


@pytest.fixture
def boilerplate_html() -> str:
    return _read_fixture("boilerplate.html")


@pytest.fixture
def minimal_html() -> str:
    return _read_fixture("minimal.html")


@pytest.fixture
def article_url() -> str:
    return ARTICLE_URL
