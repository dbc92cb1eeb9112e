"""HTML normalization and main-content isolation.

Steps, in order:
  1. Parse defensively with BeautifulSoup + lxml (never raises).
  2. Strip comments, non-content tags, and hidden elements.
  3. Pick the main-content subtree via priority CSS selectors, falling back
     to ``<body>`` minus navigation chrome.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from bs4 import BeautifulSoup, Comment, Tag

from pagefit.policy import DEFAULT_POLICY, CleaningPolicy

logger = logging.getLogger(__name__)


class NormalizedDocument(NamedTuple):
    document: BeautifulSoup  # cleaned full document (head included)
    root: Tag                # main-content subtree
    method: str              # "selector:<css>" | "fallback_body" | "fallback_document"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _empty_soup() -> BeautifulSoup:
    return BeautifulSoup("", "lxml")


def parse_html(html: str | None) -> BeautifulSoup:
    """Parse *html* into a soup; empty or unparseable input gives an empty tree."""
    if not html or not html.strip():
        return _empty_soup()
    try:
        return BeautifulSoup(html, "lxml")
    except Exception as exc:
        logger.debug("HTML parse failed, using empty document: %s", exc)
        return _empty_soup()


# ---------------------------------------------------------------------------
# Cleaning
# ---------------------------------------------------------------------------

def _decompose_all(elements: list[Tag]) -> int:
    """Decompose *elements*, skipping ones already gone with an ancestor."""
    removed = 0
    for el in elements:
        if el.decomposed:
            continue
        el.decompose()
        removed += 1
    return removed


def clean_document(soup: BeautifulSoup, policy: CleaningPolicy = DEFAULT_POLICY) -> BeautifulSoup:
    """Remove comments, non-content tags, and hidden elements from *soup* in-place."""
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    removed = _decompose_all(soup.find_all(sorted(policy.remove_tags)))

    hidden = [
        el for el in soup.find_all(True)
        if isinstance(el, Tag) and policy.is_hidden(el.attrs)
    ]
    removed += _decompose_all(hidden)

    logger.debug("clean_document removed %d element(s)", removed)
    return soup


def unwrap_inline(soup: BeautifulSoup, policy: CleaningPolicy = DEFAULT_POLICY) -> BeautifulSoup:
    """Replace every unwrap-set element with its children, in place."""
    for el in soup.find_all(sorted(policy.unwrap_tags)):
        el.unwrap()
    soup.smooth()
    return soup


# ---------------------------------------------------------------------------
# Main-content selection
# ---------------------------------------------------------------------------

def select_main_content(
    soup: BeautifulSoup,
    policy: CleaningPolicy = DEFAULT_POLICY,
) -> tuple[Tag, str]:
    """Return ``(subtree, method)`` for the main content of a cleaned *soup*."""
    for selector in policy.main_content_selectors:
        try:
            match = soup.select_one(selector)
        except Exception as exc:
            logger.debug("CSS selector %r failed: %s", selector, exc)
            continue
        if isinstance(match, Tag):
            return match, f"selector:{selector}"

    body = soup.find("body")
    root: Tag = body if isinstance(body, Tag) else soup
    for selector in policy.fallback_remove_selectors:
        try:
            matches = root.select(selector)
        except Exception as exc:
            logger.debug("CSS selector %r failed: %s", selector, exc)
            continue
        _decompose_all(matches)
    return root, "fallback_body" if root is body else "fallback_document"


def normalize_html(html: str | None, policy: CleaningPolicy = DEFAULT_POLICY) -> NormalizedDocument:
    """Parse and clean *html*, then isolate its main-content subtree."""
    soup = clean_document(parse_html(html), policy)
    root, method = select_main_content(soup, policy)
    logger.debug("main content chosen via %s", method)
    return NormalizedDocument(document=soup, root=root, method=method)


# ---------------------------------------------------------------------------
# Plain-text path
# ---------------------------------------------------------------------------

def extract_text(html: str | None, policy: CleaningPolicy = DEFAULT_POLICY) -> str:
    """Return the visible text of *html*, one trimmed non-blank line per line."""
    soup = unwrap_inline(clean_document(parse_html(html), policy), policy)
    body = soup.find("body")
    text = (body if isinstance(body, Tag) else soup).get_text()
    return "\n".join(line.strip() for line in text.splitlines() if line.strip())
