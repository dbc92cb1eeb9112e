"""Cleaning policy: which elements are noise, hidden, or main content."""

from __future__ import annotations

import re
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Default tables (built once at import, never mutated)
# ---------------------------------------------------------------------------

_REMOVE_TAGS: frozenset[str] = frozenset(
    {
        "script",
        "style",
        "noscript",
        "iframe",
        "svg",
        "canvas",
        "video",
        "audio",
        "form",
        "input",
        "button",
        "select",
        "textarea",
    },
)

_UNWRAP_TAGS: frozenset[str] = frozenset({"span", "font", "b", "i", "u", "strong", "em"})

# Tried in order; the first selector with a match wins
_MAIN_CONTENT_SELECTORS: tuple[str, ...] = (
    "main",
    "article",
    '[role="main"]',
    "#content",
    ".content",
    "#main",
    ".main",
)

_FALLBACK_REMOVE_SELECTORS: tuple[str, ...] = (
    "nav",
    "header",
    "footer",
    "aside",
    ".sidebar",
    "#sidebar",
    ".nav",
    ".menu",
)

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class CleaningPolicy:
    """Immutable set of rules applied by :mod:`pagefit.extractors.normalize`."""

    remove_tags: frozenset[str] = _REMOVE_TAGS
    unwrap_tags: frozenset[str] = _UNWRAP_TAGS
    main_content_selectors: tuple[str, ...] = _MAIN_CONTENT_SELECTORS
    fallback_remove_selectors: tuple[str, ...] = _FALLBACK_REMOVE_SELECTORS

    def is_hidden(self, attrs: dict) -> bool:
        """Return True if an element with *attrs* is not rendered to users.

        Matches an inline ``display:none`` (whitespace and case ignored), the
        ``hidden`` attribute, and ``aria-hidden="true"``.
        """
        if "hidden" in attrs:
            return True
        if attrs.get("aria-hidden") == "true":
            return True
        style = attrs.get("style")
        if not style:
            return False
        if isinstance(style, list):
            style = " ".join(style)
        return "display:none" in _WHITESPACE_RE.sub("", str(style)).lower()


DEFAULT_POLICY = CleaningPolicy()
