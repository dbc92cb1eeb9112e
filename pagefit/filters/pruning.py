"""Heuristic boilerplate pruning.

Each block gets a composite score in ``[0, 1]`` from its tag type, link
density, and text length relative to what that tag usually holds.  Class or
id hints on the block (or its ancestors inside the content root) then halve
the score for boilerplate keywords or nudge it up for content keywords.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from statistics import fmean
from types import MappingProxyType

from bs4 import Tag

from pagefit.extractors.blocks import ContentBlock
from pagefit.items import PruningOptions, ThresholdType

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Scoring tables
# ---------------------------------------------------------------------------

_TAG_WEIGHTS = MappingProxyType(
    {
        "article": 1.5,
        "main": 1.4,
        "h1": 1.4,
        "section": 1.3,
        "h2": 1.3,
        "p": 1.2,
        "h3": 1.2,
        "blockquote": 1.2,
        "pre": 1.2,
        "table": 1.1,
        "h4": 1.1,
        "figure": 1.0,
        "dl": 1.0,
        "h5": 1.0,
        "h6": 0.9,
        "div": 0.7,
        "span": 0.6,
        "li": 0.5,
        "ul": 0.5,
        "ol": 0.5,
    },
)
_DEFAULT_TAG_WEIGHT = 0.5
_MAX_TAG_WEIGHT = max(_TAG_WEIGHTS.values())

# Characters of text a genuine block of this tag typically carries
_EXPECTED_LENGTH = MappingProxyType(
    {
        "p": 200,
        "h1": 40, "h2": 40, "h3": 40, "h4": 40, "h5": 40, "h6": 40,
        "li": 80,
        "ul": 200,
        "ol": 200,
        "dl": 200,
        "pre": 200,
        "blockquote": 200,
        "table": 300,
        "div": 300,
        "section": 400,
        "article": 600,
        "main": 600,
    },
)
_DEFAULT_EXPECTED_LENGTH = 150

_TAG_FACTOR = 0.35
_LINK_FACTOR = 0.35
_LENGTH_FACTOR = 0.30

_NEGATIVE_KEYWORDS: tuple[str, ...] = (
    "nav",
    "footer",
    "sidebar",
    "comment",
    "menu",
    "header",
    "promo",
    "advert",
    "banner",
    "social",
    "share",
    "related",
    "widget",
    "cookie",
)
# "ad" as a substring hits "header", "read", "thread"...; match it as a token
_AD_TOKEN_RE = re.compile(r"(?:^|[^a-z0-9])ads?(?:[^a-z0-9]|$)")

_POSITIVE_KEYWORDS: tuple[str, ...] = (
    "content",
    "article",
    "main",
    "post",
    "entry",
    "text",
    "body",
    "story",
)

_NEGATIVE_FACTOR = 0.5
_POSITIVE_FACTOR = 1.1


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def _class_id(el: Tag) -> str:
    classes = el.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    return (" ".join(classes) + " " + str(el.get("id") or "")).lower()


def _hint_strings(block: ContentBlock, root: Tag | None) -> list[str]:
    """class/id strings of the block's nodes and their ancestors below *root*."""
    hints: list[str] = []
    seen: set[int] = set()
    for node in block.nodes:
        el: Tag | None = node if isinstance(node, Tag) else node.parent
        while (
            isinstance(el, Tag)
            and el is not root
            and el.name not in ("body", "html", "[document]")
        ):
            if id(el) not in seen:
                seen.add(id(el))
                hint = _class_id(el).strip()
                if hint:
                    hints.append(hint)
            el = el.parent
    return hints


def class_id_factor(block: ContentBlock, root: Tag | None = None) -> float:
    hints = _hint_strings(block, root)
    if any(
        kw in hint for hint in hints for kw in _NEGATIVE_KEYWORDS
    ) or any(_AD_TOKEN_RE.search(hint) for hint in hints):
        return _NEGATIVE_FACTOR
    if any(kw in hint for hint in hints for kw in _POSITIVE_KEYWORDS):
        return _POSITIVE_FACTOR
    return 1.0


def score_block(block: ContentBlock, root: Tag | None = None) -> float:
    """Composite boilerplate score for *block*; higher means more content-like."""
    tag_score = _TAG_WEIGHTS.get(block.tag, _DEFAULT_TAG_WEIGHT) / _MAX_TAG_WEIGHT
    link_score = 1.0 - block.link_density
    expected = _EXPECTED_LENGTH.get(block.tag, _DEFAULT_EXPECTED_LENGTH)
    length_score = min(1.0, block.text_length / expected)

    base = _TAG_FACTOR * tag_score + _LINK_FACTOR * link_score + _LENGTH_FACTOR * length_score
    return min(1.0, base * class_id_factor(block, root))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def page_threshold(scores: list[float], options: PruningOptions) -> float:
    """Threshold in force for one page under *options*."""
    if options.threshold_type == ThresholdType.DYNAMIC:
        return fmean(scores) * options.dynamic_factor if scores else 0.0
    return options.threshold


def prune_blocks(
    blocks: list[ContentBlock],
    options: PruningOptions,
    root: Tag | None = None,
) -> list[ContentBlock]:
    """Score every block and mark the ones worth keeping.

    *root* bounds the ancestor walk for class/id hints.  Returns new blocks
    (same order) with ``score`` and ``retained`` set.
    """
    scored = [replace(b, score=score_block(b, root)) for b in blocks]
    candidates = [b for b in scored if b.word_count >= options.min_word_threshold]
    threshold = page_threshold([b.score for b in candidates], options)

    kept_ids = {b.index for b in candidates if b.score >= threshold}
    result = [replace(b, retained=b.index in kept_ids) for b in scored]
    logger.debug(
        "pruning (%s) threshold=%.3f kept %d/%d block(s)",
        options.threshold_type.value, threshold, len(kept_ids), len(blocks),
    )
    return result
