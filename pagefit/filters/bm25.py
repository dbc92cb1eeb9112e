"""Query-driven block relevance filter (Okapi BM25).

Every content block of the page is one document of a small corpus; the
query is scored against each.  Tokenization is deliberately simple:
lowercase, split on anything that is not a letter or digit in any script,
drop 1-character tokens, no stemming.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import replace
from types import MappingProxyType

import numpy as np
from bs4 import BeautifulSoup, Tag
from rank_bm25 import BM25Okapi

from pagefit import settings
from pagefit.extractors.blocks import ContentBlock, normalize_space
from pagefit.items import Bm25Options

logger = logging.getLogger(__name__)

# Any run of non-letters, non-digits (Unicode-aware)
_TOKEN_SPLIT_RE = re.compile(r"[\W_]+")

# Score multipliers for blocks led by emphasised tags
_PRIORITY_TAG_WEIGHTS = MappingProxyType(
    {
        "h1": 5.0,
        "h2": 4.0,
        "h3": 3.0,
        "strong": 2.0,
        "b": 1.5,
        "em": 1.5,
        "blockquote": 2.0,
        "code": 2.0,
        "pre": 1.5,
        "th": 1.5,
    },
)


def tokenize(text: str) -> list[str]:
    """Lowercase *text* and split it into letter/digit tokens of 2+ chars."""
    return [
        tok for tok in _TOKEN_SPLIT_RE.split(text.lower())
        if len(tok) >= settings.BM25_MIN_TOKEN_LENGTH
    ]


class PageBM25(BM25Okapi):
    """BM25Okapi using the ``ln((N - df + 0.5) / (df + 0.5) + 1)`` IDF.

    The stock Okapi IDF is zero or negative for terms found in half the
    corpus or more, which on a two-block page means a matching block scores
    nothing.  The "+1" form keeps every IDF positive.
    """

    def _calc_idf(self, nd: dict[str, int]) -> None:
        for word, freq in nd.items():
            self.idf[word] = math.log((self.corpus_size - freq + 0.5) / (freq + 0.5) + 1.0)
        self.average_idf = sum(self.idf.values()) / len(self.idf) if self.idf else 0.0


def bm25_scores(
    corpus: list[list[str]],
    query_tokens: list[str],
    *,
    k1: float = settings.BM25_K1,
    b: float = settings.BM25_B,
) -> list[float]:
    """Score each tokenized document of *corpus* against *query_tokens*."""
    if not corpus:
        return []
    terms = list(dict.fromkeys(query_tokens))
    if not terms or not any(corpus):
        return [0.0] * len(corpus)

    index = PageBM25(corpus, k1=k1, b=b)
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = index.get_scores(terms)
    return [float(s) for s in np.nan_to_num(scores, nan=0.0, posinf=0.0, neginf=0.0)]


# ---------------------------------------------------------------------------
# Query resolution
# ---------------------------------------------------------------------------

def _meta_content(document: BeautifulSoup, name: str) -> str:
    tag = document.find("meta", attrs={"name": name})
    if isinstance(tag, Tag):
        return normalize_space(str(tag.get("content") or ""))
    return ""


def page_query(document: BeautifulSoup) -> str:
    """Derive a query from page metadata when the caller supplied none.

    Tries, in order: ``<title>``, meta description, meta keywords, the
    first ``<h1>``, and the first paragraph long enough to describe the page.
    """
    title = document.find("title")
    if isinstance(title, Tag):
        text = normalize_space(title.get_text(" "))
        if text:
            return text

    for name in ("description", "keywords"):
        text = _meta_content(document, name)
        if text:
            return text

    h1 = document.find("h1")
    if isinstance(h1, Tag):
        text = normalize_space(h1.get_text(" "))
        if text:
            return text

    p = document.find("p")
    if isinstance(p, Tag):
        text = normalize_space(p.get_text(" "))
        if len(text) > settings.QUERY_PARAGRAPH_MIN_CHARS:
            return text[: settings.QUERY_PARAGRAPH_MAX_CHARS]
    return ""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def bm25_filter_blocks(
    blocks: list[ContentBlock],
    options: Bm25Options,
    query: str,
) -> list[ContentBlock]:
    """Score *blocks* against *query* and mark the relevant ones as retained.

    Blocks scoring at least ``options.threshold`` are kept.  If none do, the
    ``BM25_FALLBACK_TOP_N`` best blocks with a positive score are kept
    instead.  With ``options.use_tag_weights`` a block's score is first
    multiplied by the weight of its tag (headings, emphasis, code).  Output
    keeps document order.
    """
    scores = bm25_scores(
        [tokenize(b.text) for b in blocks],
        tokenize(query),
        k1=options.k1,
        b=options.b,
    )
    if options.use_tag_weights:
        scores = [s * _PRIORITY_TAG_WEIGHTS.get(b.tag, 1.0) for s, b in zip(scores, blocks)]
    kept = {i for i, s in enumerate(scores) if s >= options.threshold}

    if not kept:
        ranked = sorted(
            (i for i, s in enumerate(scores) if s > 0),
            key=lambda i: (-scores[i], i),
        )
        kept = set(ranked[: settings.BM25_FALLBACK_TOP_N])
        if kept:
            logger.debug(
                "bm25: nothing reached %.2f, keeping top %d block(s)",
                options.threshold, len(kept),
            )

    logger.debug("bm25 query=%r kept %d/%d block(s)", query, len(kept), len(blocks))
    return [
        replace(block, score=scores[i], retained=i in kept)
        for i, block in enumerate(blocks)
    ]
