"""Content filters: the single dispatch point over the filter option union."""

from __future__ import annotations

import logging
from typing import Any

from bs4 import BeautifulSoup, Tag
from pydantic import TypeAdapter

from pagefit.extractors.blocks import ContentBlock
from pagefit.filters.bm25 import bm25_filter_blocks, page_query, tokenize
from pagefit.filters.pruning import prune_blocks, score_block
from pagefit.items import Bm25Options, FilterOptions, NoFilter, PruningOptions

logger = logging.getLogger(__name__)

_OPTIONS_ADAPTER: TypeAdapter[NoFilter | PruningOptions | Bm25Options] = TypeAdapter(FilterOptions)


def parse_filter_options(data: Any) -> NoFilter | PruningOptions | Bm25Options:
    """Build filter options from a mapping such as ``{"kind": "bm25", "query": "..."}``.

    ``None`` maps to :class:`NoFilter`.  Raises ``pydantic.ValidationError``
    on an unknown ``kind`` or ill-typed values.
    """
    if data is None:
        return NoFilter()
    if isinstance(data, (NoFilter, PruningOptions, Bm25Options)):
        return data
    return _OPTIONS_ADAPTER.validate_python(data)


def filter_blocks(
    blocks: list[ContentBlock],
    options: NoFilter | PruningOptions | Bm25Options,
    *,
    root: Tag | None = None,
    document: BeautifulSoup | None = None,
    query: str | None = None,
) -> list[ContentBlock] | None:
    """Return the retained blocks in document order, or ``None`` for :class:`NoFilter`.

    For BM25 the query is, in order: ``options.query``, *query*, or one
    derived from *document* metadata.
    """
    if isinstance(options, PruningOptions):
        judged = prune_blocks(blocks, options, root=root)
    elif isinstance(options, Bm25Options):
        effective = options.query or (query or "").strip()
        if not effective and document is not None:
            effective = page_query(document)
            logger.debug("bm25: derived query %r from page metadata", effective)
        judged = bm25_filter_blocks(blocks, options, effective)
    else:
        return None
    return [b for b in judged if b.retained]


__all__ = [
    "filter_blocks",
    "parse_filter_options",
    "page_query",
    "prune_blocks",
    "score_block",
    "tokenize",
]
