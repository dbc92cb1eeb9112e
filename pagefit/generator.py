"""pagefit.generator - HTML to LLM-ready Markdown.

Usage::

    from pagefit import generate_markdown, PruningOptions, Bm25Options

    result = generate_markdown(html, url="https://example.com/post")
    print(result.raw_markdown)

    # Boilerplate-pruned "fit" markdown
    result = generate_markdown(html, url=url, options=PruningOptions(min_word_threshold=5))
    print(result.fit_markdown)

    # Query-relevant passages only
    result = generate_markdown(html, url=url, options=Bm25Options(query="pricing plans"))

    # Reusable configuration
    gen = MarkdownGenerator(options=PruningOptions(threshold_type="dynamic"))
    result = gen.generate(html, url=url)
"""

from __future__ import annotations

import logging
from typing import Any

from pagefit.extractors.blocks import collect_blocks
from pagefit.extractors.markdown import (
    CitationRegistry,
    PageMarkdownConverter,
    clean_markdown,
    extract_title,
)
from pagefit.extractors.normalize import NormalizedDocument, normalize_html
from pagefit.filters import filter_blocks, parse_filter_options
from pagefit.items import Bm25Options, MarkdownResult, NoFilter, PruningOptions
from pagefit.policy import DEFAULT_POLICY, CleaningPolicy

logger = logging.getLogger(__name__)

AnyFilterOptions = NoFilter | PruningOptions | Bm25Options


def _resolve_options(options: Any) -> AnyFilterOptions:
    try:
        return parse_filter_options(options)
    except Exception as exc:
        logger.warning("Invalid filter options %r, converting without a filter: %s", options, exc)
        return NoFilter()


def _fit(
    doc: NormalizedDocument,
    converter: PageMarkdownConverter,
    options: PruningOptions | Bm25Options,
    query: str | None,
    url: str,
) -> tuple[str, str]:
    """Return ``(fit_html, fit_markdown)`` for the blocks *options* retains."""
    blocks = collect_blocks(doc.root)
    retained = filter_blocks(
        blocks,
        options,
        root=doc.root,
        document=doc.document,
        query=query,
    ) or []
    logger.debug(
        "%s filter kept %d/%d block(s) for %s",
        options.kind, len(retained), len(blocks), url or "<no url>",
    )
    fit_html = "\n".join(block.to_html() for block in retained)
    return fit_html, converter.render_html(fit_html)


def _generate(
    html: str | None,
    url: str,
    options: AnyFilterOptions,
    query: str | None,
    policy: CleaningPolicy,
) -> MarkdownResult:
    doc = normalize_html(html, policy)

    citations = CitationRegistry()
    converter = PageMarkdownConverter(base_url=url, citations=citations)
    try:
        raw_markdown = converter.render_node(doc.root)
    except Exception as exc:
        logger.warning("Markdown conversion failed for %s, using plain text: %s", url or "<no url>", exc)
        raw_markdown = clean_markdown(doc.root.get_text("\n"))

    fit_markdown: str | None = None
    fit_html: str | None = None
    if not isinstance(options, NoFilter):
        try:
            fit_html, fit_markdown = _fit(doc, converter, options, query, url)
        except Exception as exc:
            logger.warning("%s filter failed for %s: %s", options.kind, url or "<no url>", exc)
            fit_html, fit_markdown = "", ""

    return MarkdownResult(
        raw_markdown=raw_markdown,
        fit_markdown=fit_markdown,
        fit_html=fit_html,
        title=extract_title(doc),
        references_markdown=citations.to_markdown(),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def generate_markdown(
    html: str | None,
    url: str = "",
    options: AnyFilterOptions | dict | None = None,
    *,
    query: str | None = None,
    policy: CleaningPolicy = DEFAULT_POLICY,
) -> MarkdownResult:
    """Convert *html* into a :class:`~pagefit.items.MarkdownResult`.

    Args:
        html:    Raw, already-rendered HTML.  Empty or malformed input gives
                 an empty result.
        url:     Page URL, used to resolve relative links and images.
        options: Filter options (``NoFilter``, ``PruningOptions``,
                 ``Bm25Options``), an equivalent dict, or ``None`` for no
                 filtering.
        query:   Fallback BM25 query when ``Bm25Options.query`` is empty.
        policy:  Cleaning rules (defaults to :data:`pagefit.policy.DEFAULT_POLICY`).

    Never raises.  A failing filter step only empties the fit fields; a
    failing Markdown conversion falls back to the plain text of the page.
    """
    resolved = _resolve_options(options)
    try:
        return _generate(html, url or "", resolved, query, policy)
    except Exception as exc:
        logger.warning("Markdown generation failed for %s: %s", url or "<no url>", exc)
        filtered = not isinstance(resolved, NoFilter)
        return MarkdownResult(
            raw_markdown="",
            fit_markdown="" if filtered else None,
            fit_html="" if filtered else None,
        )


class MarkdownGenerator:
    """Reusable converter bound to one set of filter options and cleaning rules.

    Holds configuration only; every :meth:`generate` call is independent, so
    one instance may be shared across threads.

    Args:
        options: Filter options applied to every page (default: no filter).
        policy:  Cleaning rules (default: :data:`pagefit.policy.DEFAULT_POLICY`).
    """

    def __init__(
        self,
        options: AnyFilterOptions | dict | None = None,
        policy: CleaningPolicy = DEFAULT_POLICY,
    ) -> None:
        self._options = _resolve_options(options)
        self._policy = policy

    @property
    def options(self) -> AnyFilterOptions:
        return self._options

    def generate(self, html: str | None, url: str = "", *, query: str | None = None) -> MarkdownResult:
        """Convert *html*; see :func:`generate_markdown`."""
        return generate_markdown(html, url, self._options, query=query, policy=self._policy)
