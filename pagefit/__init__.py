"""pagefit - turn fetched HTML into clean, LLM-ready Markdown.

Quick usage::

    from pagefit import generate_markdown

    result = generate_markdown(html, url="https://example.com/blog/some-post")
    print(result.title)
    print(result.raw_markdown)
    print(result.references_markdown)

Filtering::

    from pagefit import Bm25Options, PruningOptions, generate_markdown

    pruned = generate_markdown(html, url, PruningOptions(min_word_threshold=5))
    relevant = generate_markdown(html, url, Bm25Options(query="weather forecast"))
    print(pruned.fit_markdown, relevant.word_count)
"""

from pagefit.extractors.normalize import extract_text
from pagefit.generator import MarkdownGenerator, generate_markdown
from pagefit.items import (
    Bm25Options,
    FilterOptions,
    MarkdownResult,
    NoFilter,
    PruningOptions,
    ThresholdType,
)
from pagefit.policy import DEFAULT_POLICY, CleaningPolicy

__version__ = "0.1.0"
__all__ = [
    "DEFAULT_POLICY",
    "Bm25Options",
    "CleaningPolicy",
    "FilterOptions",
    "MarkdownGenerator",
    "MarkdownResult",
    "NoFilter",
    "PruningOptions",
    "ThresholdType",
    "extract_text",
    "generate_markdown",
]
