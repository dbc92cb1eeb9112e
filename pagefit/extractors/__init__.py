"""Extraction sub-package: normalization, block splitting, Markdown conversion."""

from .blocks import ContentBlock, collect_blocks
from .markdown import CitationRegistry, PageMarkdownConverter, extract_title, html_to_markdown
from .normalize import NormalizedDocument, extract_text, normalize_html
from .urlnorm import resolve_link, resolve_src

__all__ = [
    "CitationRegistry",
    "ContentBlock",
    "NormalizedDocument",
    "PageMarkdownConverter",
    "collect_blocks",
    "extract_text",
    "extract_title",
    "html_to_markdown",
    "normalize_html",
    "resolve_link",
    "resolve_src",
]
