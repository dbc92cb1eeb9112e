"""Convert normalized HTML to Markdown while collecting link citations."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag
from markdownify import MarkdownConverter, chomp  # type: ignore[import-untyped]

from pagefit import settings
from pagefit.extractors.blocks import normalize_space
from pagefit.extractors.normalize import NormalizedDocument
from pagefit.extractors.urlnorm import resolve_link, resolve_src

logger = logging.getLogger(__name__)

_EXCESSIVE_BLANK_LINES_RE = re.compile(r"\n{3,}")
_TRAILING_WHITESPACE_RE = re.compile(r"[ \t]+$", re.MULTILINE)


# ---------------------------------------------------------------------------
# Citations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Citation:
    number: int
    url: str
    text: str


class CitationRegistry:
    """Numbered link citations, deduplicated by URL in first-seen order."""

    def __init__(self) -> None:
        self._by_url: dict[str, Citation] = {}

    def cite(self, url: str, text: str = "") -> int:
        """Record *url* and return its citation number (reused for repeats)."""
        existing = self._by_url.get(url)
        if existing is not None:
            return existing.number
        citation = Citation(number=len(self._by_url) + 1, url=url, text=text or url)
        self._by_url[url] = citation
        return citation.number

    def __len__(self) -> int:
        return len(self._by_url)

    @property
    def citations(self) -> list[Citation]:
        return list(self._by_url.values())

    def to_markdown(self) -> str | None:
        """Render the reference list, or None when nothing was cited."""
        if not self._by_url:
            return None
        lines = [settings.REFERENCES_HEADING, ""]
        lines.extend(f"[{c.number}] [{c.text}]({c.url})" for c in self._by_url.values())
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Converter
# ---------------------------------------------------------------------------

def _detect_lang(el: object) -> str:
    """Extract language hint from an element's class list for markdownify."""
    try:
        targets = [el]
        finder = getattr(el, "find", None)
        if finder is not None:
            targets.append(finder("code"))
        for target in targets:
            getter = getattr(target, "get", None)
            classes = (getter("class") if getter else None) or []
            for cls in classes:
                if isinstance(cls, str) and cls.startswith("language-"):
                    return cls[len("language-"):]
    except Exception as exc:
        logger.debug("Language detection failed for element: %s", exc)
    return ""


class PageMarkdownConverter(MarkdownConverter):
    """markdownify converter that resolves URLs and records every link.

    Lists use two spaces of indent per nesting level; block-level ``<code>``
    spanning several lines is fenced like ``<pre>``.
    """

    def __init__(
        self,
        *,
        base_url: str = "",
        citations: CitationRegistry | None = None,
        **options: object,
    ) -> None:
        options.setdefault("heading_style", "ATX")
        options.setdefault("bullets", settings.MARKDOWN_BULLETS)
        options.setdefault("escape_asterisks", False)
        options.setdefault("escape_underscores", False)
        options.setdefault("code_language_callback", _detect_lang)
        options.setdefault("bs4_options", "lxml")
        super().__init__(**options)
        self.base_url = base_url
        self.citations = citations if citations is not None else CitationRegistry()

    def convert_a(self, el, text, parent_tags):
        if "_noformat" in parent_tags:
            return text
        prefix, suffix, text = chomp(text)
        if not text:
            return ""
        url = resolve_link(el.get("href"), self.base_url)
        if url is None:
            return f"{prefix}{text}{suffix}"
        self.citations.cite(url, normalize_space(el.get_text(" ")))
        return f"{prefix}[{text}]({url}){suffix}"

    def convert_img(self, el, text, parent_tags):
        alt = normalize_space(str(el.get("alt") or ""))
        src = resolve_src(el.get("src"), self.base_url, el.get("srcset"))
        if not src:
            return alt
        return f"![{alt}]({src})"

    def convert_code(self, el, text, parent_tags):
        if "_noformat" not in parent_tags and "_inline" not in parent_tags:
            raw = el.get_text().strip("\n")
            if "\n" in raw:
                return f"\n\n```{_detect_lang(el)}\n{raw}\n```\n\n"
        return super().convert_code(el, text, parent_tags)

    def convert_li(self, el, text, parent_tags):
        text = (text or "").strip()
        if not text:
            return "\n"

        parent = el.parent
        if parent is not None and parent.name == "ol":
            start = str(parent.get("start") or "")
            first = int(start) if start.isdigit() else 1
            bullet = f"{first + len(el.find_previous_siblings('li'))}."
        else:
            bullet = self.options["bullets"][0]

        indent = settings.MARKDOWN_LIST_INDENT
        first_line, *rest = text.split("\n")
        lines = [f"{bullet} {first_line}"]
        lines.extend(indent + line if line else "" for line in rest)
        return "\n".join(lines) + "\n"

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def render_node(self, node: Tag) -> str:
        """Convert an already-parsed subtree."""
        return clean_markdown(self.process_tag(node, parent_tags=set()))

    def render_html(self, html: str) -> str:
        """Parse *html* and convert it."""
        if not html or not html.strip():
            return ""
        return clean_markdown(self.convert(html))


def clean_markdown(md: str) -> str:
    """Strip trailing whitespace and collapse runs of blank lines."""
    md = _TRAILING_WHITESPACE_RE.sub("", md)
    md = _EXCESSIVE_BLANK_LINES_RE.sub("\n\n", md)
    return md.strip()


def html_to_markdown(html: str, base_url: str = "") -> str:
    """Convert an HTML string to Markdown (citations discarded)."""
    try:
        return PageMarkdownConverter(base_url=base_url).render_html(html)
    except Exception as exc:
        logger.debug("markdown conversion failed: %s", exc)
        soup = BeautifulSoup(html or "", "lxml")
        return clean_markdown(soup.get_text(separator="\n"))


# ---------------------------------------------------------------------------
# Title
# ---------------------------------------------------------------------------

def extract_title(doc: NormalizedDocument) -> str | None:
    """First ``<h1>`` of the main content, else the document ``<title>``."""
    h1 = doc.root if doc.root.name == "h1" else doc.root.find("h1")
    if isinstance(h1, Tag):
        text = normalize_space(h1.get_text(" "))
        if text:
            return text
    title = doc.document.find("title")
    if isinstance(title, Tag):
        text = normalize_space(title.get_text(" "))
        if text:
            return text
    return None
