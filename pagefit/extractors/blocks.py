"""Split a normalized tree into content blocks, the unit of filtering.

A block is one block-level element (paragraph, list, table, code, ...), a
container that carries only inline content, or a run of loose text and
inline elements sitting between block-level siblings.  Headings are merged
into the block that follows them inside the same section so a title travels
with its content.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import NamedTuple

from bs4 import Tag
from bs4.element import NavigableString, PageElement

logger = logging.getLogger(__name__)

_HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})

# Always emitted as one atomic block
_BLOCK_TAGS = frozenset(
    {
        "h1", "h2", "h3", "h4", "h5", "h6",
        "p",
        "ul", "ol", "dl",
        "pre",
        "blockquote",
        "table",
        "figure",
        "address",
        "details",
    },
)

# Text-level elements: grouped with neighbouring text into one run
_INLINE_TAGS = frozenset(
    {
        "a", "abbr", "b", "bdi", "bdo", "cite", "code", "data", "del", "dfn",
        "em", "font", "i", "ins", "kbd", "label", "mark", "q", "s", "samp",
        "small", "span", "strong", "sub", "sup", "time", "u", "var",
        "img", "picture", "br", "wbr",
    },
)

# Never content; also ends an inline run
_SKIP_TAGS = frozenset({"head", "title", "meta", "link", "base", "hr", "template"})


@dataclass(frozen=True)
class ContentBlock:
    """One retain/drop unit and the metrics the filters score it by."""

    nodes: tuple[PageElement, ...]
    index: int            # position in document order
    tag: str              # tag of the principal (last) unit
    text: str             # whitespace-normalized text of all nodes
    link_text_length: int  # non-whitespace characters inside <a>
    word_count: int
    html: str = ""
    score: float = 0.0
    retained: bool = False

    @property
    def text_length(self) -> int:
        return len(self.text)

    @property
    def link_density(self) -> float:
        """Share of the block's non-whitespace text inside ``<a>``; 1.0 when text-less."""
        chars = self.text_length - self.text.count(" ")
        if not chars:
            return 1.0
        return min(1.0, self.link_text_length / chars)

    def to_html(self) -> str:
        return self.html


class _Unit(NamedTuple):
    nodes: tuple[PageElement, ...]
    tag: str
    text: str
    html: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def normalize_space(text: str) -> str:
    return " ".join(text.split())


def _is_text(node: PageElement) -> bool:
    # Comments, CDATA and doctypes are NavigableString subclasses
    return type(node) is NavigableString


def _node_text(node: PageElement) -> str:
    if isinstance(node, Tag):
        return normalize_space(node.get_text(" "))
    return normalize_space(str(node)) if _is_text(node) else ""


def _node_html(node: PageElement) -> str:
    if isinstance(node, Tag):
        return str(node)
    return node.output_ready() if _is_text(node) else ""


def _link_chars(node: PageElement) -> int:
    if not isinstance(node, Tag):
        return 0
    anchors = [node] if node.name == "a" else node.find_all("a")
    return sum(len("".join(a.get_text().split())) for a in anchors if isinstance(a, Tag))


def _has_own_content(node: Tag) -> bool:
    """True if *node* holds direct text or a text-bearing inline child."""
    for child in node.children:
        if isinstance(child, Tag):
            if child.name in _INLINE_TAGS and _node_text(child):
                return True
        elif _is_text(child) and child.strip():
            return True
    return False


def _has_block_children(node: Tag) -> bool:
    return any(
        isinstance(child, Tag)
        and child.name not in _INLINE_TAGS
        and child.name not in _SKIP_TAGS
        for child in node.children
    )


def _tag_unit(node: Tag) -> _Unit:
    return _Unit((node,), node.name, _node_text(node), str(node))


def _run_unit(run: list[PageElement], container: Tag) -> _Unit | None:
    """Unit for a run of loose text and inline elements, or None if it is blank."""
    while run and not isinstance(run[0], Tag) and not str(run[0]).strip():
        run = run[1:]
    while run and not isinstance(run[-1], Tag) and not str(run[-1]).strip():
        run = run[:-1]
    if not run:
        return None
    raw = "".join(
        node.get_text() if isinstance(node, Tag) else str(node) for node in run
    )
    text = normalize_space(raw)
    has_image = any(
        isinstance(node, Tag) and (node.name == "img" or node.find("img") is not None)
        for node in run
    )
    if not text and not has_image:
        return None
    if len(run) == 1 and isinstance(run[0], Tag):
        tag = run[0].name
    else:
        tag = container.name
    return _Unit(tuple(run), tag, text, "".join(_node_html(n) for n in run))


def _inside(unit: _Unit, ancestor: Tag | None) -> bool:
    if ancestor is None:
        return False
    return any(parent is ancestor for parent in unit.nodes[0].parents)


def _make_block(units: list[_Unit], index: int) -> ContentBlock:
    nodes = tuple(node for unit in units for node in unit.nodes)
    text = normalize_space(" ".join(unit.text for unit in units))
    chars = len(text) - text.count(" ")
    return ContentBlock(
        nodes=nodes,
        index=index,
        tag=units[-1].tag,
        text=text,
        link_text_length=min(sum(_link_chars(n) for n in nodes), chars),
        word_count=len(text.split()),
        html="\n".join(unit.html for unit in units),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def collect_blocks(root: Tag) -> list[ContentBlock]:
    """Return the content blocks of *root* in document order."""
    units: list[_Unit] = []

    def _flush(run: list[PageElement], container: Tag) -> None:
        unit = _run_unit(run, container)
        if unit is not None:
            units.append(unit)
        run.clear()

    def _walk(node: Tag) -> None:
        run: list[PageElement] = []
        for child in node.children:
            if not isinstance(child, Tag):
                if _is_text(child):
                    run.append(child)
                continue
            name = child.name
            if name in _INLINE_TAGS:
                run.append(child)
                continue
            _flush(run, node)
            if name in _SKIP_TAGS:
                continue
            if name in _BLOCK_TAGS:
                units.append(_tag_unit(child))
            elif _has_own_content(child) and not _has_block_children(child):
                units.append(_tag_unit(child))
            else:
                _walk(child)
        _flush(run, node)

    if root.name in _BLOCK_TAGS or (_has_own_content(root) and not _has_block_children(root)):
        units.append(_tag_unit(root))
    else:
        _walk(root)

    blocks: list[ContentBlock] = []
    pending: list[_Unit] = []
    for unit in units:
        # A heading only introduces content within its own section
        if pending and not _inside(unit, pending[-1].nodes[0].parent):
            blocks.append(_make_block(pending, len(blocks)))
            pending = []
        pending.append(unit)
        if unit.tag in _HEADING_TAGS and len(unit.nodes) == 1:
            continue
        blocks.append(_make_block(pending, len(blocks)))
        pending = []
    if pending:
        blocks.append(_make_block(pending, len(blocks)))

    logger.debug("collected %d block(s) from <%s>", len(blocks), root.name)
    return blocks
