"""Unit tests for the pruning content filter."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from pagefit.extractors.blocks import collect_blocks
from pagefit.extractors.normalize import normalize_html
from pagefit.filters.pruning import class_id_factor, page_threshold, prune_blocks, score_block
from pagefit.items import PruningOptions, ThresholdType

LONG_PARAGRAPH = (
    "<p>This paragraph carries a full thought about the subject of the page, with "
    "enough words and enough characters that it reads like real article content "
    "rather than a navigation label or a stray caption under a thumbnail image.</p>"
)
LINK_DIV = '<div><a href="/x">More links here</a></div>'


def _blocks(html: str):
    root = BeautifulSoup(html, "lxml").body
    return root, collect_blocks(root)


def _retained_share(html: str, options: PruningOptions) -> float:
    root, blocks = _blocks(html)
    judged = prune_blocks(blocks, options, root=root)
    return sum(b.retained for b in judged) / len(judged)


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

class TestScoreBlock:
    def test_score_within_unit_interval(self, article_html):
        doc = normalize_html(article_html)
        for block in collect_blocks(doc.root):
            assert 0.0 <= score_block(block, doc.root) <= 1.0

    def test_paragraph_beats_link_list(self):
        _, (para,) = _blocks(LONG_PARAGRAPH)
        _, (links,) = _blocks(LINK_DIV)
        assert score_block(para) > score_block(links)

    def test_negative_class_halves(self):
        root, (block,) = _blocks('<div class="sidebar"><p>Some sidebar words</p></div>')
        assert class_id_factor(block, root) == 0.5

    def test_ad_token_is_negative(self):
        root, (block,) = _blocks('<div class="ad-slot"><p>Buy now</p></div>')
        assert class_id_factor(block, root) == 0.5

    def test_ad_substring_is_not_negative(self):
        root, (block,) = _blocks('<div class="thread"><p>Reply text</p></div>')
        assert class_id_factor(block, root) == 1.0

    def test_positive_class(self):
        root, (block,) = _blocks('<div id="post-body"><p>Words</p></div>')
        assert class_id_factor(block, root) == 1.1

    def test_hints_stop_at_root(self):
        soup = BeautifulSoup('<div class="comments"><section><p>Words</p></section></div>', "lxml")
        root = soup.section
        (block,) = collect_blocks(root)
        assert class_id_factor(block, root) == 1.0


# ---------------------------------------------------------------------------
# Thresholds
# ---------------------------------------------------------------------------

class TestThresholds:
    def test_fixed_threshold(self):
        opts = PruningOptions(threshold=0.3)
        assert page_threshold([0.9, 0.1], opts) == 0.3

    def test_dynamic_threshold_is_scaled_mean(self):
        opts = PruningOptions(threshold_type="dynamic", dynamic_factor=0.5)
        assert page_threshold([0.2, 0.6], opts) == pytest.approx(0.2)

    def test_dynamic_threshold_empty_page(self):
        opts = PruningOptions(threshold_type=ThresholdType.DYNAMIC)
        assert page_threshold([], opts) == 0.0


# ---------------------------------------------------------------------------
# Pruning
# ---------------------------------------------------------------------------

class TestPruneBlocks:
    def test_nav_dropped_heading_kept(self):
        html = (
            "<nav>Home About</nav><article><h1>Title</h1>"
            "<p>Real content here with more than five words.</p></article>"
        )
        doc = normalize_html(html)
        blocks = collect_blocks(doc.root)
        opts = PruningOptions(threshold=0.2, min_word_threshold=5)
        kept = [b for b in prune_blocks(blocks, opts, root=doc.root) if b.retained]
        text = " ".join(b.text for b in kept)
        assert "Title" in text
        assert "Real content here" in text
        assert "Home About" not in text

    @pytest.mark.parametrize("min_words", [0, 3, 8, 20])
    def test_retained_blocks_meet_word_floor(self, article_html, min_words):
        doc = normalize_html(article_html)
        opts = PruningOptions(threshold=0.0, min_word_threshold=min_words)
        judged = prune_blocks(collect_blocks(doc.root), opts, root=doc.root)
        assert all(b.word_count >= min_words for b in judged if b.retained)

    def test_order_and_scores_preserved(self, article_html):
        doc = normalize_html(article_html)
        blocks = collect_blocks(doc.root)
        judged = prune_blocks(blocks, PruningOptions(), root=doc.root)
        assert [b.index for b in judged] == [b.index for b in blocks]
        assert all(0.0 <= b.score <= 1.0 for b in judged)

    def test_share_widget_pruned(self, article_html):
        doc = normalize_html(article_html)
        judged = prune_blocks(collect_blocks(doc.root), PruningOptions(), root=doc.root)
        kept = " ".join(b.text for b in judged if b.retained)
        assert "Tweet" not in kept
        assert "rewarding crops" in kept

    def test_dynamic_keeps_similar_share_on_uniform_pages(self):
        low_page = "<body>" + LINK_DIV * 4 + "</body>"
        high_page = "<body>" + LONG_PARAGRAPH * 4 + "</body>"
        dynamic = PruningOptions(threshold_type="dynamic")
        fixed = PruningOptions(threshold_type="fixed")

        assert _retained_share(low_page, dynamic) == _retained_share(high_page, dynamic)
        assert _retained_share(low_page, fixed) < _retained_share(high_page, fixed)

    def test_dynamic_drops_boilerplate(self, boilerplate_html):
        doc = normalize_html(boilerplate_html)
        opts = PruningOptions(threshold_type="dynamic")
        judged = prune_blocks(collect_blocks(doc.root), opts, root=doc.root)
        kept = " ".join(b.text for b in judged if b.retained)
        assert "protected bike lanes" in kept
        assert "cookies" not in kept
        assert "Transit budget" not in kept

    def test_sidebar_heading_does_not_drag_down_story(self):
        root, blocks = _blocks(
            '<main><aside class="related"><h3>Related stories</h3></aside>' + LONG_PARAGRAPH + "</main>"
        )
        judged = prune_blocks(blocks, PruningOptions(threshold=0.6), root=root)
        assert [(b.text.startswith("This paragraph"), b.retained) for b in judged] == [
            (False, False),
            (True, True),
        ]

    def test_empty_block_list(self):
        assert prune_blocks([], PruningOptions()) == []
