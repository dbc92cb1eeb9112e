"""Unit tests for HTML normalization and main-content selection."""

from __future__ import annotations

from pagefit.extractors.normalize import extract_text, normalize_html
from pagefit.policy import DEFAULT_POLICY, CleaningPolicy


class TestCleaning:
    def test_scripts_and_styles_removed(self, article_html):
        doc = normalize_html(article_html)
        assert doc.document.find("script") is None
        assert doc.document.find("style") is None

    def test_comments_removed(self, article_html):
        doc = normalize_html(article_html)
        assert "editor note" not in str(doc.document)

    def test_inline_display_none_removed(self, article_html):
        doc = normalize_html(article_html)
        assert "Hidden tracking text" not in doc.root.get_text()

    def test_hidden_attribute_removed(self):
        doc = normalize_html("<body><p>Shown</p><p hidden>Secret</p></body>")
        assert "Secret" not in doc.root.get_text()

    def test_aria_hidden_removed(self):
        doc = normalize_html('<body><p>Shown</p><div aria-hidden="true">Decor</div></body>')
        assert "Decor" not in doc.root.get_text()

    def test_display_none_matching_ignores_case_and_spacing(self):
        assert DEFAULT_POLICY.is_hidden({"style": "color: red; DISPLAY : None"})
        assert not DEFAULT_POLICY.is_hidden({"style": "display: block"})

    def test_head_kept_in_document(self, article_html):
        doc = normalize_html(article_html)
        assert doc.document.find("title") is not None

    def test_custom_policy_remove_tags(self):
        policy = CleaningPolicy(remove_tags=frozenset({"table"}))
        doc = normalize_html("<body><p>Text</p><table><tr><td>Cell</td></tr></table></body>", policy)
        assert doc.root.find("table") is None
        assert "Text" in doc.root.get_text()


class TestMainContentSelection:
    def test_main_selector_wins(self, article_html):
        doc = normalize_html(article_html)
        assert doc.method == "selector:main"
        assert doc.root.name == "main"

    def test_chrome_outside_main_excluded(self, article_html):
        text = normalize_html(article_html).root.get_text()
        assert "Popular posts" not in text
        assert "Copyright" not in text
        assert "Contact" not in text

    def test_selector_priority_order(self):
        html = '<body><div id="content"><p>Inner</p></div><article><p>Story</p></article></body>'
        doc = normalize_html(html)
        assert doc.method == "selector:article"

    def test_fallback_body_strips_chrome(self, boilerplate_html):
        doc = normalize_html(boilerplate_html)
        assert doc.method == "fallback_body"
        text = doc.root.get_text()
        assert "Home" not in text
        assert "City News" not in text
        assert "protected bike lanes" in text

    def test_fragment_without_body(self):
        doc = normalize_html("<p>Just a paragraph</p>")
        assert "Just a paragraph" in doc.root.get_text()


class TestMalformedInput:
    def test_empty_string(self):
        doc = normalize_html("")
        assert doc.root.get_text().strip() == ""

    def test_none(self):
        doc = normalize_html(None)
        assert doc.root.get_text().strip() == ""

    def test_whitespace_only(self):
        doc = normalize_html("   \n\t ")
        assert doc.root.get_text().strip() == ""

    def test_unclosed_tags(self):
        doc = normalize_html("<div><p>Open paragraph<p>Another<div>")
        text = doc.root.get_text()
        assert "Open paragraph" in text
        assert "Another" in text

    def test_unknown_tags_kept_as_containers(self):
        doc = normalize_html("<body><x-card><p>Inside custom element</p></x-card></body>")
        assert "Inside custom element" in doc.root.get_text()


class TestExtractText:
    def test_one_line_per_text_run(self, minimal_html):
        lines = extract_text(minimal_html).splitlines()
        assert lines == [
            "Version 2.1 fixes a crash when the configuration file is empty.",
            "It also adds a changelog link and a menu toggle.",
        ]

    def test_inline_tags_do_not_split_lines(self):
        text = extract_text("<body><p>Some <strong>bold</strong> and <em>italic</em> words</p></body>")
        assert text == "Some bold and italic words"

    def test_scripts_excluded(self):
        text = extract_text("<body><p>Visible</p><script>var x = 1;</script></body>")
        assert text == "Visible"

    def test_empty_input(self):
        assert extract_text("") == ""
