"""
Unit tests for the plain-text to HTML helpers.

Tests escaping, URL linkification and document assembly.
"""

import html
import re

import pytest
from pdf_capture.text_html import build_text_document, escape_html, linkify


def _container_body(document: str) -> str:
    """Markup inside <pre>, minus the one newline the HTML parser drops after the start tag."""
    match = re.search(r'<pre id="txt-container">(.*)</pre>', document, re.DOTALL)
    assert match is not None
    body = match.group(1)
    if body.startswith("\n"):
        body = body[1:]
    return body


def _rendered_text(document: str) -> str:
    """Text content of the <pre> block as the browser would expose it."""
    return html.unescape(re.sub(r"<[^>]+>", "", _container_body(document)))


class TestEscapeHtml:
    """Tests for escape_html function."""

    def test_escapes_all_special_characters(self):
        """Test that the five special characters become entities."""
        assert escape_html("<>&\"'") == "&lt;&gt;&amp;&quot;&#039;"

    def test_ampersand_escaped_first(self):
        """Test that existing entities are not left ambiguous."""
        assert escape_html("&lt;") == "&amp;lt;"

    def test_plain_text_unchanged(self):
        """Test that text without special characters passes through."""
        assert escape_html("Hello World 123") == "Hello World 123"

    def test_empty_string(self):
        """Test escaping of empty string."""
        assert escape_html("") == ""


class TestLinkify:
    """Tests for linkify function."""

    def test_wraps_https_url(self):
        """Test that https URLs become anchors."""
        html = linkify("see https://example.com/page")
        assert '<a href="https://example.com/page"' in html
        assert ">https://example.com/page</a>" in html

    def test_wraps_http_url(self):
        """Test that plain http URLs are linked too."""
        assert '<a href="http://example.org"' in linkify("http://example.org")

    def test_url_ends_at_whitespace(self):
        """Test that the match stops at the first whitespace."""
        html = linkify("go to https://example.com/a?b=1\tnow")
        assert 'href="https://example.com/a?b=1"' in html
        assert html.endswith("\tnow")

    def test_multiple_urls(self):
        """Test that every URL gets its own anchor."""
        html = linkify("https://a.com and https://b.com")
        assert html.count("<a href=") == 2

    def test_non_url_text_untouched(self):
        """Test that text without URLs is returned as-is."""
        assert linkify("ftp://example.com is not linked") == "ftp://example.com is not linked"

    def test_anchor_style(self):
        """Test that links are styled to stay visible in print."""
        assert "word-break: break-all;" in linkify("https://example.com")


class TestBuildTextDocument:
    """Tests for build_text_document function."""

    def test_example_desktop_text(self):
        """Test the anchor produced for a sentence containing a URL."""
        document = build_text_document("Visit https://example.com now")
        body = _container_body(document)
        assert body.startswith("Visit <a href=\"https://example.com\"")
        assert ">https://example.com</a> now" in body

    @pytest.mark.parametrize(
        "text",
        [
            "<script>alert('x')</script>",
            'a "quoted" & <b>bold</b> word',
            "it's <not> html & never was",
        ],
    )
    def test_no_raw_special_characters_survive(self, text):
        """Test that user text cannot inject markup into the document."""
        body = _container_body(build_text_document(text))
        assert "<" not in body
        assert ">" not in body
        assert '"' not in body
        assert "'" not in body
        assert re.search(r"&(?!amp;|lt;|gt;|quot;|#039;)", body) is None

    def test_escaped_url_with_query(self):
        """Test that URLs containing ampersands stay escaped inside href."""
        body = _container_body(build_text_document("https://x.com/?a=1&b=2"))
        assert 'href="https://x.com/?a=1&amp;b=2"' in body

    def test_document_structure(self):
        """Test that the document is a complete monospace page."""
        document = build_text_document("hello")
        assert document.startswith("<!DOCTYPE html>")
        assert "monospace" in document
        assert "white-space: pre-wrap" in document
        assert "padding: 40px" in document

    @pytest.mark.parametrize(
        "text",
        [
            "\n\nHello",
            "\nstarts with a blank line",
            "no leading newline",
            "\n<b>x</b> & https://example.com/?a=1&b=2\n",
        ],
    )
    def test_text_content_matches_input_exactly(self, text):
        """Test that leading blank lines survive parsing of the <pre> block."""
        document = build_text_document(text)
        assert '<pre id="txt-container">\n' in document
        assert _rendered_text(document) == text

    def test_preserves_newlines(self):
        """Test that line structure is kept for pre-wrap rendering."""
        assert "line one\nline two" in build_text_document("line one\nline two")
