"""Tests for body normalization and field cleanup."""

from haro_pipeline.services.text_cleaner import (
    clean_text_field,
    decode_entities,
    html_to_text,
    normalize_body,
    remove_boilerplate,
    remove_css,
)


class TestHtmlToText:
    def test_strips_tags_and_scripts(self):
        html = "<html><head><title>t</title></head><body><script>var x = 1;</script><p>Hello <b>world</b></p></body></html>"
        text = html_to_text(html)
        assert "Hello" in text
        assert "world" in text
        assert "var x" not in text
        assert "<p>" not in text

    def test_link_keeps_target(self):
        text = html_to_text('<p>Media Outlet: <a href="https://forbes.com">Forbes</a></p>')
        assert "Forbes (https://forbes.com)" in text

    def test_mailto_link_keeps_text_only(self):
        text = html_to_text('<a href="mailto:jane@forbes.com">jane@forbes.com</a>')
        assert text.strip() == "jane@forbes.com"

    def test_empty(self):
        assert html_to_text("") == ""


class TestRemoveCss:
    def test_rule_block(self):
        assert remove_css("p { color: red; } Hello").strip() == "Hello"

    def test_media_block(self):
        text = remove_css("@media screen and (max-width: 600px) { .a { color: red; } } Hello")
        assert text.strip() == "Hello"

    def test_plain_text_untouched(self):
        text = "Summary: Need experts Name: Jane"
        assert remove_css(text) == text


class TestRemoveBoilerplate:
    def test_footer_cut(self):
        text = remove_boilerplate("Real content here. Unsubscribe from these emails at any time.")
        assert text.strip() == "Real content here."

    def test_index_block(self):
        text = remove_boilerplate("**** INDEX **** 1) Tech experts 2) Travel tips **** Queries")
        assert "INDEX" not in text
        assert "Tech experts" not in text
        assert text.strip() == "Queries"

    def test_tracking_token(self):
        text = remove_boilerplate("link?token=abc.def-123 rest")
        assert "abc.def" not in text
        assert "rest" in text

    def test_sponsor_block(self):
        text = remove_boilerplate("Sponsored by Acme. Buy things. Queries from HARO today")
        assert "Acme" not in text
        assert text.startswith("Queries from")


class TestNormalizeBody:
    def test_html_body(self):
        html = (
            "<html><head><style>p { color: #333; }</style></head><body>"
            "<p>Summary: Need experts</p><p>Name:&nbsp;Jane</p>"
            "<p>Follow us on Twitter</p><p>secret footer</p></body></html>"
        )
        text = normalize_body(html)
        assert text == "Summary: Need experts Name: Jane"

    def test_collapses_whitespace(self):
        assert normalize_body("a\n\n  b\t c") == "a b c"

    def test_empty(self):
        assert normalize_body("") == ""

    def test_double_encoded_entities(self):
        assert decode_entities("Q&amp;A") == "Q&A"


class TestCleanTextField:
    def test_mojibake_removed(self):
        cleaned = clean_text_field("Itâ€™s a great story")
        assert "â" not in cleaned
        assert "€" not in cleaned
        assert cleaned.endswith("great story")

    def test_collapses_whitespace(self):
        assert clean_text_field("  Jane   Doe ") == "Jane Doe"

    def test_none_passthrough(self):
        assert clean_text_field(None) is None
