"""
Tests for input sanitization utilities

Shortcode attributes pass through sanitize_plain_text before they are
rendered into the invocation string.
"""

from exposer.utils.sanitize import sanitize_plain_text


class TestPlainTextSanitization:
    """Test plain text sanitization (strip all HTML)"""

    def test_strips_script_tags(self):
        clean = sanitize_plain_text("<script>alert(1)</script>Hello World")
        assert "<script>" not in clean
        assert "Hello World" in clean

    def test_strips_all_html_tags(self):
        clean = sanitize_plain_text("<div><p>Hello <strong>World</strong></p></div>")
        assert clean == "Hello World"

    def test_normalizes_whitespace(self):
        assert sanitize_plain_text("Hello    \n\n  World") == "Hello World"

    def test_strips_surrounding_whitespace(self):
        assert sanitize_plain_text("   padded   ") == "padded"

    def test_handles_none_input(self):
        assert sanitize_plain_text(None) == ""

    def test_handles_empty_string(self):
        assert sanitize_plain_text("") == ""

    def test_converts_non_strings(self):
        assert sanitize_plain_text(42) == "42"
        assert sanitize_plain_text(True) == "True"

    def test_plain_text_unchanged(self):
        assert sanitize_plain_text("blogname") == "blogname"

    def test_ampersand_kept_literal(self):
        assert sanitize_plain_text("Tom & Jerry") == "Tom & Jerry"

    def test_stray_angle_bracket_kept_literal(self):
        assert sanitize_plain_text("a < b") == "a < b"

    def test_tags_stripped_around_ampersand(self):
        assert sanitize_plain_text("<b>R&D</b> team") == "R&D team"
