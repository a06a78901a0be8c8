"""
Tests for shortcode syntax helpers
"""

import pytest

from exposer.plugins.shortcodes import build_shortcode, parse_attributes, shortcode_pattern


class TestParseAttributes:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ('name="blogname"', {"name": "blogname"}),
            ("name='blogname'", {"name": "blogname"}),
            ("name=blogname", {"name": "blogname"}),
            ('  a="1"   b=\'two words\' c=3 ', {"a": "1", "b": "two words", "c": "3"}),
            ('NAME="x"', {"name": "x"}),
            ('data-id="7"', {"data-id": "7"}),
            ('empty=""', {"empty": ""}),
            ("", {}),
        ],
    )
    def test_forms(self, text, expected):
        assert parse_attributes(text) == expected

    def test_positional_values_are_ignored(self):
        assert parse_attributes('loose a="1"') == {"a": "1"}


class TestBuildShortcode:
    def test_without_attributes(self):
        assert build_shortcode("gallery", {}) == "[gallery]"

    def test_attributes_keep_order(self):
        assert build_shortcode("site_option", {"name": "blogname", "default": "x"}) == (
            '[site_option name="blogname" default="x"]'
        )

    def test_enclosing(self):
        assert build_shortcode("b", {}, "bold") == "[b]bold[/b]"

    def test_empty_content_still_encloses(self):
        assert build_shortcode("b", {"x": "1"}, "") == '[b x="1"][/b]'


class TestShortcodePattern:
    def test_self_closing(self):
        match = shortcode_pattern(["hr"]).search('before [hr class="thin" /] after')

        assert match.group("tag") == "hr"
        assert match.group("self_closing") == "/"
        assert match.group("content") is None

    def test_enclosing_content(self):
        match = shortcode_pattern(["b"]).search("[b]inner text[/b]")

        assert match.group(0) == "[b]inner text[/b]"
        assert match.group("content") == "inner text"

    def test_unclosed_tag_has_no_content(self):
        match = shortcode_pattern(["b"]).search("[b] trailing")

        assert match.group(0) == "[b]"
        assert match.group("content") is None

    def test_longer_tag_is_preferred(self):
        pattern = shortcode_pattern(["gal", "gallery"])
        assert pattern.search("[gallery ids=1]").group("tag") == "gallery"

    def test_tag_must_end_at_word_boundary(self):
        assert shortcode_pattern(["gal"]).search("[gallery]") is None
