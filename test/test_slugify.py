"""
Tests for slugify utility function

Slugs become the suffix of discovered API ids, so underscores survive.
"""

import pytest

from exposer.utils.slugify import slugify


class TestSlugifyBasic:
    """Test basic slugify functionality"""

    def test_slugify_simple_string(self):
        assert slugify("Hello World") == "hello-world"

    def test_slugify_lowercase_conversion(self):
        assert slugify("MiXeD CaSe") == "mixed-case"

    def test_slugify_route_path(self):
        """Namespaced REST routes turn their slashes into hyphens"""
        assert slugify("shelf/v1/books") == "shelf-v1-books"
        assert slugify("shop/v1/orders/(?P<id>\\d+)") == "shop-v1-orders-p-id-d"

    def test_slugify_keeps_underscores(self):
        assert slugify("shelf_refresh") == "shelf_refresh"
        assert slugify("_edit_lock") == "_edit_lock"

    def test_slugify_multiple_separators(self):
        assert slugify("Hello    World") == "hello-world"
        assert slugify("Hello!!!World") == "hello-world"


class TestSlugifyUnicode:
    def test_slugify_accented_characters(self):
        assert slugify("Café") == "cafe"
        assert slugify("Résumé") == "resume"

    def test_slugify_german_umlauts(self):
        assert slugify("Größe") == "grosse"


class TestSlugifyEdgeCases:
    """Test edge cases and error handling"""

    def test_slugify_empty_string_raises_error(self):
        with pytest.raises(ValueError) as exc_info:
            slugify("")

        assert "non-empty" in str(exc_info.value).lower()

    def test_slugify_none_raises_error(self):
        with pytest.raises(ValueError):
            slugify(None)

    def test_slugify_only_special_characters(self):
        assert slugify("@#$%^&*()") == ""

    def test_slugify_leading_trailing_hyphens(self):
        assert slugify("/wp/v2/") == "wp-v2"
        assert slugify("---Test---") == "test"

    def test_slugify_is_consistent(self):
        assert slugify("Test-Post") == slugify("Test Post") == "test-post"
