"""
Tests for the plugin source scanner and the discovery store

Test classes:
    TestPatterns        - one registration kind at a time
    TestScanPlugin      - directory scanning, names, ids and locations
    TestDiscoveryStore  - persisted scan results
"""

from datetime import datetime, timezone

import pytest

from exposer.discovery import DiscoveryStore, PluginScanner, target_params_for
from exposer.discovery.scanner import line_number
from exposer.exceptions import NotFoundError, ValidationError
from exposer.schemas.discovery import PluginDiscovery
from exposer.schemas.route import TargetKind

MAIN_FILE = """<?php
/**
 * Plugin Name: Book Shelf
 * Version: 1.2.0
 */
register_post_type('book', array(
    'public'   => true,
    'supports' => array('title', 'thumbnail'),
));
register_taxonomy('genre', 'book', array('hierarchical' => true));
add_shortcode('book_list', 'shelf_book_list');
$settings = get_option('shelf_settings');
"""

API_FILE = """<?php
add_action('rest_api_init', function () {
    register_rest_route('shelf/v1', '/books', array(
        'methods'  => WP_REST_Server::EDITABLE,
        'callback' => 'shelf_save_book',
    ));
});
add_action('wp_ajax_shelf_refresh', 'shelf_refresh');
update_option('shelf_settings', $settings);
"""


def scan_one(content):
    return {api.id: api for api in PluginScanner(".").scan_content(content, "plugin.php")}


@pytest.fixture
def plugins_dir(tmp_path):
    root = tmp_path / "plugins"
    (root / "shelf" / "includes").mkdir(parents=True)
    (root / "shelf" / "shelf.php").write_text(MAIN_FILE, encoding="utf-8")
    (root / "shelf" / "includes" / "api.php").write_text(API_FILE, encoding="utf-8")
    (root / "shelf" / "readme.txt").write_text("register_post_type('ignored');", encoding="utf-8")
    (root / "nameless").mkdir()
    (root / "nameless" / "index.php").write_text("<?php // Silence is golden.", encoding="utf-8")
    return root


# ══════════════════════════════════════════════════════════════════════════════
# 1. TestPatterns
# ══════════════════════════════════════════════════════════════════════════════


class TestPatterns:
    def test_rest_route_joins_namespace_and_path(self):
        apis = scan_one("register_rest_route( '/shop/v1/', '/orders', array( 'methods' => 'GET, POST' ) );")

        api = apis["rest_shop-v1-orders"]
        assert api.type == TargetKind.REST
        assert api.name == "REST: shop/v1/orders"
        assert api.type_fields == {"route": "shop/v1/orders", "methods": ["GET", "POST"]}

    @pytest.mark.parametrize(
        "methods,expected",
        [
            ("WP_REST_Server::READABLE", ["GET"]),
            ("WP_REST_Server::CREATABLE", ["POST"]),
            ("WP_REST_Server::EDITABLE", ["POST", "PUT", "PATCH"]),
            ("WP_REST_Server::DELETABLE", ["DELETE"]),
            ("'delete'", ["DELETE"]),
        ],
    )
    def test_rest_methods(self, methods, expected):
        apis = scan_one(f"register_rest_route('a/v1', '/b', array('methods' => {methods}));")
        assert apis["rest_a-v1-b"].type_fields["methods"] == expected

    def test_rest_methods_default_to_get(self):
        apis = scan_one("register_rest_route('a/v1', '/b', array('callback' => 'cb'));")
        assert apis["rest_a-v1-b"].type_fields["methods"] == ["GET"]

    def test_ajax_action(self):
        apis = scan_one("add_action( 'wp_ajax_shelf_refresh', 'shelf_refresh' );")

        api = apis["ajax_shelf_refresh"]
        assert api.type == TargetKind.AJAX
        assert api.type_fields == {"action": "shelf_refresh", "callback": "shelf_refresh"}

    def test_other_actions_ignored(self):
        assert scan_one("add_action('init', 'shelf_init');") == {}

    def test_post_type_supports(self):
        apis = scan_one(MAIN_FILE)

        assert apis["cpt_book"].type_fields == {"post_type": "book", "supports": ["title", "thumbnail"]}

    def test_post_type_default_supports(self):
        apis = scan_one("register_post_type('movie');")
        assert apis["cpt_movie"].type_fields["supports"] == ["title", "editor"]

    def test_taxonomy(self):
        apis = scan_one(MAIN_FILE)
        assert apis["tax_genre"].type_fields == {"taxonomy": "genre", "object_type": "book"}

    def test_shortcode(self):
        apis = scan_one(MAIN_FILE)

        api = apis["shortcode_book_list"]
        assert api.name == "Shortcode: book_list"
        assert api.type_fields == {"tag": "book_list", "callback": "shelf_book_list"}

    def test_options_reported_once_per_file(self):
        found = PluginScanner(".").scan_content(
            "get_option('a'); update_option('a', 1); add_option('b', 2);", "plugin.php"
        )

        options = [api for api in found if api.type == TargetKind.OPTION]
        assert [api.id for api in options] == ["option_a", "option_b"]
        assert options[0].type_fields == {"option_name": "a", "autoload": "yes"}

    @pytest.mark.parametrize(
        "call,object_type",
        [
            ("get_post_meta($post->ID, 'cover_color', true)", "post"),
            ("update_user_meta( $user_id, 'cover_color', $value )", "user"),
            ("add_term_meta($term_id, \"cover_color\", 'red')", "term"),
        ],
    )
    def test_meta(self, call, object_type):
        apis = scan_one(call + ";")
        assert apis["meta_cover_color"].type_fields == {"meta_key": "cover_color", "object_type": object_type}

    def test_meta_reported_once_per_key_and_type(self):
        found = PluginScanner(".").scan_content(
            "get_post_meta($id, 'k', true); update_post_meta($id, 'k', 1);", "plugin.php"
        )
        assert len([api for api in found if api.type == TargetKind.META]) == 1

    def test_line_numbers(self):
        content = "<?php\n\nregister_post_type('book');\n"
        api = scan_one(content)["cpt_book"]

        assert api.source_location.line == 3
        assert api.source_location.file == "plugin.php"
        assert line_number(content, 0) == 1


# ══════════════════════════════════════════════════════════════════════════════
# 2. TestScanPlugin
# ══════════════════════════════════════════════════════════════════════════════


class TestScanPlugin:
    def test_scan_collects_every_php_file(self, plugins_dir):
        discovery = PluginScanner(plugins_dir).scan("shelf")

        assert discovery.slug == "shelf"
        assert discovery.name == "Book Shelf"
        assert set(discovery.apis) == {
            "rest_shelf-v1-books",
            "ajax_shelf_refresh",
            "cpt_book",
            "tax_genre",
            "shortcode_book_list",
            "option_shelf_settings",
        }
        assert discovery.last_scanned.tzinfo is not None

    def test_locations_are_relative_to_plugins_dir(self, plugins_dir):
        discovery = PluginScanner(plugins_dir).scan("shelf")

        assert discovery.apis["cpt_book"].source_location.file == "shelf/shelf.php"
        assert discovery.apis["cpt_book"].source_location.line == 6
        assert discovery.apis["rest_shelf-v1-books"].source_location.file == "shelf/includes/api.php"

    def test_first_registration_of_an_id_wins(self, plugins_dir):
        discovery = PluginScanner(plugins_dir).scan("shelf")

        # includes/api.php sorts before shelf.php
        assert discovery.apis["option_shelf_settings"].source_location.file == "shelf/includes/api.php"

    def test_plugin_name_falls_back_to_slug(self, plugins_dir):
        scanner = PluginScanner(plugins_dir)
        assert scanner.plugin_name("nameless") == "nameless"
        assert scanner.scan("nameless").apis == {}

    def test_unknown_plugin(self, plugins_dir):
        with pytest.raises(NotFoundError) as exc_info:
            PluginScanner(plugins_dir).scan("ghost")
        assert exc_info.value.message == "Plugin not found"

    @pytest.mark.parametrize("slug", ["", "..", "shelf/includes", "a\\b"])
    def test_invalid_slug(self, plugins_dir, slug):
        with pytest.raises(ValidationError):
            PluginScanner(plugins_dir).plugin_path(slug)


# ══════════════════════════════════════════════════════════════════════════════
# 3. TestDiscoveryStore
# ══════════════════════════════════════════════════════════════════════════════


class TestDiscoveryStore:
    def test_target_params_for_each_kind(self, plugins_dir):
        apis = PluginScanner(plugins_dir).scan("shelf").apis

        assert target_params_for(apis["rest_shelf-v1-books"]) == {"route": "shelf/v1/books"}
        assert target_params_for(apis["ajax_shelf_refresh"]) == {"action": "shelf_refresh"}
        assert target_params_for(apis["cpt_book"]) == {"post_type": "book"}
        assert target_params_for(apis["tax_genre"]) == {"taxonomy": "genre"}
        assert target_params_for(apis["shortcode_book_list"]) == {"tag": "book_list"}
        assert target_params_for(apis["option_shelf_settings"]) == {"option_name": "shelf_settings"}

    def test_target_params_for_meta(self):
        api = scan_one("get_user_meta($id, 'nickname', true);")["meta_nickname"]
        assert target_params_for(api) == {"object_type": "user", "meta_key": "nickname"}

    async def test_empty_store(self, services):
        assert await services.discovery_store.all() == {}
        assert await services.discovery_store.get("shelf") is None

    async def test_save_and_load(self, services, plugins_dir):
        store = services.discovery_store
        discovery = PluginScanner(plugins_dir).scan("shelf")

        await store.save(discovery)

        loaded = await store.get("shelf")
        assert loaded == discovery
        assert list(await store.all()) == ["shelf"]

    async def test_rescan_replaces_previous_result(self, services):
        store = services.discovery_store
        now = datetime.now(timezone.utc)
        await store.save(PluginDiscovery(name="Old", slug="shelf", last_scanned=now))
        await store.save(PluginDiscovery(name="Other", slug="other", last_scanned=now))
        await store.save(PluginDiscovery(name="New", slug="shelf", last_scanned=now))

        plugins = await store.all()
        assert plugins["shelf"].name == "New"
        assert plugins["other"].name == "Other"

    async def test_get_api(self, services, plugins_dir):
        store = services.discovery_store
        await store.save(PluginScanner(plugins_dir).scan("shelf"))

        api = await store.get_api("shelf", "cpt_book")
        assert api.type == TargetKind.POST_TYPE

        with pytest.raises(NotFoundError, match="API not found"):
            await store.get_api("shelf", "cpt_movie")
        with pytest.raises(NotFoundError, match="Plugin has not been scanned"):
            await store.get_api("ghost", "cpt_book")
