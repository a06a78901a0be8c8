"""
Plugin source scanner.

Finds the registration calls a WordPress plugin makes in its PHP source,
without executing any of it:

- register_rest_route / register_rest_field
- add_action('wp_ajax_...')
- register_post_type
- register_taxonomy
- add_shortcode
- add_option / update_option / get_option
- add|update|get _post_meta / _user_meta / _term_meta

Every hit becomes a DiscoveredAPI carrying the fields a route of the
matching target kind needs, plus the file and line it was found on.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path

from exposer.exceptions import NotFoundError, ValidationError
from exposer.schemas.discovery import DiscoveredAPI, PluginDiscovery, SourceLocation
from exposer.schemas.route import TargetKind
from exposer.utils.slugify import slugify

logger = logging.getLogger(__name__)

# WP_REST_Server method constants
_REST_METHOD_CONSTANTS = {
    "READABLE": ["GET"],
    "CREATABLE": ["POST"],
    "EDITABLE": ["POST", "PUT", "PATCH"],
    "DELETABLE": ["DELETE"],
    "ALLMETHODS": ["GET", "POST", "PUT", "PATCH", "DELETE"],
}

# Id prefix and display label per kind
_KIND_LABELS = {
    TargetKind.REST: ("rest", "REST"),
    TargetKind.AJAX: ("ajax", "AJAX"),
    TargetKind.POST_TYPE: ("cpt", "Post Type"),
    TargetKind.TAXONOMY: ("tax", "Taxonomy"),
    TargetKind.SHORTCODE: ("shortcode", "Shortcode"),
    TargetKind.OPTION: ("option", "Option"),
    TargetKind.META: ("meta", "Meta"),
}


def line_number(content: str, offset: int) -> int:
    return content.count("\n", 0, offset) + 1


class PluginScanner:
    """
    Regex scanner over a plugin directory under ``plugins_dir``.

    Example:
        scanner = PluginScanner("plugins")
        discovery = scanner.scan("my-plugin")
        discovery.apis["rest_myplugin-v1-items"].type_fields["route"]
    """

    PATTERNS = {
        # register_rest_route('ns/v1', '/items', ...)
        "rest": re.compile(
            r"(register_rest_route|register_rest_field)\s*\(\s*['\"]([^'\"]+)['\"]?\s*,\s*['\"]([^'\"]+)['\"]?"
        ),
        # add_action('wp_ajax_my_action', 'callback')
        "ajax": re.compile(r"add_action\s*\(\s*['\"]wp_ajax_([^'\"]+)['\"]?\s*,\s*['\"]?([^'\"]+)['\"]?"),
        # register_post_type('book', ...)
        "post_type": re.compile(r"register_post_type\s*\(\s*['\"]([^'\"]+)['\"]?"),
        # register_taxonomy('genre', 'book', ...)
        "taxonomy": re.compile(r"register_taxonomy\s*\(\s*['\"]([^'\"]+)['\"]?\s*,\s*['\"]([^'\"]+)['\"]?"),
        # add_shortcode('tag', 'callback')
        "shortcode": re.compile(r"add_shortcode\s*\(\s*['\"]([^'\"]+)['\"]?\s*,\s*['\"]?([^'\"]+)['\"]?"),
        # get_option('name')
        "option": re.compile(r"(add_option|update_option|get_option)\s*\(\s*['\"]([^'\"]+)['\"]?"),
        # get_post_meta($id, 'key')
        "meta": re.compile(
            r"((?:add|update|get)_(post|user|term)_meta)\s*\(\s*[^,;]*?,\s*['\"]([^'\"]+)['\"]?"
        ),
    }

    # Secondary patterns, searched in the arguments following a registration
    METHODS_PATTERN = re.compile(r"['\"]methods['\"]\s*=>\s*(?:['\"]([^'\"]+)['\"]|WP_REST_Server::(\w+))")
    SUPPORTS_PATTERN = re.compile(r"['\"]supports['\"]\s*=>\s*(?:array\s*\(|\[)([^\)\]]+)[\)\]]")
    QUOTED_PATTERN = re.compile(r"['\"]([^'\"]+)['\"]")
    PLUGIN_NAME_PATTERN = re.compile(r"^[\s*#@/]*Plugin Name:\s*(.+)$", re.MULTILINE | re.IGNORECASE)

    # How far past a registration call to look for its arguments
    ARGUMENT_WINDOW = 800

    def __init__(self, plugins_dir: str | Path):
        self.plugins_dir = Path(plugins_dir)

    # ── Plugin directories ────────────────────────────────────────────────────

    def plugin_path(self, plugin_slug: str) -> Path:
        """
        Resolve a plugin slug to its directory.

        Raises:
            ValidationError: The slug is empty or not a single directory name.
            NotFoundError: No such plugin directory.
        """
        if not plugin_slug:
            raise ValidationError("Plugin slug is required", field="plugin_slug")
        if "/" in plugin_slug or "\\" in plugin_slug or plugin_slug in (".", ".."):
            raise ValidationError(f"Invalid plugin slug '{plugin_slug}'", field="plugin_slug")
        path = self.plugins_dir / plugin_slug
        if not path.is_dir():
            raise NotFoundError("Plugin not found", details={"plugin_slug": plugin_slug})
        return path

    def php_files(self, directory: Path) -> list[Path]:
        return sorted(path for path in directory.rglob("*.php") if path.is_file())

    def plugin_name(self, plugin_slug: str) -> str:
        """Name from the ``Plugin Name:`` header of a top-level PHP file, else the slug."""
        path = self.plugin_path(plugin_slug)
        for file in sorted(path.glob("*.php")):
            match = self.PLUGIN_NAME_PATTERN.search(self._read(file))
            if match:
                return match.group(1).strip()
        return plugin_slug

    # ── Scanning ──────────────────────────────────────────────────────────────

    def scan(self, plugin_slug: str) -> PluginDiscovery:
        """
        Scan every PHP file of a plugin.

        The first registration found for a given API id is kept; options and
        meta keys read or written in several places are reported once.
        """
        path = self.plugin_path(plugin_slug)
        apis: dict[str, DiscoveredAPI] = {}
        for file in self.php_files(path):
            relative = file.relative_to(self.plugins_dir).as_posix()
            for api in self.scan_content(self._read(file), relative):
                apis.setdefault(api.id, api)

        logger.info(f"Scanned plugin {plugin_slug}: {len(apis)} APIs found")
        return PluginDiscovery(
            name=self.plugin_name(plugin_slug),
            slug=plugin_slug,
            apis=apis,
            last_scanned=datetime.now(timezone.utc),
        )

    def scan_content(self, content: str, file: str) -> list[DiscoveredAPI]:
        """All registrations in one file's source, in kind order then file order."""
        found: list[DiscoveredAPI] = []

        def at(match: re.Match[str]) -> SourceLocation:
            return SourceLocation(file=file, line=line_number(content, match.start()))

        for match in self.PATTERNS["rest"].finditer(content):
            route = match.group(2).strip("/") + "/" + match.group(3).lstrip("/")
            methods = self._methods(content, match.end())
            found.append(self._api(TargetKind.REST, route, at(match), route=route, methods=methods))

        for match in self.PATTERNS["ajax"].finditer(content):
            action = match.group(1)
            found.append(self._api(TargetKind.AJAX, action, at(match), action=action, callback=match.group(2).strip()))

        for match in self.PATTERNS["post_type"].finditer(content):
            post_type = match.group(1)
            supports = self._supports(content, match.end())
            found.append(self._api(TargetKind.POST_TYPE, post_type, at(match), post_type=post_type, supports=supports))

        for match in self.PATTERNS["taxonomy"].finditer(content):
            taxonomy = match.group(1)
            found.append(
                self._api(TargetKind.TAXONOMY, taxonomy, at(match), taxonomy=taxonomy, object_type=match.group(2))
            )

        for match in self.PATTERNS["shortcode"].finditer(content):
            tag = match.group(1)
            found.append(self._api(TargetKind.SHORTCODE, tag, at(match), tag=tag, callback=match.group(2).strip()))

        seen_options: set[str] = set()
        for match in self.PATTERNS["option"].finditer(content):
            option_name = match.group(2)
            if option_name in seen_options:
                continue
            seen_options.add(option_name)
            found.append(
                self._api(TargetKind.OPTION, option_name, at(match), option_name=option_name, autoload="yes")
            )

        seen_meta: set[tuple[str, str]] = set()
        for match in self.PATTERNS["meta"].finditer(content):
            object_type, meta_key = match.group(2), match.group(3)
            if (meta_key, object_type) in seen_meta:
                continue
            seen_meta.add((meta_key, object_type))
            found.append(
                self._api(TargetKind.META, meta_key, at(match), meta_key=meta_key, object_type=object_type)
            )

        return found

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _api(self, kind: TargetKind, name: str, location: SourceLocation, **fields) -> DiscoveredAPI:
        prefix, label = _KIND_LABELS[kind]
        return DiscoveredAPI(
            id=f"{prefix}_{slugify(name)}",
            type=kind,
            name=f"{label}: {name}",
            source_location=location,
            type_fields=fields,
        )

    def _methods(self, content: str, offset: int) -> list[str]:
        match = self.METHODS_PATTERN.search(content, offset, offset + self.ARGUMENT_WINDOW)
        if match is None:
            return ["GET"]
        if match.group(1):
            return [method.strip().upper() for method in match.group(1).split(",") if method.strip()]
        return list(_REST_METHOD_CONSTANTS.get(match.group(2).upper(), ["GET"]))

    def _supports(self, content: str, offset: int) -> list[str]:
        match = self.SUPPORTS_PATTERN.search(content, offset, offset + self.ARGUMENT_WINDOW)
        if match is None:
            return ["title", "editor"]
        return self.QUOTED_PATTERN.findall(match.group(1)) or ["title", "editor"]

    @staticmethod
    def _read(file: Path) -> str:
        return file.read_text(encoding="utf-8", errors="replace")
