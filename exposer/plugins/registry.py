"""
Plugin Registry

PluginRegistry: stores registered plugins and everything they register:
ajax action handlers, shortcode handlers, post types and taxonomies. The
dispatch proxy looks targets up here.

One instance is built at process start and passed around explicitly.
Handlers may be plain functions or coroutine functions.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from exposer.plugins.shortcodes import parse_attributes, shortcode_pattern

if TYPE_CHECKING:
    from exposer.plugins.base import PluginBase

logger = logging.getLogger(__name__)

ActionHandler = Callable[..., Any]
ShortcodeHandler = Callable[[dict[str, str], "str | None", str], "str | Awaitable[str]"]


async def maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class PluginRegistry:
    """
    In-process registry for plugins and the targets they provide.

    Later registrations of the same action, shortcode tag, post type or
    taxonomy replace earlier ones.
    """

    def __init__(self) -> None:
        self._plugins: dict[str, PluginBase] = {}
        self._actions: dict[str, ActionHandler] = {}
        self._shortcodes: dict[str, ShortcodeHandler] = {}
        self._post_types: set[str] = set()
        self._taxonomies: dict[str, str] = {}

    # ── Plugins ───────────────────────────────────────────────────────────────

    def register(self, plugin: PluginBase) -> None:
        """Register a plugin and let it register its targets."""
        self._plugins[plugin.meta.name] = plugin
        plugin.register(self)
        logger.info("Plugin registered: %s v%s", plugin.meta.name, plugin.meta.version)

    def get(self, name: str) -> PluginBase | None:
        """Return the plugin with the given name, or None if not registered."""
        return self._plugins.get(name)

    def all_plugins(self) -> list[PluginBase]:
        """Return all registered plugins in registration order."""
        return list(self._plugins.values())

    def is_registered(self, name: str) -> bool:
        return name in self._plugins

    # ── Ajax actions ──────────────────────────────────────────────────────────

    def add_action(self, action: str, handler: ActionHandler) -> None:
        self._actions[action] = handler
        logger.debug("Ajax action registered: %s", action)

    def get_action(self, action: str) -> ActionHandler | None:
        return self._actions.get(action)

    def has_action(self, action: str) -> bool:
        return action in self._actions

    # ── Shortcodes ────────────────────────────────────────────────────────────

    def add_shortcode(self, tag: str, handler: ShortcodeHandler) -> None:
        self._shortcodes[tag] = handler
        logger.debug("Shortcode registered: %s", tag)

    def has_shortcode(self, tag: str) -> bool:
        return tag in self._shortcodes

    async def do_shortcode(self, text: str) -> str:
        """
        Expand every registered shortcode in ``text``.

        Unregistered tags and text without shortcodes are returned unchanged.
        """
        if not self._shortcodes or "[" not in text:
            return text

        pattern = shortcode_pattern(list(self._shortcodes))
        output: list[str] = []
        position = 0
        for match in pattern.finditer(text):
            output.append(text[position : match.start()])
            tag = match.group("tag")
            atts = parse_attributes(match.group("attrs") or "")
            rendered = await maybe_await(self._shortcodes[tag](atts, match.group("content"), tag))
            output.append("" if rendered is None else str(rendered))
            position = match.end()
        output.append(text[position:])
        return "".join(output)

    # ── Content types ─────────────────────────────────────────────────────────

    def register_post_type(self, post_type: str) -> None:
        self._post_types.add(post_type)

    def has_post_type(self, post_type: str) -> bool:
        return post_type in self._post_types

    def register_taxonomy(self, taxonomy: str, object_type: str = "post") -> None:
        self._taxonomies[taxonomy] = object_type

    def has_taxonomy(self, taxonomy: str) -> bool:
        return taxonomy in self._taxonomies
