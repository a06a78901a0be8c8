"""
Plugin Loader

Handles reading plugin configuration from the JSON file named by
``Settings.plugins_config_file`` and initialising plugins at startup.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from exposer.plugins.base import PluginBase
    from exposer.plugins.registry import PluginRegistry

logger = logging.getLogger(__name__)

# ── Default plugin config ─────────────────────────────────────────────────────
_DEFAULT_CONFIG: dict[str, dict[str, Any]] = {
    "core": {"enabled": True},
}


# ── Config I/O ────────────────────────────────────────────────────────────────


def load_plugins_config(config_file: str | Path) -> dict[str, dict[str, Any]]:
    """
    Load plugin configuration from disk.

    Returns defaults if the file does not exist or cannot be parsed.
    """
    path = Path(config_file)
    if path.exists():
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Failed to read plugins config: %s", exc)
    return copy.deepcopy(_DEFAULT_CONFIG)


# ── Startup initialisation ────────────────────────────────────────────────────


async def initialize_plugins(
    registry: PluginRegistry,
    plugins: list[PluginBase],
    config_file: str | Path,
) -> None:
    """
    Load and register the given plugins.

    Plugins whose config sets ``"enabled": false`` are skipped.
    """
    config = load_plugins_config(config_file)

    loaded = 0
    for plugin in plugins:
        plugin_config = config.get(plugin.meta.name, {})
        if not plugin_config.get("enabled", True):
            logger.info("Plugin %s is disabled; skipping", plugin.meta.name)
            continue
        await plugin.on_load(plugin_config)
        registry.register(plugin)
        loaded += 1

    logger.info("Plugin initialisation complete: %d plugins loaded", loaded)


async def unload_plugins(registry: PluginRegistry) -> None:
    for plugin in registry.all_plugins():
        await plugin.on_unload()
