"""
Plugin System

Public API for the plugin system:
    PluginMeta      - plugin metadata dataclass
    PluginBase      - abstract base class for all plugins
    PluginRegistry  - registry of actions, shortcodes, post types and taxonomies
    CorePlugin      - built-in targets
"""

from .base import PluginBase, PluginMeta
from .core_plugin import CorePlugin
from .registry import PluginRegistry

__all__ = ["CorePlugin", "PluginBase", "PluginMeta", "PluginRegistry"]
