"""
Plugin Base Classes

PluginMeta: declarative metadata for a plugin (name, version, what it registers).
PluginBase: abstract base class all plugins must subclass.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from exposer.plugins.registry import PluginRegistry


@dataclass
class PluginMeta:
    """
    Declarative metadata describing a plugin.

    Attributes:
        name:          Machine-readable slug, e.g. "core".
        version:       Semver string, e.g. "1.0.0".
        description:   Human-readable description.
        author:        Plugin author (defaults to "Route Exposer Team").
        config_schema: JSON Schema fragments describing configurable options.
    """

    name: str
    version: str
    description: str
    author: str = "Route Exposer Team"
    config_schema: dict[str, Any] = field(default_factory=dict)


class PluginBase(ABC):
    """
    Abstract base class for all plugins.

    Subclasses must implement `meta` and `register`. `on_load`/`on_unload`
    default to no-ops so subclasses only override what they need.
    """

    @property
    @abstractmethod
    def meta(self) -> PluginMeta:
        """Return the plugin's metadata."""
        ...

    @abstractmethod
    def register(self, registry: PluginRegistry) -> None:
        """
        Register ajax actions, shortcodes, post types and taxonomies.

        Called once by PluginRegistry.register().
        """
        ...

    async def on_load(self, config: dict[str, Any]) -> None:  # noqa: B027
        """Called once at startup with the plugin's persisted config dict."""

    async def on_unload(self) -> None:  # noqa: B027
        """Called when the app shuts down."""
