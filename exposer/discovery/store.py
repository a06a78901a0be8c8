"""
Discovery Store

Keeps the latest scan result of every plugin in one option, keyed by
plugin slug.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from exposer.exceptions import NotFoundError
from exposer.schemas.discovery import DiscoveredAPI, PluginDiscovery
from exposer.schemas.route import REQUIRED_TARGET_PARAMS
from exposer.services.option_service import OptionService

logger = logging.getLogger(__name__)


def target_params_for(api: DiscoveredAPI) -> dict[str, str]:
    """The route target parameters a discovered API provides."""
    return {
        key: str(api.type_fields[key])
        for key in REQUIRED_TARGET_PARAMS[api.type]
        if api.type_fields.get(key) not in (None, "")
    }


class DiscoveryStore:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        option_name: str = "exposer_discovered_apis",
    ):
        self._session_factory = session_factory
        self.option_name = option_name

    async def all(self) -> dict[str, PluginDiscovery]:
        """Every stored scan result, keyed by plugin slug."""
        async with self._session_factory() as db:
            raw = await OptionService(db).get(self.option_name, {})
        if not isinstance(raw, dict):
            logger.warning(f"Option {self.option_name} does not hold discovery data; ignoring it")
            return {}
        return {slug: PluginDiscovery.model_validate(data) for slug, data in raw.items()}

    async def get(self, plugin_slug: str) -> PluginDiscovery | None:
        return (await self.all()).get(plugin_slug)

    async def save(self, discovery: PluginDiscovery) -> None:
        """Replace the stored result for the plugin."""
        plugins = await self.all()
        plugins[discovery.slug] = discovery
        table = {slug: plugin.model_dump(mode="json") for slug, plugin in plugins.items()}
        async with self._session_factory() as db:
            await OptionService(db).set(self.option_name, table, autoload=False)
        logger.info(f"Discovery saved for plugin {discovery.slug}: {len(discovery.apis)} APIs")

    async def get_api(self, plugin_slug: str, api_id: str) -> DiscoveredAPI:
        """
        Look up one discovered API.

        Raises:
            NotFoundError: The plugin was never scanned or has no such API.
        """
        plugin = await self.get(plugin_slug)
        if plugin is None:
            raise NotFoundError("Plugin has not been scanned", details={"plugin_slug": plugin_slug})
        api = plugin.apis.get(api_id)
        if api is None:
            raise NotFoundError("API not found", details={"plugin_slug": plugin_slug, "api_id": api_id})
        return api
