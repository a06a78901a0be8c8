"""
Core Plugin

Registers the targets every site has:
  - post types:   post, page
  - taxonomies:   category, post_tag
  - ajax actions: ping                (echoes its parameters back as JSON)
                  handle_webhook      (stores the ``content`` of a JSON POST)
                  get_stored_content  (returns the last stored webhook content)
  - shortcode:    site_option         ([site_option name="blogname" default="..."])
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from exposer.exceptions import BadRequestError, NotFoundError
from exposer.plugins.base import PluginBase, PluginMeta
from exposer.services.option_service import OptionService

if TYPE_CHECKING:
    from exposer.plugins.registry import PluginRegistry
    from exposer.services.context import AjaxContext

logger = logging.getLogger(__name__)

WEBHOOK_CONTENT_OPTION = "last_webhook_content"

_META = PluginMeta(
    name="core",
    version="1.0.0",
    description="Built-in post types, taxonomies, the ping and webhook actions and the site_option shortcode",
    config_schema={
        "ping_enabled": {"type": "boolean", "default": True},
        "webhook_enabled": {"type": "boolean", "default": True},
    },
)


def _preview(content: Any, limit: int = 100) -> str:
    text = str(content)
    return text[:limit] + "..." if len(text) > limit else text


class CorePlugin(PluginBase):
    """Built-in targets; needs database access for the option-backed ones."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._config: dict[str, Any] = {}

    @property
    def meta(self) -> PluginMeta:
        return _META

    async def on_load(self, config: dict[str, Any]) -> None:
        self._config = config
        logger.debug(
            "CorePlugin loaded (ping_enabled=%s, webhook_enabled=%s)",
            config.get("ping_enabled", True),
            config.get("webhook_enabled", True),
        )

    def register(self, registry: PluginRegistry) -> None:
        registry.register_post_type("post")
        registry.register_post_type("page")
        registry.register_taxonomy("category", "post")
        registry.register_taxonomy("post_tag", "post")
        if self._config.get("ping_enabled", True):
            registry.add_action("ping", self.ping)
        if self._config.get("webhook_enabled", True):
            registry.add_action("handle_webhook", self.handle_webhook)
            registry.add_action("get_stored_content", self.get_stored_content)
        registry.add_shortcode("site_option", self.site_option)

    def ping(self, ctx: AjaxContext) -> None:
        ctx.send_json({"success": True, "data": {"pong": True, "params": ctx.params}})

    async def handle_webhook(self, ctx: AjaxContext) -> None:
        """
        Accept a JSON POST and keep its ``content`` field.

        A payload without ``content`` is acknowledged but stores nothing.

        Raises:
            BadRequestError: Not a POST, or the body is not JSON.
        """
        media_type = (ctx.content_type or "").split(";", 1)[0].strip().lower()
        if ctx.method != "POST" or media_type != "application/json":
            raise BadRequestError("Bad Request")

        if "content" in ctx.body_params:
            content = ctx.body_params["content"]
            async with self._session_factory() as db:
                await OptionService(db).set(WEBHOOK_CONTENT_OPTION, content)
            logger.info("Received webhook content: %s", _preview(content))

        ctx.write("Webhook received successfully.")

    async def get_stored_content(self, ctx: AjaxContext) -> dict[str, Any]:
        async with self._session_factory() as db:
            options = OptionService(db)
            if not await options.exists(WEBHOOK_CONTENT_OPTION):
                raise NotFoundError("No content found.", details={"option_name": WEBHOOK_CONTENT_OPTION})
            content = await options.get(WEBHOOK_CONTENT_OPTION)
        logger.info("Content retrieved from webhook storage")
        return {"content": content}

    async def site_option(self, atts: dict[str, str], content: str | None, tag: str) -> str:
        name = atts.get("name")
        if not name:
            return ""
        async with self._session_factory() as db:
            value = await OptionService(db).get(name)
        if value is None:
            return atts.get("default", "")
        return str(value)
