"""
Service container.

Everything a request handler needs is built once per application and kept
on ``app.state.services``; nothing is a module-level singleton.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from exposer.config import Settings
from exposer.database import create_engine_for, create_session_factory
from exposer.discovery import DiscoveryStore, PluginScanner
from exposer.plugins import CorePlugin, PluginBase, PluginRegistry
from exposer.services.dispatch_service import DispatchProxy
from exposer.services.materializer import RouteMaterializer
from exposer.services.route_store import RouteStore


@dataclass
class ExposerServices:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    http_client: httpx.AsyncClient
    registry: PluginRegistry
    plugins: list[PluginBase]
    route_store: RouteStore
    proxy: DispatchProxy
    materializer: RouteMaterializer
    scanner: PluginScanner
    discovery_store: DiscoveryStore


def build_services(settings: Settings, http_client: httpx.AsyncClient | None = None) -> ExposerServices:
    """Wire up the service graph for one application instance."""
    engine = create_engine_for(settings)
    session_factory = create_session_factory(engine)
    if http_client is None:
        http_client = httpx.AsyncClient(timeout=settings.upstream_timeout)

    registry = PluginRegistry()
    route_store = RouteStore(
        session_factory,
        option_name=settings.routes_option,
        strict_slug_uniqueness=settings.strict_slug_uniqueness,
    )
    proxy = DispatchProxy(
        session_factory,
        registry,
        http_client,
        upstream_base_url=settings.upstream_base_url,
        timeout=settings.upstream_timeout,
    )

    return ExposerServices(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        http_client=http_client,
        registry=registry,
        plugins=[CorePlugin(session_factory)],
        route_store=route_store,
        proxy=proxy,
        materializer=RouteMaterializer(route_store, proxy, settings.namespace),
        scanner=PluginScanner(settings.plugins_dir),
        discovery_store=DiscoveryStore(session_factory, option_name=settings.discovered_option),
    )
