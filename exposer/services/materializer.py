"""
Route Materializer

Turns the stored route definitions into a table of live endpoints. The
table is rebuilt from the store on every request, so activating,
deactivating or deleting a route takes effect on the next request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from exposer.exceptions import RouteNotFoundError
from exposer.schemas.route import RouteDefinition
from exposer.services.dispatch_service import DispatchProxy, ProxyHandler
from exposer.services.route_store import RouteStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MaterializedRoute:
    """A live endpoint: full path, method and the bound proxy handler."""

    path: str
    method: str
    definition: RouteDefinition
    handler: ProxyHandler


@dataclass
class RouteTable:
    """Materialized routes keyed by ``(method, slug)``."""

    namespace: str
    _routes: dict[tuple[str, str], MaterializedRoute] = field(default_factory=dict)

    def add(self, route: MaterializedRoute) -> None:
        key = (route.method, route.definition.slug)
        previous = self._routes.get(key)
        if previous is not None:
            logger.warning(
                f"Route {route.definition.id} replaces {previous.definition.id} "
                f"for {route.method} {route.path}"
            )
        self._routes[key] = route

    def resolve(self, method: str, slug: str) -> MaterializedRoute:
        """
        Find the endpoint for a request.

        Raises:
            RouteNotFoundError: No active route matches the slug and method.
        """
        route = self._routes.get((method.upper(), slug))
        if route is None:
            raise RouteNotFoundError(slug, method.upper())
        return route

    @property
    def routes(self) -> list[MaterializedRoute]:
        return list(self._routes.values())

    def __len__(self) -> int:
        return len(self._routes)


class RouteMaterializer:
    def __init__(self, store: RouteStore, proxy: DispatchProxy, namespace: str):
        self.store = store
        self.proxy = proxy
        self.namespace = namespace.strip("/")

    def path_for(self, slug: str) -> str:
        return f"/{self.namespace}/{slug}"

    async def materialize(self) -> RouteTable:
        """Build a fresh table from every active route, in store order."""
        table = RouteTable(namespace=self.namespace)
        for definition in await self.store.list():
            if not definition.active:
                continue
            table.add(
                MaterializedRoute(
                    path=self.path_for(definition.slug),
                    method=definition.http_method.value,
                    definition=definition,
                    handler=self.proxy.bind(definition),
                )
            )
        logger.debug(f"Materialized {len(table)} routes under /{self.namespace}")
        return table
