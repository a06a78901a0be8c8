"""
Route Exposer Administration Routes

All routes require the ``manage_options`` capability.

POST   /{ns}/create-route               → create a route definition
GET    /{ns}/routes                     → list all route definitions
GET    /{ns}/routes/{id}                → get one route definition
DELETE /{ns}/routes/{id}                → delete a route definition
POST   /{ns}/routes/{id}/activate       → expose the route again
POST   /{ns}/routes/{id}/deactivate     → stop exposing the route
POST   /{ns}/scan                       → scan a plugin for APIs
GET    /{ns}/apis                       → all discovered APIs, by plugin
GET    /{ns}/plugin/{plugin_slug}       → discovered APIs of one plugin
POST   /{ns}/expose                     → create a route from a discovered API
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from exposer.auth import Caller, require_capability
from exposer.constants.roles import MANAGE_OPTIONS
from exposer.container import ExposerServices  # noqa: TC001
from exposer.dependencies import get_services
from exposer.discovery import target_params_for
from exposer.exceptions import NotFoundError
from exposer.schemas.discovery import PluginDiscovery, ScanRequest
from exposer.schemas.route import ExposeRequest, RouteCreate, RouteDefinition, RouteStatusResponse

router = APIRouter(tags=["Route Exposer"])
logger = logging.getLogger(__name__)

require_admin = require_capability(MANAGE_OPTIONS)


# ── Route definitions ─────────────────────────────────────────────────────────


@router.post("/create-route", response_model=RouteDefinition)
async def create_route(
    payload: RouteCreate,
    caller: Caller = Depends(require_admin),
    services: ExposerServices = Depends(get_services),
) -> RouteDefinition:
    """Create a route definition; it is live from the next request on."""
    route = await services.route_store.create(payload)
    logger.info("Route %s created by %s", route.id, caller.subject)
    return route


@router.get("/routes", response_model=list[RouteDefinition])
async def list_routes(
    _caller: Caller = Depends(require_admin),
    services: ExposerServices = Depends(get_services),
) -> list[RouteDefinition]:
    return await services.route_store.list()


@router.get("/routes/{route_id}", response_model=RouteDefinition)
async def get_route(
    route_id: str,
    _caller: Caller = Depends(require_admin),
    services: ExposerServices = Depends(get_services),
) -> RouteDefinition:
    route = await services.route_store.get(route_id)
    if route is None:
        raise NotFoundError("Route not found", details={"id": route_id})
    return route


@router.delete("/routes/{route_id}", response_model=RouteStatusResponse)
async def delete_route(
    route_id: str,
    caller: Caller = Depends(require_admin),
    services: ExposerServices = Depends(get_services),
) -> RouteStatusResponse:
    """Delete a route. Deleting an unknown id succeeds."""
    await services.route_store.remove(route_id)
    logger.info("Route %s deleted by %s", route_id, caller.subject)
    return RouteStatusResponse(id=route_id)


@router.post("/routes/{route_id}/activate", response_model=RouteStatusResponse)
async def activate_route(
    route_id: str,
    _caller: Caller = Depends(require_admin),
    services: ExposerServices = Depends(get_services),
) -> RouteStatusResponse:
    await services.route_store.set_active(route_id, True)
    return RouteStatusResponse(id=route_id, active=True)


@router.post("/routes/{route_id}/deactivate", response_model=RouteStatusResponse)
async def deactivate_route(
    route_id: str,
    _caller: Caller = Depends(require_admin),
    services: ExposerServices = Depends(get_services),
) -> RouteStatusResponse:
    await services.route_store.set_active(route_id, False)
    return RouteStatusResponse(id=route_id, active=False)


# ── Discovery ─────────────────────────────────────────────────────────────────


@router.post("/scan", response_model=PluginDiscovery)
async def scan_plugin(
    payload: ScanRequest,
    _caller: Caller = Depends(require_admin),
    services: ExposerServices = Depends(get_services),
) -> PluginDiscovery:
    """Scan a plugin directory and store what was found, replacing the previous scan."""
    discovery = await run_in_threadpool(services.scanner.scan, payload.plugin_slug)
    await services.discovery_store.save(discovery)
    return discovery


@router.get("/apis", response_model=dict[str, PluginDiscovery])
async def get_all_apis(
    _caller: Caller = Depends(require_admin),
    services: ExposerServices = Depends(get_services),
) -> dict[str, PluginDiscovery]:
    return await services.discovery_store.all()


@router.get("/plugin/{plugin_slug}", response_model=PluginDiscovery)
async def get_plugin_apis(
    plugin_slug: str,
    _caller: Caller = Depends(require_admin),
    services: ExposerServices = Depends(get_services),
) -> PluginDiscovery:
    discovery = await services.discovery_store.get(plugin_slug)
    if discovery is None:
        raise NotFoundError("Plugin has not been scanned", details={"plugin_slug": plugin_slug})
    return discovery


@router.post("/expose", response_model=RouteDefinition)
async def expose_api(
    payload: ExposeRequest,
    caller: Caller = Depends(require_admin),
    services: ExposerServices = Depends(get_services),
) -> RouteDefinition:
    """Create a route that forwards to a previously discovered API."""
    api = await services.discovery_store.get_api(payload.plugin_slug, payload.api_id)
    route = await services.route_store.create(
        RouteCreate(
            slug=payload.slug,
            http_method=payload.http_method,
            target_kind=api.type,
            target_params=target_params_for(api),
        )
    )
    logger.info("Discovered API %s/%s exposed as %s by %s", payload.plugin_slug, api.id, route.slug, caller.subject)
    return route
