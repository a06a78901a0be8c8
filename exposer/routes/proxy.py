"""
Exposed endpoints.

``/{ns}/{slug}`` for every method a route can bind. The route table is
materialized from the store on each request, so the set of live endpoints
always matches the stored, active definitions.

Must be included after the admin router: admin paths win over slugs.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from exposer.auth import Caller, get_caller
from exposer.container import ExposerServices  # noqa: TC001
from exposer.dependencies import get_services
from exposer.schemas.route import HttpMethod
from exposer.services.context import build_request_context
from exposer.services.dispatch_service import ProxyResponse

router = APIRouter(tags=["Exposed Routes"])
logger = logging.getLogger(__name__)


def render_proxy_response(result: ProxyResponse) -> Response:
    if result.raw:
        return Response(
            content=result.content,
            status_code=result.status_code,
            media_type=result.media_type,
            headers=result.headers,
        )
    return JSONResponse(content=result.content, status_code=result.status_code, headers=result.headers)


@router.api_route("/{slug}", methods=[method.value for method in HttpMethod])
async def exposed_route(
    slug: str,
    request: Request,
    caller: Caller = Depends(get_caller),
    services: ExposerServices = Depends(get_services),
) -> Response:
    table = await services.materializer.materialize()
    route = table.resolve(request.method, slug)
    ctx = await build_request_context(request, caller)
    result = await route.handler(ctx)
    return render_proxy_response(result)
