"""
Dispatch Proxy

One parameterized handler serves every materialized route. The route's
``target_kind`` selects a forwarding strategy and its ``target_params``
name the concrete target:

    rest       upstream HTTP API reached through httpx
    ajax       action handler registered in the plugin registry
    postType   posts of a registered post type
    taxonomy   terms of a registered taxonomy
    shortcode  shortcode expansion through the plugin registry
    option     a single option value (read, write, delete)
    meta       a single meta key on a post, user or term

Handlers receive an explicit RequestContext and never touch framework
request objects.
"""

from __future__ import annotations

import functools
import json
import logging
import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import httpx
from sqlalchemy import asc, delete, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from exposer.constants.roles import MANAGE_OPTIONS, edit_capability_for
from exposer.exceptions import (
    BadRequestError,
    ForbiddenError,
    MethodNotAllowedError,
    NotFoundError,
    UpstreamError,
)
from exposer.models import Meta, Post, Term, User
from exposer.plugins.registry import PluginRegistry, maybe_await
from exposer.plugins.shortcodes import build_shortcode
from exposer.schemas.route import RouteDefinition, TargetKind
from exposer.services.context import AjaxContext, RequestContext, parse_body_params
from exposer.services.option_service import OptionService
from exposer.utils.sanitize import sanitize_plain_text

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_POST_ORDER_COLUMNS = {
    "date": Post.created_at,
    "modified": Post.updated_at,
    "title": Post.title,
    "id": Post.id,
    "slug": Post.slug,
}

_TERM_ORDER_COLUMNS = {
    "name": Term.name,
    "slug": Term.slug,
    "count": Term.count,
    "id": Term.id,
}

_META_OBJECT_MODELS = {
    "post": Post,
    "user": User,
    "term": Term,
}

_TRUTHY = {"1", "true", "on", "yes"}


@dataclass
class ProxyResponse:
    """
    Result of one dispatch.

    ``content`` is JSON-serializable unless ``raw`` is set, in which case it
    holds the exact bytes to relay with ``media_type``.
    """

    content: Any = None
    status_code: int = 200
    media_type: str | None = "application/json"
    raw: bool = False
    headers: dict[str, str] = field(default_factory=dict)


ProxyHandler = Callable[[RequestContext], Awaitable[ProxyResponse]]


# ── Parameter helpers ─────────────────────────────────────────────────────────


def _int_param(params: dict[str, Any], name: str, default: int) -> int:
    value = params.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _bool_param(params: dict[str, Any], name: str, default: bool = False) -> bool:
    value = params.get(name)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def _text_param(params: dict[str, Any], name: str, default: str) -> str:
    value = sanitize_plain_text(params.get(name))
    return value or default


def _format_date(value) -> str | None:
    return value.strftime(DATE_FORMAT) if value is not None else None


def _like_pattern(search: str) -> str:
    """Substring LIKE pattern with ``%``, ``_`` and the escape character matched literally."""
    escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class DispatchProxy:
    """Forwards a materialized route's requests to its target subsystem."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        registry: PluginRegistry,
        http_client: httpx.AsyncClient,
        upstream_base_url: str,
        timeout: float = 30.0,
    ):
        self._session_factory = session_factory
        self._registry = registry
        self._http_client = http_client
        self.upstream_base_url = upstream_base_url
        self.timeout = timeout
        self._handlers: dict[TargetKind, Callable[[RouteDefinition, RequestContext], Awaitable[ProxyResponse]]] = {
            TargetKind.REST: self._dispatch_rest,
            TargetKind.AJAX: self._dispatch_ajax,
            TargetKind.POST_TYPE: self._dispatch_post_type,
            TargetKind.TAXONOMY: self._dispatch_taxonomy,
            TargetKind.SHORTCODE: self._dispatch_shortcode,
            TargetKind.OPTION: self._dispatch_option,
            TargetKind.META: self._dispatch_meta,
        }

    def bind(self, definition: RouteDefinition) -> ProxyHandler:
        """Return a request handler closed over one route definition."""
        return functools.partial(self.dispatch, definition)

    async def dispatch(self, definition: RouteDefinition, ctx: RequestContext) -> ProxyResponse:
        handler = self._handlers[definition.target_kind]
        logger.debug(f"Dispatching {ctx.method} {definition.slug} to {definition.target_kind.value}")
        return await handler(definition, ctx)

    # ── rest ──────────────────────────────────────────────────────────────────

    def upstream_url(self, route: str) -> str:
        return self.upstream_base_url.rstrip("/") + "/" + route.lstrip("/")

    async def _dispatch_rest(self, definition: RouteDefinition, ctx: RequestContext) -> ProxyResponse:
        url = self.upstream_url(definition.target_params["route"])
        headers = {}
        if ctx.content_type:
            headers["content-type"] = ctx.content_type

        try:
            response = await self._http_client.request(
                ctx.method,
                url,
                params=httpx.QueryParams(ctx.query_string) if ctx.query_string else None,
                content=ctx.body or None,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            logger.error(f"Upstream request timed out: {ctx.method} {url}")
            raise UpstreamError("Upstream request timed out", url=url) from e
        except httpx.HTTPError as e:
            logger.error(f"Upstream request failed: {ctx.method} {url}: {e}")
            raise UpstreamError(f"Upstream request failed: {e}", url=url) from e

        return ProxyResponse(
            content=response.content,
            status_code=response.status_code,
            media_type=response.headers.get("content-type"),
            raw=True,
        )

    # ── ajax ──────────────────────────────────────────────────────────────────

    async def _dispatch_ajax(self, definition: RouteDefinition, ctx: RequestContext) -> ProxyResponse:
        action = definition.target_params["action"]
        handler = self._registry.get_action(action)
        if handler is None:
            raise NotFoundError(f"Ajax action '{action}' is not registered", details={"action": action})

        ajax_ctx = AjaxContext(
            action=action,
            method=ctx.method,
            caller=ctx.caller,
            params={**ctx.params, "action": action},
            content_type=ctx.content_type,
            body_params=parse_body_params(ctx.body, ctx.content_type),
        )
        result = await maybe_await(handler(ajax_ctx))

        if isinstance(result, (dict, list)):
            return ProxyResponse(content=result)

        output = ajax_ctx.output
        if isinstance(result, str):
            output += result
        try:
            content = json.loads(output)
        except ValueError:
            content = {"data": output}
        return ProxyResponse(content=content)

    # ── postType ──────────────────────────────────────────────────────────────

    async def _meta_map(self, db: AsyncSession, object_type: str, object_ids: list[int]) -> dict[int, dict[str, Any]]:
        """All meta of the given objects, as ``{object_id: {meta_key: value}}``."""
        meta: dict[int, dict[str, Any]] = {object_id: {} for object_id in object_ids}
        if not object_ids:
            return meta
        result = await db.execute(
            select(Meta)
            .where(Meta.object_type == object_type, Meta.object_id.in_(object_ids))
            .order_by(Meta.id)
        )
        for row in result.scalars().all():
            meta[row.object_id][row.meta_key] = row.meta_value
        return meta

    async def _dispatch_post_type(self, definition: RouteDefinition, ctx: RequestContext) -> ProxyResponse:
        post_type = definition.target_params["post_type"]
        if not self._registry.has_post_type(post_type):
            raise NotFoundError("Invalid post type", details={"post_type": post_type})

        params = ctx.params
        page = max(_int_param(params, "page", 1), 1)
        # per_page of 0 or less returns every post
        per_page = max(_int_param(params, "per_page", 10), 0)
        orderby = _text_param(params, "orderby", "date").lower()
        order = _text_param(params, "order", "DESC").upper()
        search = _text_param(params, "search", "")
        post_id = _int_param(params, "id", 0)

        conditions = [Post.post_type == post_type, Post.status == "publish"]
        if search:
            pattern = _like_pattern(search)
            conditions.append(or_(Post.title.ilike(pattern, escape="\\"), Post.content.ilike(pattern, escape="\\")))
        if post_id:
            conditions.append(Post.id == post_id)
            per_page = 1

        column = _POST_ORDER_COLUMNS.get(orderby, Post.created_at)
        direction = asc if order == "ASC" else desc

        query = select(Post).where(*conditions).order_by(direction(column), direction(Post.id))
        if per_page:
            query = query.offset((page - 1) * per_page).limit(per_page)

        async with self._session_factory() as db:
            total = await db.scalar(select(func.count()).select_from(Post).where(*conditions))
            result = await db.execute(query)
            posts = result.scalars().all()
            meta = await self._meta_map(db, "post", [post.id for post in posts])

        return ProxyResponse(
            content={
                "posts": [
                    {
                        "id": post.id,
                        "title": post.title,
                        "content": post.content,
                        "excerpt": post.excerpt,
                        "slug": post.slug,
                        "status": post.status,
                        "date": _format_date(post.created_at),
                        "modified": _format_date(post.updated_at),
                        "author": post.author_id,
                        "meta": meta[post.id],
                    }
                    for post in posts
                ],
                "total": total or 0,
                "total_pages": math.ceil((total or 0) / per_page) if per_page else int(bool(total)),
                "current_page": page,
            }
        )

    # ── taxonomy ──────────────────────────────────────────────────────────────

    async def _dispatch_taxonomy(self, definition: RouteDefinition, ctx: RequestContext) -> ProxyResponse:
        taxonomy = definition.target_params["taxonomy"]
        if not self._registry.has_taxonomy(taxonomy):
            raise NotFoundError("Invalid taxonomy", details={"taxonomy": taxonomy})

        params = ctx.params
        hide_empty = _bool_param(params, "hide_empty")
        per_page = max(_int_param(params, "per_page", 0), 0)
        page = max(_int_param(params, "page", 1), 1)
        orderby = _text_param(params, "orderby", "name").lower()
        order = _text_param(params, "order", "ASC").upper()
        search = _text_param(params, "search", "")
        term_id = _int_param(params, "id", 0)

        query = select(Term).where(Term.taxonomy == taxonomy)
        if hide_empty:
            query = query.where(Term.count > 0)
        if search:
            query = query.where(Term.name.ilike(_like_pattern(search), escape="\\"))
        if term_id:
            query = query.where(Term.id == term_id)

        column = _TERM_ORDER_COLUMNS.get(orderby, Term.name)
        direction = desc if order == "DESC" else asc
        query = query.order_by(direction(column), direction(Term.id))
        # per_page=0 returns every term
        if per_page:
            query = query.offset((page - 1) * per_page).limit(per_page)

        async with self._session_factory() as db:
            result = await db.execute(query)
            terms = result.scalars().all()
            meta = await self._meta_map(db, "term", [term.id for term in terms])

        return ProxyResponse(
            content=[
                {
                    "id": term.id,
                    "name": term.name,
                    "slug": term.slug,
                    "description": term.description,
                    "count": term.count,
                    "parent": term.parent_id,
                    "meta": meta[term.id],
                }
                for term in terms
            ]
        )

    # ── shortcode ─────────────────────────────────────────────────────────────

    async def _dispatch_shortcode(self, definition: RouteDefinition, ctx: RequestContext) -> ProxyResponse:
        tag = definition.target_params["tag"]
        atts = {key: sanitize_plain_text(value) for key, value in ctx.params.items() if key != "content"}
        content = ctx.params.get("content")
        if content is not None:
            content = str(content)

        shortcode = build_shortcode(tag, atts, content)
        output = await self._registry.do_shortcode(shortcode)
        return ProxyResponse(content={"output": output, "shortcode": shortcode})

    # ── option ────────────────────────────────────────────────────────────────

    async def _dispatch_option(self, definition: RouteDefinition, ctx: RequestContext) -> ProxyResponse:
        option_name = definition.target_params["option_name"]

        if ctx.method == "GET":
            async with self._session_factory() as db:
                options = OptionService(db)
                if not await options.exists(option_name):
                    raise NotFoundError("Option not found", details={"option_name": option_name})
                value = await options.get(option_name)
            return ProxyResponse(content={"option_name": option_name, "value": value})

        if ctx.method == "POST":
            if not ctx.caller.can(MANAGE_OPTIONS):
                raise ForbiddenError("You do not have permission to update options", required_capability=MANAGE_OPTIONS)
            if "value" not in ctx.params:
                raise BadRequestError("Value parameter is required", field="value")
            value = ctx.params["value"]
            async with self._session_factory() as db:
                options = OptionService(db)
                changed = not await options.exists(option_name) or await options.get(option_name) != value
                if changed:
                    await options.set(option_name, value)
            logger.info(f"Option updated through proxy: {option_name}")
            return ProxyResponse(content={"success": changed, "option_name": option_name, "value": value})

        if ctx.method == "DELETE":
            if not ctx.caller.can(MANAGE_OPTIONS):
                raise ForbiddenError("You do not have permission to delete options", required_capability=MANAGE_OPTIONS)
            async with self._session_factory() as db:
                deleted = await OptionService(db).delete(option_name)
            logger.info(f"Option deleted through proxy: {option_name}")
            return ProxyResponse(content={"success": deleted, "option_name": option_name})

        raise MethodNotAllowedError(ctx.method, allowed=["GET", "POST", "DELETE"])

    # ── meta ──────────────────────────────────────────────────────────────────

    async def _dispatch_meta(self, definition: RouteDefinition, ctx: RequestContext) -> ProxyResponse:
        object_type = definition.target_params["object_type"]
        meta_key = definition.target_params["meta_key"]

        if not ctx.params.get("id"):
            raise BadRequestError("Object ID is required", field="id")
        object_id = _int_param(ctx.params, "id", 0)

        model = _META_OBJECT_MODELS.get(object_type)
        if model is None:
            raise BadRequestError("Invalid object type", field="object_type")

        async with self._session_factory() as db:
            if not object_id or await db.get(model, object_id) is None:
                raise NotFoundError(f"{object_type.capitalize()} not found", details={"object_id": object_id})

            identity = {"meta_key": meta_key, "object_type": object_type, "object_id": object_id}
            row_filter = (
                Meta.object_type == object_type,
                Meta.object_id == object_id,
                Meta.meta_key == meta_key,
            )

            if ctx.method == "GET":
                result = await db.execute(select(Meta).where(*row_filter).order_by(Meta.id).limit(1))
                row = result.scalar_one_or_none()
                return ProxyResponse(content={**identity, "value": row.meta_value if row is not None else None})

            if ctx.method not in ("POST", "DELETE"):
                raise MethodNotAllowedError(ctx.method, allowed=["GET", "POST", "DELETE"])

            capability = edit_capability_for(object_type)
            if not ctx.caller.can(capability):
                verb = "update" if ctx.method == "POST" else "delete"
                raise ForbiddenError(
                    f"You do not have permission to {verb} {object_type} meta",
                    required_capability=capability,
                )

            if ctx.method == "POST":
                if "value" not in ctx.params:
                    raise BadRequestError("Value parameter is required", field="value")
                value = ctx.params["value"]
                result = await db.execute(select(Meta).where(*row_filter).order_by(Meta.id))
                rows = result.scalars().all()
                if rows:
                    rows[0].meta_value = value
                    for extra in rows[1:]:
                        await db.delete(extra)
                else:
                    db.add(Meta(object_type=object_type, object_id=object_id, meta_key=meta_key, meta_value=value))
                await db.commit()
                logger.info(f"Meta updated through proxy: {object_type} {object_id} {meta_key}")
                return ProxyResponse(content={"success": True, **identity, "value": value})

            result = await db.execute(delete(Meta).where(*row_filter))
            await db.commit()
            logger.info(f"Meta deleted through proxy: {object_type} {object_id} {meta_key}")
            return ProxyResponse(content={"success": result.rowcount > 0, **identity})
