"""
Route Store

Persists route definitions as one insertion-ordered ``{id: route}`` table
inside a single option. Every mutation reads the table, changes it and
writes it back whole; two writers racing on the same table can lose an
update (last writer wins).
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from exposer.exceptions import DuplicateSlugError, MissingFieldError, ValidationError
from exposer.schemas.route import (
    META_OBJECT_TYPES,
    REQUIRED_TARGET_PARAMS,
    RouteCreate,
    RouteDefinition,
    TargetKind,
)
from exposer.services.option_service import OptionService

logger = logging.getLogger(__name__)

# Single path segments already taken by the admin endpoints
RESERVED_SLUGS = frozenset({"routes", "create-route", "apis", "plugin", "scan", "expose"})


def generate_route_id() -> str:
    return uuid.uuid4().hex[:13]


def validate_target_params(target_kind: TargetKind, target_params: dict[str, str]) -> None:
    """
    Check that every field the target kind needs is present.

    Raises:
        MissingFieldError: A required key is absent or empty.
        ValidationError: A meta route names an unsupported object type.
    """
    for key in REQUIRED_TARGET_PARAMS[target_kind]:
        if not target_params.get(key):
            raise MissingFieldError(key, target_kind.value)

    if target_kind == TargetKind.META and target_params["object_type"] not in META_OBJECT_TYPES:
        raise ValidationError(
            f"Invalid object type '{target_params['object_type']}'",
            field="object_type",
            details={"allowed": list(META_OBJECT_TYPES)},
        )


class RouteStore:
    """CRUD over route definitions, backed by the option table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        option_name: str = "exposer_routes",
        strict_slug_uniqueness: bool = False,
    ):
        self._session_factory = session_factory
        self.option_name = option_name
        self.strict_slug_uniqueness = strict_slug_uniqueness

    # ── Table I/O ─────────────────────────────────────────────────────────────

    async def _load(self) -> dict[str, RouteDefinition]:
        async with self._session_factory() as db:
            raw = await OptionService(db).get(self.option_name, {})
        if not isinstance(raw, dict):
            logger.warning(f"Option {self.option_name} does not hold a route table; ignoring it")
            return {}
        return {route_id: RouteDefinition.model_validate(data) for route_id, data in raw.items()}

    async def _save(self, routes: dict[str, RouteDefinition]) -> None:
        table: dict[str, Any] = {route_id: route.model_dump(mode="json") for route_id, route in routes.items()}
        async with self._session_factory() as db:
            await OptionService(db).set(self.option_name, table)

    @staticmethod
    def _find_active_slug(
        routes: dict[str, RouteDefinition], slug: str, exclude_id: str | None = None
    ) -> RouteDefinition | None:
        for route in routes.values():
            if route.active and route.slug == slug and route.id != exclude_id:
                return route
        return None

    # ── Operations ────────────────────────────────────────────────────────────

    async def put(self, route: RouteDefinition) -> RouteDefinition:
        """
        Insert or replace a route.

        Raises:
            MissingFieldError: A field required by the target kind is absent.
            ValidationError: The slug is reserved.
            DuplicateSlugError: Another active route already uses the slug.
        """
        if route.slug in RESERVED_SLUGS:
            raise ValidationError(f"Slug '{route.slug}' is reserved", field="slug")
        validate_target_params(route.target_kind, route.target_params)

        routes = await self._load()
        if route.active:
            existing = self._find_active_slug(routes, route.slug, exclude_id=route.id)
            if existing is not None:
                raise DuplicateSlugError(route.slug, existing.id)

        routes[route.id] = route
        await self._save(routes)
        logger.info(f"Route stored: {route.id} ({route.http_method.value} {route.slug} -> {route.target_kind.value})")
        return route

    async def create(self, payload: RouteCreate) -> RouteDefinition:
        """Assign id and creation time, then store the route."""
        route = RouteDefinition(
            id=generate_route_id(),
            created_at=datetime.now(timezone.utc),
            **payload.model_dump(),
        )
        return await self.put(route)

    async def get(self, route_id: str) -> RouteDefinition | None:
        routes = await self._load()
        return routes.get(route_id)

    async def list(self) -> list[RouteDefinition]:
        """All routes, active and inactive, in insertion order."""
        routes = await self._load()
        return list(routes.values())

    async def remove(self, route_id: str) -> None:
        """Delete a route. Unknown ids are ignored."""
        routes = await self._load()
        if routes.pop(route_id, None) is None:
            return
        await self._save(routes)
        logger.info(f"Route removed: {route_id}")

    async def set_active(self, route_id: str, active: bool) -> None:
        """
        Activate or deactivate a route. Unknown ids are ignored.

        Reactivation only re-checks slug uniqueness in strict mode; otherwise
        two active routes may end up sharing a slug and the materializer keeps
        the last one.
        """
        routes = await self._load()
        route = routes.get(route_id)
        if route is None or route.active == active:
            return

        if active and self.strict_slug_uniqueness:
            existing = self._find_active_slug(routes, route.slug, exclude_id=route_id)
            if existing is not None:
                raise DuplicateSlugError(route.slug, existing.id)

        routes[route_id] = route.model_copy(update={"active": active})
        await self._save(routes)
        logger.info(f"Route {'activated' if active else 'deactivated'}: {route_id}")
