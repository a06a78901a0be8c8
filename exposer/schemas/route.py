"""
Route Schemas

Pydantic models describing a stored route definition and the payloads used
to create one.
"""

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HttpMethod(str, enum.Enum):
    """HTTP methods a route can be bound to."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class TargetKind(str, enum.Enum):
    """Subsystem a route forwards to."""

    REST = "rest"
    AJAX = "ajax"
    POST_TYPE = "postType"
    TAXONOMY = "taxonomy"
    SHORTCODE = "shortcode"
    OPTION = "option"
    META = "meta"


# target_params keys that must be present (and non-empty) for each kind
REQUIRED_TARGET_PARAMS: dict[TargetKind, tuple[str, ...]] = {
    TargetKind.REST: ("route",),
    TargetKind.AJAX: ("action",),
    TargetKind.POST_TYPE: ("post_type",),
    TargetKind.TAXONOMY: ("taxonomy",),
    TargetKind.SHORTCODE: ("tag",),
    TargetKind.OPTION: ("option_name",),
    TargetKind.META: ("object_type", "meta_key"),
}

META_OBJECT_TYPES = ("post", "user", "term")

SLUG_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_-]*$"


class RouteBase(BaseModel):
    """Fields shared by route payloads and stored routes."""

    slug: str = Field(..., min_length=1, max_length=100, pattern=SLUG_PATTERN)
    http_method: HttpMethod = HttpMethod.GET
    target_kind: TargetKind
    target_params: dict[str, str] = Field(default_factory=dict)
    active: bool = True

    @field_validator("http_method", mode="before")
    @classmethod
    def _upper_method(cls, value):
        if isinstance(value, str):
            return value.upper()
        return value


class RouteCreate(RouteBase):
    """Payload for creating a route; id and created_at are assigned by the store."""


class RouteDefinition(RouteBase):
    """A persisted route definition."""

    model_config = ConfigDict(frozen=True)

    id: str
    created_at: datetime


class RouteStatusResponse(BaseModel):
    """Response for delete/activate/deactivate actions."""

    success: bool = True
    id: str
    active: bool | None = None


class ExposeRequest(BaseModel):
    """Create a route from a previously discovered API."""

    plugin_slug: str = Field(..., min_length=1)
    api_id: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1, max_length=100, pattern=SLUG_PATTERN)
    http_method: HttpMethod = HttpMethod.GET

    @field_validator("http_method", mode="before")
    @classmethod
    def _upper_method(cls, value):
        if isinstance(value, str):
            return value.upper()
        return value
