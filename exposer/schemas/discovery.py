from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from exposer.schemas.route import TargetKind


class SourceLocation(BaseModel):
    """Where a registration was found; informational only."""

    file: str
    line: int


class DiscoveredAPI(BaseModel):
    id: str
    type: TargetKind
    name: str
    source_location: SourceLocation
    type_fields: dict[str, Any] = Field(default_factory=dict)


class PluginDiscovery(BaseModel):
    """All APIs found in one plugin during its last scan."""

    name: str
    slug: str
    apis: dict[str, DiscoveredAPI] = Field(default_factory=dict)
    last_scanned: datetime


class ScanRequest(BaseModel):
    plugin_slug: str = ""
