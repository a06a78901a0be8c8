from .discovery import DiscoveredAPI, PluginDiscovery, ScanRequest, SourceLocation
from .route import (
    META_OBJECT_TYPES,
    REQUIRED_TARGET_PARAMS,
    ExposeRequest,
    HttpMethod,
    RouteCreate,
    RouteDefinition,
    RouteStatusResponse,
    TargetKind,
)

__all__ = [
    "DiscoveredAPI",
    "PluginDiscovery",
    "ScanRequest",
    "SourceLocation",
    "META_OBJECT_TYPES",
    "REQUIRED_TARGET_PARAMS",
    "ExposeRequest",
    "HttpMethod",
    "RouteCreate",
    "RouteDefinition",
    "RouteStatusResponse",
    "TargetKind",
]
