"""
Explicit request context passed into the dispatch proxy.

Handlers never read ambient request state; everything they may look at
(method, parameters, raw body, caller) travels in these objects.
"""

from __future__ import annotations

import io
import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl

from fastapi import Request

if TYPE_CHECKING:
    from exposer.auth import Caller

logger = logging.getLogger(__name__)


@dataclass
class RequestContext:
    """An inbound proxy request, detached from the web framework."""

    method: str
    caller: Caller
    query: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    content_type: str | None = None
    params: dict[str, Any] = field(default_factory=dict)
    query_string: str = ""


def parse_body_params(body: bytes, content_type: str | None) -> dict[str, Any]:
    """Decode a JSON object or urlencoded form body into parameters."""
    if not body:
        return {}
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if media_type == "application/json" or media_type.endswith("+json"):
        try:
            data = json.loads(body)
        except ValueError:
            logger.debug("Request body is not valid JSON; no body params extracted")
            return {}
        return data if isinstance(data, dict) else {}
    if media_type == "application/x-www-form-urlencoded":
        return dict(parse_qsl(body.decode("utf-8", errors="replace"), keep_blank_values=True))
    return {}


async def build_request_context(request: Request, caller: Caller) -> RequestContext:
    """Snapshot a FastAPI request into a RequestContext."""
    body = await request.body()
    content_type = request.headers.get("content-type")
    query = dict(request.query_params)
    params: dict[str, Any] = {**query, **parse_body_params(body, content_type)}
    return RequestContext(
        method=request.method.upper(),
        caller=caller,
        query=query,
        body=body,
        content_type=content_type,
        params=params,
        query_string=request.url.query,
    )


@dataclass
class AjaxContext:
    """
    What an ajax action handler receives instead of global request state.

    Handlers write their response text with ``write``; the proxy reads it
    back from ``output`` once the handler returns.
    """

    action: str
    method: str
    caller: Caller
    params: dict[str, Any] = field(default_factory=dict)
    content_type: str | None = None
    # Decoded request body alone, without the query string
    body_params: dict[str, Any] = field(default_factory=dict)
    _buffer: io.StringIO = field(default_factory=io.StringIO, repr=False)

    def write(self, text: str) -> None:
        self._buffer.write(text)

    def send_json(self, data: Any) -> None:
        self.write(json.dumps(data))

    @property
    def output(self) -> str:
        return self._buffer.getvalue()
