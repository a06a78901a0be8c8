"""
FastAPI dependencies that hand out the process-wide service container.

The container is created once in ``create_app`` and stored on ``app.state``;
routes receive it explicitly instead of importing module-level singletons.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from exposer.config import Settings
    from exposer.container import ExposerServices


def get_services(request: Request) -> ExposerServices:
    return request.app.state.services


def get_settings(request: Request) -> Settings:
    return request.app.state.services.settings
