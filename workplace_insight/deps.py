from __future__ import annotations

from fastapi import Request

from workplace_insight.core.settings import Settings
from workplace_insight.services.analyst import WorkplaceAnalyst


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_analyst(request: Request) -> WorkplaceAnalyst:
    return request.app.state.analyst
