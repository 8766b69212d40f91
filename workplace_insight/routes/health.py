from __future__ import annotations

from fastapi import APIRouter, Depends

from workplace_insight.core.settings import Settings
from workplace_insight.deps import get_app_settings
from workplace_insight.schemas.inputs import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health(settings: Settings = Depends(get_app_settings)):
    return HealthResponse(
        ok=True,
        has_key=settings.has_key,
        has_model=settings.has_model,
        port=settings.PORT,
    )
