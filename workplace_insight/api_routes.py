from __future__ import annotations
from fastapi import APIRouter
from workplace_insight.routes.analyze import router as analyze_router
from workplace_insight.routes.health import router as health_router

router = APIRouter(prefix="/api")
router.include_router(health_router)
router.include_router(analyze_router)
