from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from workplace_insight.api_routes import router as api_router
from workplace_insight.core.errors import InvalidInputError
from workplace_insight.core.log_config import configure_logging
from workplace_insight.core.settings import Settings, get_settings
from workplace_insight.services.analyst import WorkplaceAnalyst
from workplace_insight.services.llm_client import InferenceClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if not settings.has_key:
        logger.warning(
            "No API key found: set ARK_API_KEY (or the compatible ARK_API_Key / ARK_APIKEY)"
        )
    logger.info(
        "Workplace insight server starting: provider=%s has_key=%s has_model=%s port=%d",
        settings.provider, settings.has_key, settings.has_model, settings.PORT,
    )
    yield


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    detail = errors[0].get("msg", "invalid request") if errors else "invalid request"
    err = InvalidInputError("Invalid request", detail=str(detail))
    return JSONResponse(status_code=err.status_code, content=err.to_body())


def create_app(settings: Optional[Settings] = None, llm: Optional[InferenceClient] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="Workplace Insight", lifespan=lifespan)
    app.state.settings = settings
    app.state.analyst = WorkplaceAnalyst(settings, llm=llm)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(api_router)

    # Front-end bundle; mounted last so /api/* takes precedence
    static_dir = Path(settings.STATIC_DIR)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    logger.info("Server running at http://localhost:%d", settings.PORT)
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
