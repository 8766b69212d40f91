from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from workplace_insight.core.errors import AnalyzerError, ExternalServiceError
from workplace_insight.deps import get_analyst
from workplace_insight.routes.form_reader import read_analyze_form
from workplace_insight.services.analyst import WorkplaceAnalyst

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analyze"])


def _error_response(e: AnalyzerError) -> JSONResponse:
    return JSONResponse(status_code=e.status_code, content=e.to_body())


@router.post("/analyze")
async def analyze(request: Request, analyst: WorkplaceAnalyst = Depends(get_analyst)):
    try:
        uploads, fields = await read_analyze_form(request)
        # The SDK call blocks; keep it off the event loop
        result = await run_in_threadpool(analyst.analyze, uploads, fields)
        return JSONResponse(content=result.to_body())
    except ExternalServiceError as e:
        logger.exception("analyze error")
        return _error_response(e)
    except AnalyzerError as e:
        return _error_response(e)
    except Exception as e:
        logger.exception("analyze error")
        return _error_response(ExternalServiceError.from_exception(e))
