from __future__ import annotations

import logging
import threading
from typing import Optional

from workplace_insight.core.errors import (
    ConfigurationError,
    ExternalServiceError,
    InvalidInputError,
)
from workplace_insight.core.settings import Settings
from workplace_insight.schemas.analysis import AnalysisResult, parse_analysis
from workplace_insight.schemas.inputs import FormFields, UploadSet
from workplace_insight.services.llm_client import (
    MISSING_KEY_MESSAGE,
    MISSING_MODEL_MESSAGE,
    InferenceClient,
    LLMConfig,
    build_llm,
)
from workplace_insight.services.prompt import build_prompt

logger = logging.getLogger(__name__)

MIN_IMAGES = 5

INSUFFICIENT_INPUT_MESSAGE = (
    f"Please upload at least {MIN_IMAGES} images, "
    "or switch to text-only mode and fill in the text"
)


class WorkplaceAnalyst:
    """
    Validate -> build prompt -> call the model once -> parse.

    Settings are read-only and shared by every request; nothing else is.
    """

    def __init__(self, settings: Settings, llm: Optional[InferenceClient] = None):
        self.settings = settings
        self._llm = llm
        self._llm_lock = threading.Lock()

    def _client(self) -> InferenceClient:
        # analyze() runs on threadpool workers; build the client once
        if self._llm is None:
            with self._llm_lock:
                if self._llm is None:
                    self._llm = build_llm(LLMConfig.from_settings(self.settings))
        return self._llm

    def analyze(self, uploads: UploadSet, fields: FormFields) -> AnalysisResult:
        if not self.settings.has_key:
            raise ConfigurationError(MISSING_KEY_MESSAGE)

        if len(uploads) < MIN_IMAGES and not fields.text_only:
            raise InvalidInputError(INSUFFICIENT_INPUT_MESSAGE)

        if not self.settings.has_model:
            raise ConfigurationError(MISSING_MODEL_MESSAGE)

        llm = self._client()
        prompt = build_prompt(uploads, fields)
        logger.info("Analyze request: images=%d text_only=%s", len(uploads), fields.text_only)

        try:
            text = llm.infer(prompt)
        except ExternalServiceError:
            raise
        except Exception as e:
            raise ExternalServiceError.from_exception(e) from e

        result = parse_analysis(text)
        logger.debug("Model returned %d chars (%s)", len(text or ""), type(result).__name__)
        return result
