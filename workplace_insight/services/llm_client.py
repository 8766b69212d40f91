from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol

from workplace_insight.core.errors import ConfigurationError, ExternalServiceError
from workplace_insight.core.settings import DEFAULT_ARK_BASE_URL, Settings
from workplace_insight.services.prompt import ImagePart, PromptPayload, TextPart

MISSING_KEY_MESSAGE = "ARK_API_KEY is not configured"
MISSING_MODEL_MESSAGE = (
    "ARK_MODEL or ARK_EP_ID is not configured "
    "(set it to an available model name or endpoint id, e.g. ep-xxxxxxxx)"
)


class InferenceClient(Protocol):
    def infer(self, prompt: PromptPayload) -> str:
        """Send one user message and return the model's text; raises ExternalServiceError."""
        ...


@dataclass
class LLMConfig:
    provider: str
    model: str
    api_key: str
    base_url: str = DEFAULT_ARK_BASE_URL

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMConfig":
        if not settings.api_key:
            raise ConfigurationError(MISSING_KEY_MESSAGE)
        if not settings.llm_model_id:
            raise ConfigurationError(MISSING_MODEL_MESSAGE)
        return cls(
            provider=settings.provider,
            model=settings.llm_model_id,
            api_key=settings.api_key,
            base_url=settings.llm_base_url,
        )


class ArkLLM:
    """Volcengine Ark through its OpenAI-compatible Responses API."""

    def __init__(self, api_key: str, model: str, base_url: str = DEFAULT_ARK_BASE_URL, client: Any = None):
        if client is None:
            from openai import OpenAI

            client = OpenAI(api_key=api_key, base_url=base_url)
        self.client = client
        self.model = model

    @staticmethod
    def to_content(prompt: PromptPayload) -> list[dict[str, str]]:
        content = []
        for part in prompt:
            if isinstance(part, TextPart):
                content.append({"type": "input_text", "text": part.text})
            elif isinstance(part, ImagePart):
                content.append({"type": "input_image", "image_url": part.data_url})
        return content

    def infer(self, prompt: PromptPayload) -> str:
        try:
            resp = self.client.responses.create(
                model=self.model,
                input=[{"role": "user", "content": self.to_content(prompt)}],
            )
            return getattr(resp, "output_text", None) or ""
        except Exception as e:
            raise ExternalServiceError.from_exception(e) from e


class GeminiLLM:
    def __init__(self, api_key: str, model: str, client: Any = None):
        from google.genai import types

        if client is None:
            from google import genai

            client = genai.Client(api_key=api_key)
        self._types = types
        self.client = client
        self.model = model

    def to_contents(self, prompt: PromptPayload) -> list[Any]:
        parts = []
        for part in prompt:
            if isinstance(part, TextPart):
                parts.append(self._types.Part.from_text(text=part.text))
            elif isinstance(part, ImagePart):
                parts.append(self._types.Part.from_bytes(data=part.data, mime_type=part.mime_type))
        return [self._types.Content(role="user", parts=parts)]

    def infer(self, prompt: PromptPayload) -> str:
        try:
            resp = self.client.models.generate_content(
                model=self.model,
                contents=self.to_contents(prompt),
            )
            return resp.text or ""
        except Exception as e:
            raise ExternalServiceError.from_exception(e) from e


def build_llm(cfg: LLMConfig, client: Optional[Any] = None) -> InferenceClient:
    provider = (cfg.provider or "").lower().strip()

    if provider == "ark":
        return ArkLLM(api_key=cfg.api_key, model=cfg.model, base_url=cfg.base_url, client=client)

    if provider == "gemini":
        return GeminiLLM(api_key=cfg.api_key, model=cfg.model, client=client)

    raise ConfigurationError(f"Unsupported llm provider: {cfg.provider}. Use provider: ark or gemini")
