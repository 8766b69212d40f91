from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from conftest import make_settings
from workplace_insight.core.errors import ConfigurationError, ExternalServiceError
from workplace_insight.services.llm_client import (
    ArkLLM,
    GeminiLLM,
    LLMConfig,
    build_llm,
)
from workplace_insight.services.prompt import ImagePart, TextPart

PROMPT = (TextPart("instructions"), TextPart("notes"), ImagePart(data=b"img", mime_type="image/png"))


def test_ark_sends_single_user_message_with_ordered_parts():
    sdk = MagicMock()
    sdk.responses.create.return_value = SimpleNamespace(output_text='{"ok": 1}')
    llm = ArkLLM(api_key="k", model="ep-1", client=sdk)

    assert llm.infer(PROMPT) == '{"ok": 1}'

    sdk.responses.create.assert_called_once()
    kwargs = sdk.responses.create.call_args.kwargs
    assert kwargs["model"] == "ep-1"
    assert kwargs["input"] == [
        {
            "role": "user",
            "content": [
                {"type": "input_text", "text": "instructions"},
                {"type": "input_text", "text": "notes"},
                {"type": "input_image", "image_url": "data:image/png;base64,aW1n"},
            ],
        }
    ]


def test_ark_missing_output_text_becomes_empty_string():
    sdk = MagicMock()
    sdk.responses.create.return_value = SimpleNamespace(output_text=None)

    assert ArkLLM(api_key="k", model="m", client=sdk).infer(PROMPT) == ""


def test_ark_sdk_errors_become_external_service_error():
    sdk = MagicMock()
    sdk.responses.create.side_effect = TimeoutError("upstream timed out")
    llm = ArkLLM(api_key="k", model="m", client=sdk)

    with pytest.raises(ExternalServiceError) as exc_info:
        llm.infer(PROMPT)

    assert exc_info.value.detail == "TimeoutError: upstream timed out"
    assert exc_info.value.status_code == 500


def test_ark_builds_openai_client_with_fixed_base_url(monkeypatch):
    created = {}

    class FakeOpenAI:
        def __init__(self, **kwargs):
            created.update(kwargs)

    monkeypatch.setattr("openai.OpenAI", FakeOpenAI)
    ArkLLM(api_key="secret", model="m")

    assert created == {"api_key": "secret", "base_url": "https://ark.cn-beijing.volces.com/api/v3"}


def test_gemini_sends_text_and_inline_image_parts():
    from google.genai import types

    sdk = MagicMock()
    sdk.models.generate_content.return_value = SimpleNamespace(text="not json")
    llm = GeminiLLM(api_key="k", model="gemini-2.5-flash", client=sdk)

    assert llm.infer(PROMPT) == "not json"

    kwargs = sdk.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "gemini-2.5-flash"
    (content,) = kwargs["contents"]
    assert isinstance(content, types.Content)
    assert content.role == "user"
    assert [p.text for p in content.parts[:2]] == ["instructions", "notes"]
    assert content.parts[2].inline_data.data == b"img"
    assert content.parts[2].inline_data.mime_type == "image/png"


def test_gemini_errors_become_external_service_error():
    sdk = MagicMock()
    sdk.models.generate_content.side_effect = RuntimeError("quota")

    with pytest.raises(ExternalServiceError):
        GeminiLLM(api_key="k", model="m", client=sdk).infer(PROMPT)


def test_build_llm_selects_provider():
    sdk = MagicMock()
    assert isinstance(build_llm(LLMConfig("ark", "m", "k"), client=sdk), ArkLLM)
    assert isinstance(build_llm(LLMConfig("Gemini ", "m", "k"), client=sdk), GeminiLLM)

    with pytest.raises(ConfigurationError):
        build_llm(LLMConfig("bedrock", "m", "k"), client=sdk)


def test_llm_config_requires_key_and_model():
    with pytest.raises(ConfigurationError):
        LLMConfig.from_settings(make_settings(ARK_API_KEY=None))
    with pytest.raises(ConfigurationError):
        LLMConfig.from_settings(make_settings(ARK_MODEL=None))

    cfg = LLMConfig.from_settings(make_settings())
    assert (cfg.provider, cfg.model, cfg.api_key) == ("ark", "ep-test", "test-key")
