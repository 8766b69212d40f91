from __future__ import annotations

from typing import Optional

import pytest
from fastapi.testclient import TestClient

from workplace_insight.core.settings import Settings
from workplace_insight.main import create_app
from workplace_insight.services.prompt import PromptPayload

ENV_VARS = (
    "ARK_API_KEY", "ARK_API_Key", "ARK_APIKEY", "GEMINI_API_KEY",
    "ARK_MODEL", "ARK_EP_ID", "ARK_ENDPOINT_ID",
    "PORT", "HOST", "STATIC_DIR", "LOG_LEVEL",
)

VALID_JSON = '{"summary":{},"recommendations":{},"risks":[],"confidence":0.5,"disclaimer":"x"}'


class FakeLLM:
    """Records every prompt and answers with a canned text (or raises)."""

    def __init__(self, text: str = VALID_JSON, error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.calls: list[PromptPayload] = []

    def infer(self, prompt: PromptPayload) -> str:
        self.calls.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def make_settings(**kwargs) -> Settings:
    values = {"ARK_API_KEY": "test-key", "ARK_MODEL": "ep-test", "PORT": 3000, "STATIC_DIR": "does-not-exist"}
    values.update(kwargs)
    return Settings(_env_file=None, **values)


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def client(settings, fake_llm):
    with TestClient(create_app(settings, llm=fake_llm)) as c:
        yield c


def image_files(n: int, content_type: str = "image/png") -> list[tuple]:
    return [("images", (f"shot{i}.png", b"\x89PNG-fake-%d" % i, content_type)) for i in range(n)]
