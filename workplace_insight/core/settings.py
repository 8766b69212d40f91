from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic_settings import (
    BaseSettings,
    InitSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

DEFAULT_ARK_BASE_URL = "https://ark.cn-beijing.volces.com/api/v3"


def _load_yaml_config() -> dict:
    root = Path(__file__).resolve().parents[2]  # project root
    cfg_path = root / "config.yaml"
    if not cfg_path.exists():
        return {}
    with open(cfg_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _yaml_values() -> dict[str, Any]:
    """Flatten config.yaml sections onto Settings field names."""
    cfg = _load_yaml_config()
    llm = (cfg.get("llm") or {})
    server = (cfg.get("server") or {})
    logging_cfg = (cfg.get("logging") or {})

    values = {
        "llm_provider": llm.get("provider"),
        "llm_base_url": llm.get("base_url"),
        "llm_model": llm.get("model"),
        "HOST": server.get("host"),
        "PORT": server.get("port"),
        "STATIC_DIR": server.get("static_dir"),
        "LOG_LEVEL": logging_cfg.get("level"),
    }
    return {k: v for k, v in values.items() if v is not None}


def _first_non_empty(*values: Optional[str]) -> Optional[str]:
    for v in values:
        if v and v.strip():
            return v
    return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=True,
    )

    # LLM
    llm_provider: str = "ark"
    llm_base_url: str = DEFAULT_ARK_BASE_URL
    llm_model: Optional[str] = None

    # Credential aliases, first non-empty wins
    ARK_API_KEY: Optional[str] = None
    ARK_API_Key: Optional[str] = None
    ARK_APIKEY: Optional[str] = None
    GEMINI_API_KEY: Optional[str] = None

    # Model / endpoint id aliases, first non-empty wins
    ARK_MODEL: Optional[str] = None
    ARK_EP_ID: Optional[str] = None
    ARK_ENDPOINT_ID: Optional[str] = None

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    STATIC_DIR: str = "public"
    LOG_LEVEL: str = "INFO"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # config.yaml sits below env and .env
        yaml_settings = InitSettingsSource(settings_cls, init_kwargs=_yaml_values())
        return init_settings, env_settings, dotenv_settings, yaml_settings, file_secret_settings

    @property
    def api_key(self) -> Optional[str]:
        ark_key = _first_non_empty(self.ARK_API_KEY, self.ARK_API_Key, self.ARK_APIKEY)
        if self.provider == "gemini":
            return _first_non_empty(self.GEMINI_API_KEY, ark_key)
        return ark_key

    @property
    def llm_model_id(self) -> Optional[str]:
        return _first_non_empty(self.ARK_MODEL, self.ARK_EP_ID, self.ARK_ENDPOINT_ID, self.llm_model)

    @property
    def provider(self) -> str:
        return (self.llm_provider or "").lower().strip()

    @property
    def has_key(self) -> bool:
        return self.api_key is not None

    @property
    def has_model(self) -> bool:
        return self.llm_model_id is not None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
