from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Hireflow"
    app_env: str = "development"
    app_host: str = "127.0.0.1"
    app_port: int = 8787
    log_level: str = "INFO"

    database_url: str = "sqlite:///./data/hireflow.db"
    data_dir: Path = Path("./data")

    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model_extractor: str = "gpt-4o-mini"
    openai_model_scorer: str = "gpt-4o-mini"
    openai_timeout_sec: int = 60

    llm_max_retries: int = 1
    llm_retry_backoff_sec: float = 2.0

    max_upload_bytes: int = MAX_UPLOAD_BYTES
    batch_reanalysis_delay_sec: float = 1.0
    stale_processing_minutes: int = 30
    default_review_status: str = "pending"

    cors_origins: str = "http://127.0.0.1:8787"

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if value not in allowed:
            raise ValueError(f"app_env must be one of {sorted(allowed)}")
        return value

    @field_validator("llm_max_retries")
    @classmethod
    def validate_retries(cls, value: int) -> int:
        if value < 0:
            raise ValueError("llm_max_retries must be >= 0")
        return value

    @property
    def ai_configured(self) -> bool:
        return bool(self.openai_api_key.strip())

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
