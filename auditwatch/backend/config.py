"""
backend/config.py

Application configuration via Pydantic Settings.
All values can be overridden with environment variables or a .env file.

Quick start: create a .env file in your project root:
    LLM_API_KEY=sk-...
    LLM_MODEL=gpt-3.5-turbo-instruct
    EXTRA_RISK_PHRASES=privilege escalation,audit log cleared
    ALERT_WEBHOOK_URL=http://localhost:9000/alerts
"""

from __future__ import annotations

import json
import shlex
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Log source (EventID 4625 = failed logon)
    LOG_SOURCE_COMMAND: str = "wevtutil qe Security /q:*[System[(EventID=4625)]] /f:Text"
    LOG_SOURCE_ENCODING: str = "utf-8"

    # Classifier: appended after the built-in rules
    EXTRA_RISK_PHRASES: Annotated[list[str], NoDecode] = []

    # LLM / OpenAI-compatible completions endpoint
    LLM_ENABLED: bool = True
    LLM_BASE_URL: str = "https://api.openai.com/v1"
    LLM_API_KEY: str = ""
    LLM_MODEL: str = "gpt-3.5-turbo-instruct"
    LLM_MAX_TOKENS: int = 50
    LLM_TIMEOUT_SECONDS: float = 8.0
    LLM_MAX_RETRIES: int = 0      # 0 = one attempt per anomaly
    LLM_RETRY_BACKOFF_SECONDS: float = 0.5

    # Escalation
    ESCALATION_WORKERS: int = 4
    RUN_TIMEOUT_SECONDS: float = 60.0   # 0 disables the run deadline

    # Alerts
    ALERT_APP_ID: str = "Windows Security Audit"
    ALERT_WEBHOOK_URL: str = ""

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator("EXTRA_RISK_PHRASES", mode="before")
    @classmethod
    def parse_phrases(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if not v.startswith("["):
                return [p.strip() for p in v.split(",") if p.strip()]
            try:
                v = json.loads(v)
            except json.JSONDecodeError:
                return [p.strip() for p in v.split(",") if p.strip()]
        if isinstance(v, list):
            return [str(p).strip() for p in v if str(p).strip()]
        return v

    @field_validator("ESCALATION_WORKERS")
    @classmethod
    def at_least_one_worker(cls, v: int) -> int:
        if v < 1:
            raise ValueError("ESCALATION_WORKERS must be >= 1")
        return v

    @property
    def log_source_argv(self) -> list[str]:
        """LOG_SOURCE_COMMAND split into an argv list (no shell involved)."""
        return shlex.split(self.LOG_SOURCE_COMMAND)


settings = Settings()
