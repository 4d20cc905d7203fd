from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    try:
        return int((os.getenv(name, "") or str(default)).strip())
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "on", "y", "t"}


def _env_list(name: str, default: str) -> List[str]:
    return [x.strip() for x in os.getenv(name, default).split(",") if x.strip()]


@dataclass
class _Settings:
    # Completion provider
    anthropic_api_key: str = field(default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""))
    anthropic_model: str = field(
        default_factory=lambda: os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-20250514")
    )
    anthropic_api_url: str = field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_URL", "https://api.anthropic.com/v1/messages")
    )
    llm_timeout: int = field(default_factory=lambda: _env_int("LLM_TIMEOUT", 60))

    # Storage
    base_dir: str = field(default_factory=lambda: os.getenv("BASE_DIR", "data"))
    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", ""))

    # Session
    passcode: str = field(default_factory=lambda: os.getenv("APP_PASSCODE", "change-me"))
    jwt_secret: str = field(
        default_factory=lambda: os.getenv("JWT_SECRET", "fallback-secret-change-in-production")
    )
    session_ttl_days: int = field(default_factory=lambda: _env_int("SESSION_TTL_DAYS", 7))
    cookie_secure: bool = field(default_factory=lambda: _env_bool("COOKIE_SECURE", False))
    cors_origins: List[str] = field(default_factory=lambda: _env_list("CORS_ORIGINS", "*"))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    log_json: bool = field(default_factory=lambda: _env_bool("LOG_JSON", False))

    # Dashboard
    api_url: str = field(default_factory=lambda: os.getenv("API_URL", "http://localhost:8000"))

    def resolved_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"sqlite:///{os.path.join(self.base_dir, 'app.db')}"


SETTINGS = _Settings()
