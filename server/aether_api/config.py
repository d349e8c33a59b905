"""Server configuration with environment variable overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv(override=False)

_APP_ENVS = {"development", "production", "test"}

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; StudioAetherBot/1.0)"
DEFAULT_DEV_ORIGINS = ("http://localhost:3000", "http://127.0.0.1:3000")


@dataclass(slots=True)
class Settings:
    """Scrape proxy settings. Override any field via environment variable."""

    app_env: str = os.environ.get("APP_ENV", "production").strip().lower()
    host: str = os.environ.get("SERVER_HOST", "0.0.0.0")
    port: int = int(os.environ.get("PORT", "3001"))
    frontend_url: str = os.environ.get("FRONTEND_URL", "")
    production_url: str = os.environ.get("PRODUCTION_URL", "")
    scrape_timeout_s: float = float(os.environ.get("SCRAPE_TIMEOUT_S", "10.0"))
    scrape_max_chars: int = int(os.environ.get("SCRAPE_MAX_CHARS", "5000"))
    scrape_min_chars: int = int(os.environ.get("SCRAPE_MIN_CHARS", "10"))
    scrape_user_agent: str = os.environ.get("SCRAPE_USER_AGENT", DEFAULT_USER_AGENT)

    def __post_init__(self) -> None:
        if self.app_env not in _APP_ENVS:
            raise ValueError("APP_ENV must be one of: development, production, test")
        if not (1 <= self.port <= 65535):
            raise ValueError("PORT must be in [1, 65535]")
        if self.scrape_timeout_s <= 0.0:
            raise ValueError("SCRAPE_TIMEOUT_S must be > 0")
        if self.scrape_min_chars < 0:
            raise ValueError("SCRAPE_MIN_CHARS must be >= 0")
        if self.scrape_max_chars < max(1, self.scrape_min_chars):
            raise ValueError("SCRAPE_MAX_CHARS must be >= max(1, SCRAPE_MIN_CHARS)")

    @property
    def development(self) -> bool:
        return self.app_env == "development"

    @property
    def allowed_origins(self) -> list[str]:
        """CORS allow-list: local dev origins plus any configured site URLs."""
        origins = list(DEFAULT_DEV_ORIGINS)
        for url in (self.frontend_url, self.production_url):
            url = url.strip().rstrip("/")
            if url and url not in origins:
                origins.append(url)
        return origins


settings = Settings()
