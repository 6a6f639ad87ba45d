"""
RAWBOT runtime configuration.

All values are loaded from environment variables (typically via .env) once
at process start and passed into handlers explicitly:

- FACEBOOK_APP_ID        (required)
- FACEBOOK_APP_SECRET    (required)
- META_VERIFY_TOKEN      (required; webhook handshake secret)
- GEMINI_API_KEY         (required)
- APP_BASE_URL           (required; scheme + host the OAuth redirect is registered under)
- WEBHOOK_RELAY_URL      (optional; internal endpoint that receives raw webhook payloads)
- RAWBOT_DATA_DIR        (optional; bot document store directory, default "data")
- LOG_LEVEL, GRAPH_API_VERSION, GEMINI_MODEL, HTTP_TIMEOUT (optional)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .utils.exceptions import ConfigError


OAUTH_CALLBACK_PATH = "/api/instagram/oauth/callback"

REQUIRED_ENV = {
    "app_id": "FACEBOOK_APP_ID",
    "app_secret": "FACEBOOK_APP_SECRET",
    "verify_token": "META_VERIFY_TOKEN",
    "generative_api_key": "GEMINI_API_KEY",
    "redirect_base_url": "APP_BASE_URL",
}


@dataclass(frozen=True)
class RawbotConfig:
    app_id: str
    app_secret: str
    verify_token: str
    generative_api_key: str
    redirect_base_url: str
    webhook_relay_url: Optional[str] = None
    data_dir: Path = Path("data")
    log_level: str = "INFO"
    graph_api_version: str = "v21.0"
    gemini_model: str = "gemini-1.5-flash"
    http_timeout: Optional[float] = None

    @property
    def base_url(self) -> str:
        return self.redirect_base_url.rstrip("/")

    @property
    def oauth_redirect_uri(self) -> str:
        """Redirect URI sent to Meta; must match the registered one exactly."""
        return f"{self.base_url}{OAUTH_CALLBACK_PATH}"

    @property
    def graph_base(self) -> str:
        return f"https://graph.facebook.com/{self.graph_api_version}"


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"HTTP_TIMEOUT must be a number of seconds, got {raw!r}")
    return value if value > 0 else None


def load_config(environ: Optional[Mapping[str, str]] = None) -> RawbotConfig:
    env = os.environ if environ is None else environ

    values = {field: (env.get(var) or "").strip() for field, var in REQUIRED_ENV.items()}
    missing = [REQUIRED_ENV[field] for field, value in values.items() if not value]
    if missing:
        raise ConfigError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    return RawbotConfig(
        **values,
        webhook_relay_url=(env.get("WEBHOOK_RELAY_URL") or "").strip() or None,
        data_dir=Path(env.get("RAWBOT_DATA_DIR") or "data"),
        log_level=(env.get("LOG_LEVEL") or "INFO").strip().upper(),
        graph_api_version=(env.get("GRAPH_API_VERSION") or "v21.0").strip(),
        gemini_model=(env.get("GEMINI_MODEL") or "gemini-1.5-flash").strip(),
        http_timeout=_parse_timeout(env.get("HTTP_TIMEOUT")),
    )
