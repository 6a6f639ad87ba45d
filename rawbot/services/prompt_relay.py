"""Forward free-text prompts to the Gemini generateContent endpoint."""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from ..config import RawbotConfig
from ..utils.exceptions import PromptRelayError
from ..utils.logger import get_logger

logger = get_logger(__name__)

GEMINI_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


class PromptRelay:
    """Thin pass-through to the generative-language API."""

    def __init__(self, api_key: str, model: str = "gemini-1.5-flash", timeout: Optional[float] = None):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    @classmethod
    def from_config(cls, cfg: RawbotConfig) -> "PromptRelay":
        return cls(cfg.generative_api_key, model=cfg.gemini_model, timeout=cfg.http_timeout)

    @property
    def endpoint(self) -> str:
        return f"{GEMINI_BASE}/{self.model}:generateContent"

    @staticmethod
    def build_envelope(prompt: str) -> Dict[str, Any]:
        return {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

    def generate(self, prompt: str) -> Dict[str, Any]:
        """
        Return the upstream JSON unmodified.

        Raises PromptRelayError on transport failure, a non-JSON body, or an
        error object from the API.
        """
        try:
            r = requests.post(
                self.endpoint,
                params={"key": self.api_key},
                json=self.build_envelope(prompt),
                timeout=self.timeout,
            )
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            raise PromptRelayError(f"Gemini request failed: {e}") from e

        if isinstance(data, dict) and "error" in data:
            err = data["error"]
            message = err.get("message") if isinstance(err, dict) else str(err)
            raise PromptRelayError(f"Gemini API error: {message}")
        return data
