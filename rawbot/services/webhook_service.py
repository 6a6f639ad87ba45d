"""
Messaging-platform webhook handling.

verify_subscription() answers Meta's hub.* handshake. relay_payload()
forwards a delivered event, byte for byte, to an internal endpoint: at most
once, no delivery guarantee, and it never raises.
"""

from __future__ import annotations

from typing import Optional

import requests

from ..config import RawbotConfig
from ..utils.exceptions import WebhookVerificationError
from ..utils.logger import get_logger

logger = get_logger(__name__)

EVENT_RECEIVED = "EVENT_RECEIVED"


def verify_subscription(
    cfg: RawbotConfig,
    mode: Optional[str],
    token: Optional[str],
    challenge: Optional[str],
) -> str:
    """Return the challenge to echo, or raise WebhookVerificationError."""
    token_matches = token == cfg.verify_token
    if mode == "subscribe" and token_matches:
        logger.info("Webhook verification successful")
        return challenge or ""
    logger.warning(
        "Webhook verification failed",
        mode=mode,
        has_token=bool(token),
        token_matches=token_matches,
    )
    raise WebhookVerificationError("Verification failed")


def relay_payload(url: str, body: bytes, content_type: str = "application/json", timeout: Optional[float] = None) -> None:
    try:
        r = requests.post(url, data=body, headers={"Content-Type": content_type}, timeout=timeout)
        logger.info("Webhook payload relayed", url=url, status_code=r.status_code)
    except Exception as e:
        logger.warning("Webhook relay failed", url=url, error=str(e))
