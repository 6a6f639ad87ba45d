"""
Messaging-platform webhook.

GET  /api/webhook  hub.mode / hub.verify_token / hub.challenge handshake.
POST /api/webhook  always acknowledged with EVENT_RECEIVED; the raw body is
                   relayed to WEBHOOK_RELAY_URL after the response is sent.
"""

from __future__ import annotations

import json

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import PlainTextResponse

from rawbot.config import RawbotConfig
from rawbot.services.webhook_service import EVENT_RECEIVED, relay_payload, verify_subscription
from rawbot.utils.exceptions import WebhookVerificationError
from rawbot.utils.logger import get_logger
from .deps import get_config

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["webhook"])


@router.get("/webhook", response_class=PlainTextResponse)
async def webhook_verify(request: Request, cfg: RawbotConfig = Depends(get_config)) -> PlainTextResponse:
    params = request.query_params
    try:
        challenge = verify_subscription(
            cfg,
            mode=params.get("hub.mode"),
            token=params.get("hub.verify_token"),
            challenge=params.get("hub.challenge"),
        )
    except WebhookVerificationError as e:
        return PlainTextResponse(str(e), status_code=403)
    return PlainTextResponse(challenge, status_code=200)


@router.post("/webhook", response_class=PlainTextResponse)
async def webhook_events(
    request: Request,
    background_tasks: BackgroundTasks,
    cfg: RawbotConfig = Depends(get_config),
) -> PlainTextResponse:
    body = await request.body()
    try:
        payload = json.loads(body) if body else None
    except ValueError:
        payload = None
    logger.info(
        "Webhook Received",
        body_size=len(body),
        object_type=payload.get("object") if isinstance(payload, dict) else None,
        entries=len(payload.get("entry") or []) if isinstance(payload, dict) else 0,
    )

    if cfg.webhook_relay_url:
        background_tasks.add_task(
            relay_payload,
            cfg.webhook_relay_url,
            body,
            request.headers.get("content-type") or "application/json",
            cfg.http_timeout,
        )
    return PlainTextResponse(EVENT_RECEIVED, status_code=200)


@router.api_route("/webhook", methods=["PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"], include_in_schema=False)
async def webhook_method_not_allowed() -> PlainTextResponse:
    return PlainTextResponse("Method Not Allowed", status_code=405)
