"""
Prompt relay route.

POST /api/gemini with {"prompt": "..."} returns Gemini's JSON as-is.
Upstream failures are masked behind a fixed message.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from rawbot.services.prompt_relay import PromptRelay
from rawbot.utils.logger import get_logger
from .deps import get_prompt_relay

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["gemini"])

RELAY_FAILED = {"error": "Failed to call Gemini API"}


@router.post("/gemini")
async def gemini(request: Request, relay: PromptRelay = Depends(get_prompt_relay)) -> JSONResponse:
    try:
        body = await request.json()
    except ValueError:
        body = None
    prompt = body.get("prompt") if isinstance(body, dict) else None
    if not isinstance(prompt, str):
        logger.warning("Gemini request without prompt")
        return JSONResponse(status_code=400, content={"error": "Missing prompt"})

    try:
        data = relay.generate(prompt)
    except Exception as e:
        logger.error("Gemini API Error", error=str(e), error_type=type(e).__name__)
        return JSONResponse(status_code=500, content=RELAY_FAILED)
    return JSONResponse(status_code=200, content=data)
