"""
Instagram OAuth callback.

GET /api/instagram/oauth/callback?code=...&state=<bot id>

Runs the Meta token exchange, stores the result on the bot document and
redirects the browser to <APP_BASE_URL>/?success=true.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse, RedirectResponse

from rawbot.config import RawbotConfig
from rawbot.meta.service import run_token_exchange
from rawbot.services.bot_updater import link_instagram_account
from rawbot.stores.bot_store import BotStore
from rawbot.utils.exceptions import GraphAPIError, LinkableAccountNotFoundError
from rawbot.utils.logger import get_logger
from .deps import get_config, get_store

logger = get_logger(__name__)

router = APIRouter(prefix="/api/instagram/oauth", tags=["instagram-oauth"])


def _link(cfg: RawbotConfig, store: BotStore, code: str, bot_id: str) -> None:
    result = run_token_exchange(cfg, code)
    link_instagram_account(store, bot_id, result)


@router.get("/callback", name="instagram_oauth_callback")
async def callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    cfg: RawbotConfig = Depends(get_config),
    store: BotStore = Depends(get_store),
):
    if not code or not state:
        logger.warning("OAuth callback missing params", has_code=bool(code), has_state=bool(state))
        return PlainTextResponse("Missing code or state", status_code=400)

    bot_id = state
    logger.info("OAuth callback start", bot_id=bot_id)
    try:
        await run_in_threadpool(_link, cfg, store, code, bot_id)
    except LinkableAccountNotFoundError as e:
        logger.warning("OAuth callback found no linkable account", bot_id=bot_id, error=str(e))
        return PlainTextResponse(str(e), status_code=404)
    except GraphAPIError as e:
        logger.error("OAuth callback Graph API error", bot_id=bot_id, error=str(e))
        return PlainTextResponse(f"Error exchanging token: {e}", status_code=500)
    except Exception as e:
        logger.exception("OAuth Callback Error", bot_id=bot_id, error=str(e))
        return PlainTextResponse(f"Internal Error: {e}", status_code=500)

    logger.info("OAuth callback complete", bot_id=bot_id)
    return RedirectResponse(url=f"{cfg.base_url}/?success=true", status_code=302)
