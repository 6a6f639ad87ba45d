"""Persist a completed Instagram link onto its bot document."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from ..meta.service import TokenExchangeResult
from ..models.bot import BotRecord
from ..stores.bot_store import BotStore
from ..utils.logger import get_logger

logger = get_logger(__name__)


def instagram_link_fields(result: TokenExchangeResult, now: Optional[datetime] = None) -> dict:
    connected_at = (now or datetime.now(timezone.utc)).isoformat()
    return {
        "instagramConnected": True,
        "instagramAccessToken": result.access_token,
        "instagramBusinessId": result.instagram_business_id,
        "instagramPageId": result.page_id,
        "instagramUsername": result.instagram_username,
        "longLivedToken": result.access_token,
        "instagramTokenLongLived": result.token_is_long_lived,
        "connectedAt": connected_at,
    }


def link_instagram_account(
    store: BotStore,
    bot_id: str,
    result: TokenExchangeResult,
    now: Optional[datetime] = None,
) -> BotRecord:
    """Single merge write of every Instagram field; other fields stay as they are."""
    record = store.update(bot_id, instagram_link_fields(result, now))
    logger.info(
        "Instagram account linked",
        bot_id=bot_id,
        instagram_business_id=result.instagram_business_id,
        instagram_username=result.instagram_username,
        long_lived=result.token_is_long_lived,
    )
    return record
