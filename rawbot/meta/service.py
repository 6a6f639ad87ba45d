"""
Meta OAuth token exchange.

Turns the one-time ?code from the Instagram connect redirect into a
credential bundle for the first Facebook Page that has an Instagram
Business account linked:

1. code -> short-lived user token
2. user token -> Pages (with instagram_business_account)
3. first Page with a linked account -> page token + IG business id
4. IG business id -> username
5. page token -> long-lived token (best-effort; falls back to page token)

Calls run strictly in order. An error object in any Graph response stops
the chain; nothing is retried.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from ..config import RawbotConfig
from ..utils.exceptions import GraphAPIError, NoLinkedAccountError, NoPagesFoundError
from ..utils.logger import get_logger

logger = get_logger(__name__)

PAGE_FIELDS = "id,name,access_token,instagram_business_account"


@dataclass(frozen=True)
class TokenExchangeResult:
    page_id: str
    page_access_token: str
    instagram_business_id: str
    instagram_username: Optional[str]
    access_token: str
    token_is_long_lived: bool


def format_graph_error(err: Any) -> str:
    """
    Convert Graph API error objects into human-readable messages and include hints
    for common failure modes (expired code, missing permissions, dev mode).
    """
    if not isinstance(err, dict):
        return str(err)
    message = err.get("message") or "Meta Graph API error"
    code = err.get("code")
    subcode = err.get("error_subcode")

    hint = ""
    msg_lower = str(message).lower()
    if "permission" in msg_lower:
        hint = "Ensure all requested permissions are granted and approved for your app."
    if "redirect_uri" in msg_lower:
        hint = "The redirect URI must match the one registered in the Meta app exactly."
    if code == 190:
        hint = "Token expired or invalid. Reconnect to refresh tokens."

    parts = [message]
    meta_bits = []
    if code is not None:
        meta_bits.append(f"code={code}")
    if subcode is not None:
        meta_bits.append(f"subcode={subcode}")
    if meta_bits:
        parts.append(f"({', '.join(meta_bits)})")
    if hint:
        parts.append(f"Hint: {hint}")
    return " ".join(parts)


def _graph_error(err: Any) -> GraphAPIError:
    code = err.get("code") if isinstance(err, dict) else None
    subcode = err.get("error_subcode") if isinstance(err, dict) else None
    return GraphAPIError(format_graph_error(err), error_code=code, error_subcode=subcode)


def _get_json(cfg: RawbotConfig, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
    r = requests.get(f"{cfg.graph_base}/{path}", params=params, timeout=cfg.http_timeout)
    return r.json()


def exchange_code_for_token(cfg: RawbotConfig, code: str) -> str:
    data = _get_json(
        cfg,
        "oauth/access_token",
        {
            "client_id": cfg.app_id,
            "redirect_uri": cfg.oauth_redirect_uri,
            "client_secret": cfg.app_secret,
            "code": code,
        },
    )
    if "error" in data:
        raise _graph_error(data["error"])
    token = data.get("access_token")
    if not token:
        raise GraphAPIError("Meta did not return an access_token.")
    return token


def get_pages(cfg: RawbotConfig, user_token: str) -> List[Dict[str, Any]]:
    data = _get_json(
        cfg,
        "me/accounts",
        {"access_token": user_token, "fields": PAGE_FIELDS},
    )
    if "error" in data:
        raise _graph_error(data["error"])
    return data.get("data", []) or []


def select_linked_page(pages: List[Dict[str, Any]]) -> Dict[str, Any]:
    """First Page carrying instagram_business_account; no other tie-break."""
    if not pages:
        raise NoPagesFoundError("No pages found for this user.")
    for page in pages:
        ig = page.get("instagram_business_account")
        if isinstance(ig, dict) and ig.get("id"):
            return page
    raise NoLinkedAccountError(
        "No Instagram Business Account connected to your Facebook Pages."
    )


def get_instagram_username(cfg: RawbotConfig, instagram_business_id: str, page_token: str) -> Optional[str]:
    data = _get_json(
        cfg,
        instagram_business_id,
        {"fields": "username", "access_token": page_token},
    )
    if "error" in data:
        raise _graph_error(data["error"])
    return data.get("username")


def exchange_for_long_lived_token(cfg: RawbotConfig, token: str) -> Optional[str]:
    """Return a long-lived token, or None when Meta does not hand one out."""
    try:
        data = _get_json(
            cfg,
            "oauth/access_token",
            {
                "grant_type": "fb_exchange_token",
                "client_id": cfg.app_id,
                "client_secret": cfg.app_secret,
                "fb_exchange_token": token,
            },
        )
    except (requests.RequestException, ValueError) as e:
        logger.warning("Long-lived token exchange failed", error=str(e))
        return None
    if "error" in data:
        logger.warning(
            "Long-lived token exchange rejected",
            error=format_graph_error(data["error"]),
        )
        return None
    return data.get("access_token") or None


def run_token_exchange(cfg: RawbotConfig, code: str) -> TokenExchangeResult:
    short_token = exchange_code_for_token(cfg, code)

    page = select_linked_page(get_pages(cfg, short_token))
    page_id = page.get("id")
    page_token = page.get("access_token")
    if not page_token:
        raise GraphAPIError("Meta did not return a Page access token. Check permissions.")
    instagram_business_id = page["instagram_business_account"]["id"]

    username = get_instagram_username(cfg, instagram_business_id, page_token)

    long_lived = exchange_for_long_lived_token(cfg, page_token)
    if long_lived is None:
        logger.warning(
            "Using page token without long-lived exchange",
            page_id=page_id,
            instagram_business_id=instagram_business_id,
        )

    return TokenExchangeResult(
        page_id=str(page_id),
        page_access_token=page_token,
        instagram_business_id=str(instagram_business_id),
        instagram_username=username,
        access_token=long_lived or page_token,
        token_is_long_lived=long_lived is not None,
    )
