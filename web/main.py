"""FastAPI application for the RAWBOT serverless handlers"""

from __future__ import annotations

import os
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rawbot import __version__
from rawbot.config import RawbotConfig, load_config
from rawbot.services.prompt_relay import PromptRelay
from rawbot.stores.bot_store import BotStore
from rawbot.utils.logger import get_logger, setup_logging
from .gemini_routes import router as gemini_router
from .oauth_routes import router as oauth_router
from .webhook_routes import router as webhook_router

logger = get_logger(__name__)


def create_app(
    config: Optional[RawbotConfig] = None,
    store: Optional[BotStore] = None,
    prompt_relay: Optional[PromptRelay] = None,
) -> FastAPI:
    """Build the app around one config object; collaborators default from it."""
    cfg = config or load_config()
    setup_logging(cfg.log_level)

    app = FastAPI(
        title="RAWBOT API",
        description="Instagram linking, webhook and Gemini relay handlers",
        version=__version__,
    )

    cors_origins = [o.strip() for o in (os.getenv("CORS_ORIGINS") or "").split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or [cfg.base_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = cfg
    app.state.bot_store = store or BotStore(cfg.data_dir)
    app.state.prompt_relay = prompt_relay or PromptRelay.from_config(cfg)

    app.include_router(gemini_router)
    app.include_router(oauth_router)
    app.include_router(webhook_router)

    @app.get("/api/health")
    async def health() -> dict:
        return {"status": "ok"}

    logger.info(
        "RAWBOT app created",
        data_dir=str(cfg.data_dir),
        relay_enabled=bool(cfg.webhook_relay_url),
        graph_api_version=cfg.graph_api_version,
    )
    return app
