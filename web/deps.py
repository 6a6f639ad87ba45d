"""FastAPI dependencies resolving per-process collaborators from app.state."""

from __future__ import annotations

from fastapi import Request

from rawbot.config import RawbotConfig
from rawbot.services.prompt_relay import PromptRelay
from rawbot.stores.bot_store import BotStore


def get_config(request: Request) -> RawbotConfig:
    return request.app.state.config


def get_store(request: Request) -> BotStore:
    return request.app.state.bot_store


def get_prompt_relay(request: Request) -> PromptRelay:
    return request.app.state.prompt_relay
