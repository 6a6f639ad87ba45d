"""Data models for RAWBOT."""

from .bot import HOT_LEAD, BotRecord, PendingAction

__all__ = ["HOT_LEAD", "BotRecord", "PendingAction"]
