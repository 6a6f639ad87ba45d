"""
Owner client view state.

A bot is Locked until its license key is entered, then Unlocked. An
unlocked bot falls in one subscription band (Expired, Near-Expiry, Normal)
derived from subscriptionEndDate. While unlocked and not expired the
client listens to its bot document and raises a ring + notification for
every new HOT_LEAD pending action, keyed by the action id.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from . import messages
from .alerts import AlertSignal, NullAlertSignal
from .files import extract_text
from ..models.bot import BotRecord, PendingAction
from ..stores.bot_store import BotStore, CancelHandle
from ..utils.exceptions import RawbotError
from ..utils.logger import get_logger

logger = get_logger(__name__)

NEAR_EXPIRY_DAYS = 3
MIN_KEY_LENGTH = 5
SECONDS_PER_DAY = 86400

Clock = Callable[[], datetime]
FileExtractor = Callable[[str, bytes], str]


class SubscriptionBand(str, Enum):
    EXPIRED = "expired"
    NEAR_EXPIRY = "near_expiry"
    NORMAL = "normal"


def normalize_license_key(key: str) -> str:
    """Keep only ASCII letters and digits, upper-cased (RWB-1234-abcd -> RWB1234ABCD)."""
    return re.sub(r"[^a-zA-Z0-9]", "", key or "").upper()


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def days_remaining(subscription_end_date: Optional[str], now: datetime) -> Optional[int]:
    """Whole days left, rounded up; None when no end date is recorded."""
    if not subscription_end_date:
        return None
    try:
        end = parse_timestamp(subscription_end_date)
    except ValueError:
        logger.warning("Invalid subscriptionEndDate", value=subscription_end_date)
        return None
    return math.ceil((end - now).total_seconds() / SECONDS_PER_DAY)


def subscription_band(days: Optional[int]) -> SubscriptionBand:
    if days is None:
        return SubscriptionBand.NORMAL
    if days <= 0:
        return SubscriptionBand.EXPIRED
    if days <= NEAR_EXPIRY_DAYS:
        return SubscriptionBand.NEAR_EXPIRY
    return SubscriptionBand.NORMAL


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ClientViewState:
    """State behind the owner's lock screen and control panel for one bot."""

    TABS = ("control", "settings")

    def __init__(
        self,
        store: BotStore,
        bot: BotRecord,
        signal: Optional[AlertSignal] = None,
        clock: Clock = _utc_now,
        extractor: FileExtractor = extract_text,
    ):
        self.store = store
        self.bot = bot
        self.signal = signal or NullAlertSignal()
        self.clock = clock
        self.extractor = extractor

        self.active_tab = "control"
        self.active_alert: Optional[PendingAction] = None
        self.error = ""
        self.notice = ""
        self.upload_feedback = ""

        self._wants_listening = False
        self._cancel: Optional[CancelHandle] = None

    @classmethod
    def load(cls, store: BotStore, bot_id: str, **kwargs) -> "ClientViewState":
        return cls(store, store.get(bot_id), **kwargs)

    # ------------------------------------------------------------------
    # Derived view
    # ------------------------------------------------------------------

    @property
    def is_locked(self) -> bool:
        return not self.bot.is_activated

    @property
    def days_remaining(self) -> Optional[int]:
        return days_remaining(self.bot.subscription_end_date, self.clock())

    @property
    def band(self) -> SubscriptionBand:
        return subscription_band(self.days_remaining)

    @property
    def is_expired(self) -> bool:
        return self.band is SubscriptionBand.EXPIRED

    @property
    def controls_enabled(self) -> bool:
        return not self.is_locked and not self.is_expired

    @property
    def status_label(self) -> str:
        if self.is_expired:
            return messages.STATUS_STOPPED_SUBSCRIPTION
        return messages.STATUS_RUNNING if self.bot.is_active else messages.STATUS_STOPPED_MANUALLY

    @property
    def banner(self) -> Optional[str]:
        if self.band is SubscriptionBand.EXPIRED:
            return messages.EXPIRED_BANNER
        if self.band is SubscriptionBand.NEAR_EXPIRY:
            return messages.NEAR_EXPIRY_BANNER.format(days=self.days_remaining)
        return None

    @property
    def tone_label(self) -> str:
        tone = self.bot.tone_value
        if tone <= 25:
            return messages.TONE_FRIENDLY
        if tone >= 75:
            return messages.TONE_FORMAL
        return messages.TONE_SALES

    @property
    def is_listening(self) -> bool:
        return self._cancel is not None

    def select_tab(self, tab: str) -> None:
        if tab not in self.TABS:
            raise ValueError(f"Unknown tab: {tab}")
        self.active_tab = tab

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    @staticmethod
    def can_submit_key(input_key: str) -> bool:
        return len(input_key or "") >= MIN_KEY_LENGTH

    def activate(self, input_key: str) -> bool:
        self.error = ""
        expected = normalize_license_key(self.bot.license_key or "")
        if normalize_license_key(input_key) != expected:
            self.error = messages.ACTIVATION_FAILED
            logger.info("Activation rejected", bot_id=self.bot.id)
            return False

        self.bot = self.store.activate_bot(self.bot.id)
        logger.info("Bot activated", bot_id=self.bot.id)
        self._sync_subscription()
        return True

    # ------------------------------------------------------------------
    # Real-time alerts
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Listen for pending actions whenever the bot is unlocked and not expired."""
        self._wants_listening = True
        self._sync_subscription()

    def stop(self) -> None:
        self._wants_listening = False
        self._sync_subscription()
        self.signal.stop_ring()

    def _sync_subscription(self) -> None:
        should_listen = self._wants_listening and self.controls_enabled
        if should_listen and self._cancel is None:
            self._cancel = self.store.subscribe(self.bot.id, self.on_change)
        elif not should_listen and self._cancel is not None:
            self._cancel()
            self._cancel = None

    def on_change(self, snapshot: BotRecord) -> None:
        pending = snapshot.pending_action
        if pending is not None and pending.is_hot_lead:
            if self.active_alert is None or self.active_alert.id != pending.id:
                self.active_alert = pending
                self.signal.start_ring()
                self.signal.notify(messages.HOT_LEAD_NOTIFICATION_TITLE, pending.user_message)
                logger.info("Hot lead alert raised", bot_id=snapshot.id, action_id=pending.id)
        elif pending is None and self.active_alert is not None:
            self.active_alert = None
            self.signal.stop_ring()

        self.bot = snapshot

    def refresh(self) -> None:
        """Re-read the bot document; writes made by other processes arrive this way."""
        snapshot = self.store.get(self.bot.id)
        if self.is_listening:
            self.on_change(snapshot)
        else:
            self.bot = snapshot
        self._sync_subscription()

    def dismiss_alert(self) -> None:
        self.active_alert = None
        self.signal.stop_ring()
        self.bot = self.store.update_pending_action(self.bot.id, None)

    # ------------------------------------------------------------------
    # Owner controls
    # ------------------------------------------------------------------

    def toggle_status(self) -> bool:
        if self.is_expired:
            return False
        self.bot = self.store.toggle_bot_status(self.bot.id)
        return True

    def toggle_listening(self) -> bool:
        if self.is_expired:
            return False
        self.bot = self.store.toggle_bot_listening(self.bot.id)
        return True

    def set_tone(self, value: int) -> None:
        if not 0 <= value <= 100:
            raise ValueError("Tone must be between 0 and 100")
        self.bot = self.store.update(self.bot.id, {"toneValue": int(value)})

    def send_command(self, text: str) -> bool:
        text = (text or "").strip()
        if not text:
            return False
        self.bot = self.store.add_learned_observation(
            self.bot.id, f"{messages.COMMAND_PREFIX}{text}"
        )
        self.notice = messages.COMMAND_SENT
        return True

    def upload_knowledge(self, file_name: str, data: bytes) -> bool:
        self.upload_feedback = ""
        try:
            content = self.extractor(file_name, data)
            knowledge = (self.bot.knowledge_base or "") + messages.KNOWLEDGE_HEADER.format(
                file_name=file_name
            ) + content
            self.bot = self.store.update(self.bot.id, {"knowledgeBase": knowledge})
        except RawbotError as e:
            logger.warning("Knowledge upload failed", bot_id=self.bot.id, file_name=file_name, error=str(e))
            self.upload_feedback = messages.UPLOAD_FAILED
            return False
        self.upload_feedback = messages.UPLOAD_OK.format(file_name=file_name)
        return True
