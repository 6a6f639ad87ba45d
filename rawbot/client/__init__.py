"""Owner-facing client state (lock screen, subscription banner, hot-lead alerts)."""

from .alerts import AlertSignal, NullAlertSignal
from .view_state import (
    ClientViewState,
    SubscriptionBand,
    days_remaining,
    normalize_license_key,
    subscription_band,
)

__all__ = [
    "AlertSignal",
    "NullAlertSignal",
    "ClientViewState",
    "SubscriptionBand",
    "days_remaining",
    "normalize_license_key",
    "subscription_band",
]
