"""Attention signals raised by the owner client when a hot lead arrives."""

from __future__ import annotations

from typing import Protocol


class AlertSignal(Protocol):
    def start_ring(self) -> None: ...

    def stop_ring(self) -> None: ...

    def notify(self, title: str, body: str) -> None: ...


class NullAlertSignal:
    """Signal sink for headless use."""

    def start_ring(self) -> None:
        pass

    def stop_ring(self) -> None:
        pass

    def notify(self, title: str, body: str) -> None:
        pass
