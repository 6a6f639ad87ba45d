"""
Bot document store.

Documents are kept in one JSON file (data/bots.json) keyed by bot id, the
same pattern the rest of the project uses for local persistence. Every
write replaces the file atomically, so a merge update touching several
fields is all-or-nothing.

subscribe() gives the real-time view the client needs: the callback gets
an immutable BotRecord snapshot right away and again after every write to
that bot, until the returned cancel handle is called.
"""

from __future__ import annotations

import json
import shutil
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from ..models.bot import BotRecord, PendingAction
from ..utils.exceptions import BotNotFoundError, StoreError
from ..utils.logger import get_logger

logger = get_logger(__name__)

BOTS_FILENAME = "bots.json"

Listener = Callable[[BotRecord], None]
CancelHandle = Callable[[], None]


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _atomic_write(path: Path, payload: Dict) -> None:
    """Atomically write JSON to the target path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w", dir=str(path.parent), delete=False, encoding="utf-8"
    ) as tf:
        json.dump(payload, tf, indent=2, ensure_ascii=False, default=str)
        temp_path = Path(tf.name)
    try:
        shutil.move(str(temp_path), str(path))
    except Exception:
        if temp_path.exists():
            temp_path.unlink()
        raise


class BotStore:
    """JSON-backed bot documents with merge updates and change listeners."""

    def __init__(self, data_dir: Path):
        self.path = Path(data_dir) / BOTS_FILENAME
        self._lock = threading.RLock()
        self._listeners: Dict[str, List[Listener]] = {}

    # ------------------------------------------------------------------
    # Raw document access
    # ------------------------------------------------------------------

    def _load_all(self) -> Dict[str, Dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            raise StoreError(f"Cannot read {self.path}: {e}") from e
        bots = raw.get("bots", {}) if isinstance(raw, dict) else None
        if not isinstance(bots, dict):
            raise StoreError(f"Cannot read {self.path}: expected an object with a \"bots\" mapping")
        return bots

    def _save_all(self, bots: Dict[str, Dict[str, Any]]) -> None:
        try:
            _atomic_write(self.path, {"bots": bots})
        except OSError as e:
            raise StoreError(f"Cannot write {self.path}: {e}") from e

    def _snapshot(self, document: Dict[str, Any]) -> BotRecord:
        try:
            return BotRecord.model_validate(document)
        except ValidationError as e:
            raise StoreError(f"Malformed bot document {document.get('id')}: {e}") from e

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def get(self, bot_id: str) -> BotRecord:
        with self._lock:
            document = self._load_all().get(bot_id)
        if document is None:
            raise BotNotFoundError(bot_id)
        return self._snapshot(document)

    def put(self, record: BotRecord) -> BotRecord:
        """Create or replace a whole document (provisioning and tests)."""
        with self._lock:
            bots = self._load_all()
            bots[record.id] = record.to_document()
            self._save_all(bots)
        self._notify(record.id, record)
        return record

    def update(self, bot_id: str, fields: Dict[str, Any]) -> BotRecord:
        """
        Merge camelCase fields into an existing document in one write.

        Keys not named in ``fields`` are left untouched.
        """
        return self._merge(bot_id, lambda current: fields)

    def _merge(self, bot_id: str, build: Callable[[BotRecord], Dict[str, Any]]) -> BotRecord:
        """Read, derive fields from the current snapshot, write; listeners run after the lock is released."""
        with self._lock:
            bots = self._load_all()
            if bot_id not in bots:
                raise BotNotFoundError(bot_id)
            fields = build(self._snapshot(bots[bot_id]))
            merged = {**bots[bot_id], **fields, "id": bot_id}
            snapshot = self._snapshot(merged)
            bots[bot_id] = merged
            self._save_all(bots)
        logger.debug("Bot document updated", bot_id=bot_id, fields=sorted(fields))
        self._notify(bot_id, snapshot)
        return snapshot

    def subscribe(self, bot_id: str, on_change: Listener) -> CancelHandle:
        with self._lock:
            self._listeners.setdefault(bot_id, []).append(on_change)

        def cancel() -> None:
            with self._lock:
                listeners = self._listeners.get(bot_id, [])
                if on_change in listeners:
                    listeners.remove(on_change)
                if not listeners:
                    self._listeners.pop(bot_id, None)

        try:
            current = self.get(bot_id)
        except BotNotFoundError:
            current = None
        if current is not None:
            on_change(current)
        return cancel

    def _notify(self, bot_id: str, snapshot: BotRecord) -> None:
        with self._lock:
            listeners = list(self._listeners.get(bot_id, []))
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as e:
                logger.exception("Bot listener failed", bot_id=bot_id, error=str(e))

    # ------------------------------------------------------------------
    # Owner-facing helpers
    # ------------------------------------------------------------------

    def activate_bot(self, bot_id: str) -> BotRecord:
        return self.update(bot_id, {"isActivated": True, "activationDate": _utc_now_iso()})

    def toggle_bot_status(self, bot_id: str) -> BotRecord:
        return self._merge(bot_id, lambda current: {"isActive": not current.is_active})

    def toggle_bot_listening(self, bot_id: str) -> BotRecord:
        return self._merge(bot_id, lambda current: {"isListening": not current.is_listening})

    def update_pending_action(self, bot_id: str, action: Optional[PendingAction]) -> BotRecord:
        value = action.model_dump(by_alias=True) if action else None
        return self.update(bot_id, {"pendingAction": value})

    def add_learned_observation(self, bot_id: str, observation: str) -> BotRecord:
        return self._merge(
            bot_id,
            lambda current: {"learnedObservations": [*current.learned_observations, observation]},
        )
