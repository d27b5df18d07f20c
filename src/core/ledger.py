"""Edit ledger and edit notifications.

Only pure-text relays are recorded. Each observed edit overwrites the stored
text while keeping the original send time, so the next edit is reported
against the version right before it.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from core import keys
from core.formatting import build_edit_notice
from core.models import EditedPrivateMessage, ForwardedMessageRecord
from core.ports import KeyValueStore, MessagingClient
from core.registry import CorrespondentRegistry, parse_timestamp

LOGGER = logging.getLogger(__name__)


class EditLedger:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def record(self, correspondent_id: str, message_id: int, text: str, sent_at: Optional[int]) -> None:
        payload = {"text": text, "date": sent_at}
        self._store.put(keys.message_key(correspondent_id, message_id), json.dumps(payload, ensure_ascii=False))

    def get(self, correspondent_id: str, message_id: int) -> Optional[ForwardedMessageRecord]:
        raw = self._store.get(keys.message_key(correspondent_id, message_id))
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            LOGGER.warning("Unreadable ledger entry %s:%s", correspondent_id, message_id)
            return None
        if not isinstance(data, dict):
            LOGGER.warning("Malformed ledger entry %s:%s", correspondent_id, message_id)
            return None
        return ForwardedMessageRecord(
            text=str(data.get("text") or ""),
            sent_at=parse_timestamp(data.get("date")),
        )

    def update_text(self, correspondent_id: str, message_id: int, new_text: str) -> None:
        """Replace the stored text, keeping the original send time."""

        existing = self.get(correspondent_id, message_id)
        if existing is None:
            return
        self.record(correspondent_id, message_id, new_text, existing.sent_at)


class EditNotifier:
    """Posts a before/after notice into the thread when a correspondent edits."""

    def __init__(
        self,
        registry: CorrespondentRegistry,
        ledger: EditLedger,
        messenger: MessagingClient,
        admin_group_id: str,
    ) -> None:
        self._registry = registry
        self._ledger = ledger
        self._messenger = messenger
        self._admin_group_id = admin_group_id

    async def handle(self, event: EditedPrivateMessage) -> None:
        try:
            await self._notify(event)
        except Exception:
            LOGGER.exception("Failed to relay edit of message %s from %s", event.message_id, event.sender_id)

    async def _notify(self, event: EditedPrivateMessage) -> None:
        thread_id = self._registry.get_thread_for(event.sender_id)
        if not thread_id:
            return

        previous_text: Optional[str] = None
        sent_at: Optional[int] = None
        record = self._ledger.get(event.sender_id, event.message_id)
        if record is not None:
            previous_text = record.text
            sent_at = record.sent_at
            self._ledger.update_text(event.sender_id, event.message_id, event.text or event.caption or "")

        notice = build_edit_notice(previous_text, sent_at, event.text, event.caption)
        await self._messenger.send_text(
            self._admin_group_id,
            notice,
            thread_id=thread_id,
            parse_mode="html",
        )
