"""Correspondent registry backed by a key-value store.

The registry owns the correspondent <-> thread bijection, profile snapshots,
verification state and the moderation flags. It is a narrow layer over the
store: store failures propagate and nothing is retried here.

Binding a thread is two independent writes (forward, then reverse). A crash
between them, or two first messages from the same correspondent handled
concurrently, can leave a stale reverse mapping or create a second thread.
The next relay reads the forward mapping only, so the correspondent keeps
a single effective thread; staff may see an orphaned topic.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from core import keys
from core.models import Correspondent, ProfileSnapshot, VerificationState
from core.ports import KeyValueStore

LOGGER = logging.getLogger(__name__)

TRUE = "true"


def parse_timestamp(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class CorrespondentRegistry:
    """Keyed state for every correspondent the bot has seen."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def get_or_create(self, correspondent_id: str) -> Correspondent:
        """Return the current projection; unknown ids look like a new correspondent."""

        profile = self.get_profile(correspondent_id)
        return Correspondent(
            id=correspondent_id,
            display_name=profile.name if profile else None,
            username=profile.username if profile else None,
            verification=self.get_verification(correspondent_id),
            blocked=self.is_blocked(correspondent_id),
            violation_count=self.get_violation_count(correspondent_id),
            first_contact=profile.first_contact if profile else None,
        )

    def get_thread_for(self, correspondent_id: str) -> Optional[str]:
        return self._store.get(keys.thread_key(correspondent_id))

    def get_correspondent_for(self, thread_id: str) -> Optional[str]:
        return self._store.get(keys.correspondent_key(thread_id))

    def bind_thread(self, correspondent_id: str, thread_id: str) -> None:
        self._store.put(keys.thread_key(correspondent_id), thread_id)
        self._store.put(keys.correspondent_key(thread_id), correspondent_id)
        LOGGER.info("Bound correspondent %s to thread %s", correspondent_id, thread_id)

    def get_profile(self, correspondent_id: str) -> Optional[ProfileSnapshot]:
        raw = self._store.get(keys.profile_key(correspondent_id))
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            LOGGER.warning("Discarding unreadable profile snapshot for %s", correspondent_id)
            return None
        if not isinstance(data, dict):
            LOGGER.warning("Discarding malformed profile snapshot for %s", correspondent_id)
            return None
        return ProfileSnapshot(
            name=data.get("name", ""),
            username=data.get("username", ""),
            first_contact=parse_timestamp(data.get("first_message_timestamp")),
        )

    def update_profile(
        self,
        correspondent_id: str,
        display_name: str,
        username: str,
        first_contact: Optional[int],
    ) -> None:
        payload = {
            "name": display_name,
            "username": username,
            "first_message_timestamp": first_contact,
        }
        self._store.put(keys.profile_key(correspondent_id), json.dumps(payload, ensure_ascii=False))

    def get_verification(self, correspondent_id: str) -> VerificationState:
        raw = self._store.get(keys.verification_key(correspondent_id))
        if not raw:
            return VerificationState.NEW
        try:
            return VerificationState(raw)
        except ValueError:
            LOGGER.warning("Unknown verification state %r for %s", raw, correspondent_id)
            return VerificationState.NEW

    def set_verification(self, correspondent_id: str, state: VerificationState) -> None:
        self._store.put(keys.verification_key(correspondent_id), state.value)

    def is_blocked(self, correspondent_id: str) -> bool:
        return self._store.get(keys.blocked_key(correspondent_id)) == TRUE

    def set_blocked(self, correspondent_id: str, blocked: bool) -> None:
        if blocked:
            self._store.put(keys.blocked_key(correspondent_id), TRUE)
            return
        self._store.delete(keys.blocked_key(correspondent_id))
        self._store.delete(keys.violations_key(correspondent_id))

    def get_violation_count(self, correspondent_id: str) -> int:
        raw = self._store.get(keys.violations_key(correspondent_id))
        try:
            return max(int(raw), 0) if raw else 0
        except ValueError:
            return 0

    def increment_violation(self, correspondent_id: str) -> int:
        # Plain read-modify-write: concurrent violations may under-count.
        count = self.get_violation_count(correspondent_id) + 1
        self._store.put(keys.violations_key(correspondent_id), str(count))
        return count
