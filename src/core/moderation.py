"""Blocking, violation counting and the inline moderation controls.

Per correspondent the state is ``clear`` -> ``flagged(count)`` -> ``blocked``.
Keyword violations walk it forward; only an explicit unblock from the staffed
group walks it back, and unblocking always resets the count.
"""

from __future__ import annotations

import logging

from core.config import RelayConfig
from core.formatting import (
    build_block_notice,
    build_moderation_confirmation,
    build_moderation_control,
    build_violation_notice,
)
from core.models import ModerationCallback
from core.ports import MessagingClient
from core.registry import CorrespondentRegistry

LOGGER = logging.getLogger(__name__)

BLOCK = "block"
UNBLOCK = "unblock"

ACK_LABELS = {BLOCK: "Blocking...", UNBLOCK: "Unblocking..."}


class ModerationController:
    def __init__(
        self,
        registry: CorrespondentRegistry,
        messenger: MessagingClient,
        config: RelayConfig,
    ) -> None:
        self._registry = registry
        self._messenger = messenger
        self._config = config

    async def register_violation(self, correspondent_id: str) -> None:
        """Count a keyword violation and block once the threshold is reached.

        The offending message is never relayed; the caller stops after this.
        """

        if self._registry.is_blocked(correspondent_id):
            return

        threshold = self._config.block_threshold
        count = self._registry.increment_violation(correspondent_id)
        notice = build_violation_notice(count, threshold)

        if count >= threshold:
            self._registry.set_blocked(correspondent_id, True)
            LOGGER.info("Auto-blocked %s after %s violations", correspondent_id, count)
            await self._messenger.send_text(correspondent_id, notice)
            await self._messenger.send_text(correspondent_id, build_block_notice())
            return

        LOGGER.info("Violation %s/%s for %s", count, threshold, correspondent_id)
        await self._messenger.send_text(correspondent_id, notice)

    async def handle_callback(self, event: ModerationCallback) -> None:
        """Apply a block/unblock button press from the staffed group."""

        if event.chat_id != self._config.admin_group_id:
            return

        action, _, correspondent_id = event.data.partition(":")
        await self._messenger.acknowledge_callback(event.callback_id, ACK_LABELS.get(action, "Unknown action"))

        if action not in {BLOCK, UNBLOCK} or not correspondent_id:
            LOGGER.warning("Ignoring unknown moderation payload %r", event.data)
            return

        try:
            await self._apply(action == BLOCK, correspondent_id, event)
        except Exception:
            LOGGER.exception("Failed to %s %s", action, correspondent_id)

    async def _apply(self, blocked: bool, correspondent_id: str, event: ModerationCallback) -> None:
        self._registry.set_blocked(correspondent_id, blocked)
        LOGGER.info("%s %s from staffed group", "Blocked" if blocked else "Unblocked", correspondent_id)

        profile = self._registry.get_profile(correspondent_id)
        display_name = profile.name if profile and profile.name else f"User {correspondent_id}"

        await self._messenger.edit_control(
            event.chat_id,
            event.message_id,
            build_moderation_control(correspondent_id, blocked),
        )
        await self._messenger.send_text(
            event.chat_id,
            build_moderation_confirmation(display_name, blocked),
            thread_id=event.thread_id,
            parse_mode="html",
        )
