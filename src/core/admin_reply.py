"""Relays staff replies from a thread back to its correspondent."""

from __future__ import annotations

import logging

from core.models import GroupMessage
from core.ports import MessagingClient
from core.registry import CorrespondentRegistry

LOGGER = logging.getLogger(__name__)


class AdminReplyDispatcher:
    def __init__(self, registry: CorrespondentRegistry, messenger: MessagingClient) -> None:
        self._registry = registry
        self._messenger = messenger

    async def handle(self, event: GroupMessage) -> None:
        # Bot senders include ourselves; relaying them would echo cards and notices.
        if event.from_bot:
            return
        if not (event.is_topic_message and event.thread_id and event.text):
            return

        correspondent_id = self._registry.get_correspondent_for(event.thread_id)
        if not correspondent_id:
            return

        await self._messenger.send_text(correspondent_id, event.text)
        LOGGER.info("Relayed staff reply from thread %s to %s", event.thread_id, correspondent_id)
