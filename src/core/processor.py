"""Core event processor.

This module is integration-agnostic. It receives already-classified inbound
events, routes each one to exactly one handler, and is the boundary where
unexpected exceptions stop: they are logged and the transport keeps running.
"""

from __future__ import annotations

import logging

from core.admin_reply import AdminReplyDispatcher
from core.config import RelayConfig
from core.ledger import EditLedger, EditNotifier
from core.models import (
    EditedPrivateMessage,
    GroupMessage,
    InboundEvent,
    ModerationCallback,
    PrivateMessage,
)
from core.moderation import ModerationController
from core.ports import KeyValueStore, MessagingClient
from core.registry import CorrespondentRegistry
from core.relay import RelayPipeline

LOGGER = logging.getLogger(__name__)


class EventProcessor:
    """Wires the core components together over one store and one messenger."""

    def __init__(self, store: KeyValueStore, messenger: MessagingClient, config: RelayConfig) -> None:
        self._config = config
        registry = CorrespondentRegistry(store)
        ledger = EditLedger(store)
        self.moderation = ModerationController(registry, messenger, config)
        self.relay = RelayPipeline(registry, ledger, self.moderation, messenger, config)
        self.edits = EditNotifier(registry, ledger, messenger, config.admin_group_id)
        self.admin_replies = AdminReplyDispatcher(registry, messenger)

    async def handle(self, event: InboundEvent) -> None:
        """Process one inbound event; never raises."""

        try:
            await self._dispatch(event)
        except Exception:
            LOGGER.exception("Error while processing %s", type(event).__name__)

    async def _dispatch(self, event: InboundEvent) -> None:
        if isinstance(event, PrivateMessage):
            await self.relay.handle_private(event)
        elif isinstance(event, GroupMessage):
            # Only the configured staffed group may talk back to correspondents.
            if event.chat_id == self._config.admin_group_id:
                await self.admin_replies.handle(event)
        elif isinstance(event, EditedPrivateMessage):
            await self.edits.handle(event)
        elif isinstance(event, ModerationCallback):
            await self.moderation.handle_callback(event)
        else:
            LOGGER.debug("Ignoring unsupported event %r", event)
