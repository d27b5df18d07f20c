"""Relay pipeline for private messages.

The pipeline enforces a strict order:
1) Drop everything from blocked correspondents, silently
2) /start and /help (re)start verification
3) Verification gate (pending -> check answer, new -> prompt for /start)
4) Block-keyword check (violations never reach the staffed group)
5) Content-category filters
6) Keyword auto-replies
7) Relay into the correspondent's thread, provisioning it on first contact

Each step short-circuits. Outbound calls are fire-and-forget: a failed call
never rolls back state that was already written.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.config import RelayConfig
from core.formatting import (
    AUTO_REPLY_PREFIX,
    build_filter_notice,
    build_identity_card,
    build_moderation_control,
    build_profile_update_notice,
    build_thread_title,
)
from core.ledger import EditLedger
from core.models import MessageContent, PrivateMessage, VerificationState
from core.moderation import ModerationController
from core.ports import MessagingClient
from core.registry import CorrespondentRegistry
from core.rules_engine import (
    compile_block_rules,
    compile_response_rules,
    first_block_match,
    first_response_match,
)

LOGGER = logging.getLogger(__name__)

START_COMMANDS = {"/start", "/help"}

VERIFIED_MESSAGE = "✅ Verification passed! You can send messages now."
VERIFICATION_FAILED_MESSAGE = "❌ Verification failed!\nCheck the bot description for the answer and try again."
START_PROMPT = "Please send /start to begin."
PROVISIONING_FAILED_MESSAGE = "Sorry, something went wrong while connecting you. Please try again later."

REASON_CHANNEL = "channel forward"
REASON_IMAGE = "image/photo"
REASON_LINK = "content with links"
REASON_TEXT = "plain text"


def filter_reason(content: MessageContent, config: RelayConfig) -> Optional[str]:
    """Return why a message may not be forwarded, or None when it may."""

    filters = config.filters
    reason = ""

    if content.from_channel:
        if not filters.channel:
            reason = REASON_CHANNEL
    elif content.has_photo:
        if not filters.image:
            reason = REASON_IMAGE

    if content.has_links and not filters.link:
        reason = f"{reason} (with links)" if reason else REASON_LINK

    if not reason and content.is_pure_text and not filters.text:
        reason = REASON_TEXT

    return reason or None


class RelayPipeline:
    """Decision pipeline for every private message."""

    def __init__(
        self,
        registry: CorrespondentRegistry,
        ledger: EditLedger,
        moderation: ModerationController,
        messenger: MessagingClient,
        config: RelayConfig,
    ) -> None:
        self._registry = registry
        self._ledger = ledger
        self._moderation = moderation
        self._messenger = messenger
        self._config = config

    async def handle_private(self, event: PrivateMessage) -> None:
        """Run one private message through the full pipeline."""

        chat_id = event.chat_id
        text = event.content.text or ""

        correspondent = self._registry.get_or_create(chat_id)
        if correspondent.blocked:
            return

        if text in START_COMMANDS:
            await self._start_verification(chat_id)
            return

        state = correspondent.verification
        if state is VerificationState.PENDING:
            await self._check_answer(chat_id, text)
            return
        if state is not VerificationState.VERIFIED:
            await self._messenger.send_text(chat_id, START_PROMPT)
            return

        if text and first_block_match(text, compile_block_rules(self._config.block_keywords)):
            await self._moderation.register_violation(chat_id)
            return

        reason = filter_reason(event.content, self._config)
        if reason:
            LOGGER.info("Filtered message %s from %s (%s)", event.message_id, chat_id, reason)
            await self._messenger.send_text(chat_id, build_filter_notice(reason))
            return

        if text:
            rule = first_response_match(text, compile_response_rules(self._config.auto_replies))
            if rule is not None:
                await self._messenger.send_text(chat_id, AUTO_REPLY_PREFIX + rule.response)
                return

        await self.relay(event)

    async def _start_verification(self, chat_id: str) -> None:
        await self._messenger.send_text(chat_id, self._config.welcome_message)
        await self._messenger.send_text(chat_id, self._config.verification_question)
        self._registry.set_verification(chat_id, VerificationState.PENDING)

    async def _check_answer(self, chat_id: str, answer: str) -> None:
        if answer == self._config.verification_answer:
            await self._messenger.send_text(chat_id, VERIFIED_MESSAGE)
            self._registry.set_verification(chat_id, VerificationState.VERIFIED)
            LOGGER.info("Correspondent %s verified", chat_id)
            return
        await self._messenger.send_text(chat_id, VERIFICATION_FAILED_MESSAGE)

    async def relay(self, event: PrivateMessage) -> None:
        """Copy the message into the correspondent's thread."""

        sender = event.sender
        group = self._config.admin_group_id
        thread_id = self._registry.get_thread_for(sender.id)

        if not thread_id:
            thread_id = await self._provision_thread(event)
            if not thread_id:
                await self._messenger.send_text(sender.id, PROVISIONING_FAILED_MESSAGE)
                return
        else:
            await self._refresh_profile(event, thread_id)

        await self._messenger.copy_message(group, event.chat_id, event.message_id, thread_id)

        if event.content.text:
            self._ledger.record(sender.id, event.message_id, event.content.text, event.date)

    async def _provision_thread(self, event: PrivateMessage) -> Optional[str]:
        sender = event.sender
        group = self._config.admin_group_id
        title = build_thread_title(sender.display_name, sender.id)

        thread_id = await self._messenger.create_thread(group, title)
        if not thread_id:
            LOGGER.error("Could not create a thread for %s", sender.id)
            return None

        self._registry.bind_thread(sender.id, thread_id)
        self._registry.update_profile(sender.id, sender.display_name, sender.username, event.date)

        card = build_identity_card(sender.id, sender.display_name, sender.username, event.date)
        await self._messenger.send_text(
            group,
            card,
            thread_id=thread_id,
            control=build_moderation_control(sender.id, self._registry.is_blocked(sender.id)),
            parse_mode="html",
        )
        return thread_id

    async def _refresh_profile(self, event: PrivateMessage, thread_id: str) -> None:
        """Rename the thread and repost the card when the profile changed."""

        sender = event.sender
        snapshot = self._registry.get_profile(sender.id)
        if snapshot is None:
            return
        if snapshot.name == sender.display_name and snapshot.username == sender.username:
            return

        group = self._config.admin_group_id
        LOGGER.info("Profile changed for %s, refreshing thread %s", sender.id, thread_id)

        await self._messenger.rename_thread(group, thread_id, build_thread_title(sender.display_name, sender.id))
        await self._messenger.send_text(group, build_profile_update_notice(), thread_id=thread_id, parse_mode="html")
        card = build_identity_card(sender.id, sender.display_name, sender.username, snapshot.first_contact)
        await self._messenger.send_text(
            group,
            card,
            thread_id=thread_id,
            control=build_moderation_control(sender.id, self._registry.is_blocked(sender.id)),
            parse_mode="html",
        )
        self._registry.update_profile(sender.id, sender.display_name, sender.username, snapshot.first_contact)
