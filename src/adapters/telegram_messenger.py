"""Telethon messaging adapter.

Implements the core MessagingClient port on top of a bot-authorized Telethon
client. Failed calls are logged with the method name and parameters and
return ``None``; nothing is retried.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Awaitable, Callable, Optional, TypeVar

from telethon import Button, errors
from telethon.tl.functions.channels import CreateForumTopicRequest, EditForumTopicRequest
from telethon.tl.functions.messages import SetBotCallbackAnswerRequest
from telethon.tl.types import MessageActionTopicCreate

from core.models import ModerationControl

LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")


def _buttons(control: Optional[ModerationControl]):
    if control is None:
        return None
    return [[Button.inline(control.label, control.payload.encode("utf-8"))]]


def _topic_id_from_updates(result: Any) -> Optional[str]:
    """Find the service message announcing a newly created forum topic."""

    for update in getattr(result, "updates", None) or []:
        message = getattr(update, "message", None)
        if isinstance(getattr(message, "action", None), MessageActionTopicCreate):
            return str(message.id)
    return None


class TelethonMessenger:
    """MessagingClient adapter backed by a Telethon TelegramClient."""

    def __init__(self, client) -> None:
        self._client = client

    async def _call(self, method: str, params: dict, factory: Callable[[], Awaitable[_T]]) -> Optional[_T]:
        try:
            return await factory()
        except (errors.RPCError, ValueError) as exc:
            LOGGER.error("Telegram API error (%s): %s. Params: %s", method, exc, params)
            return None

    async def send_text(
        self,
        target: str,
        text: str,
        *,
        thread_id: Optional[str] = None,
        control: Optional[ModerationControl] = None,
        parse_mode: Optional[str] = None,
    ) -> None:
        params = {"chat_id": target, "thread_id": thread_id, "parse_mode": parse_mode}
        await self._call(
            "sendMessage",
            params,
            lambda: self._client.send_message(
                int(target),
                text,
                reply_to=int(thread_id) if thread_id else None,
                buttons=_buttons(control),
                # None disables parsing; Telethon would otherwise apply Markdown.
                parse_mode=parse_mode,
                link_preview=False,
            ),
        )

    async def copy_message(self, target: str, source: str, message_id: int, thread_id: str) -> None:
        params = {"chat_id": target, "from_chat_id": source, "message_id": message_id, "thread_id": thread_id}

        async def _copy():
            original = await self._client.get_messages(int(source), ids=message_id)
            if original is None:
                raise ValueError(f"message {message_id} not found in {source}")
            # Sending a Message object re-sends its content without a forward header.
            return await self._client.send_message(int(target), original, reply_to=int(thread_id))

        await self._call("copyMessage", params, _copy)

    async def create_thread(self, group: str, title: str) -> Optional[str]:
        params = {"chat_id": group, "name": title}
        result = await self._call(
            "createForumTopic",
            params,
            lambda: self._client(
                CreateForumTopicRequest(
                    channel=int(group),
                    title=title,
                    random_id=random.randrange(-(2**63), 2**63),
                )
            ),
        )
        if result is None:
            return None
        thread_id = _topic_id_from_updates(result)
        if thread_id is None:
            LOGGER.error("createForumTopic returned no topic id. Params: %s", params)
        return thread_id

    async def rename_thread(self, group: str, thread_id: str, title: str) -> None:
        params = {"chat_id": group, "thread_id": thread_id, "name": title}
        await self._call(
            "editForumTopic",
            params,
            lambda: self._client(
                EditForumTopicRequest(channel=int(group), topic_id=int(thread_id), title=title)
            ),
        )

    async def edit_control(self, target: str, message_id: int, control: ModerationControl) -> None:
        params = {"chat_id": target, "message_id": message_id, "payload": control.payload}
        await self._call(
            "editMessageReplyMarkup",
            params,
            lambda: self._client.edit_message(int(target), message_id, buttons=_buttons(control)),
        )

    async def acknowledge_callback(self, callback_id: str, text: str) -> None:
        params = {"callback_query_id": callback_id, "text": text}
        await self._call(
            "answerCallbackQuery",
            params,
            lambda: self._client(
                SetBotCallbackAnswerRequest(query_id=int(callback_id), cache_time=0, message=text)
            ),
        )
