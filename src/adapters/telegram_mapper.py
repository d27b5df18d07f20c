"""Telegram-to-core event mapping adapter.

This keeps Telethon-specific details out of the core pipeline: every update
the bot receives is turned into one of the core event variants here.
"""

from __future__ import annotations

from typing import Optional

from telethon.tl.custom import Message
from telethon.tl.types import (
    MessageEntityTextUrl,
    MessageEntityUrl,
    MessageMediaWebPage,
    PeerChannel,
)

from core.formatting import format_display_name, format_username
from core.models import (
    EditedPrivateMessage,
    GroupMessage,
    MessageContent,
    ModerationCallback,
    PrivateMessage,
    SenderProfile,
)

LINK_ENTITIES = (MessageEntityUrl, MessageEntityTextUrl)


def _topic_id_from_message(message: Message) -> Optional[int]:
    reply_to = getattr(message, "reply_to", None)
    if not reply_to or not getattr(reply_to, "forum_topic", False):
        return None
    top_id = getattr(reply_to, "reply_to_top_id", None)
    if top_id:
        return top_id
    return getattr(reply_to, "reply_to_msg_id", None)


def _has_media(message: Message) -> bool:
    media = getattr(message, "media", None)
    # Link previews are attached as media but the message is still plain text.
    return media is not None and not isinstance(media, MessageMediaWebPage)


def _split_text_and_caption(message: Message) -> tuple[Optional[str], Optional[str]]:
    """Telethon keeps text and captions in one field; split them like the Bot API."""

    raw = message.raw_text or None
    if _has_media(message):
        return None, raw
    return raw, None


def _is_channel_forward(message: Message) -> bool:
    fwd_from = getattr(message, "fwd_from", None)
    if fwd_from is None:
        return False
    return isinstance(getattr(fwd_from, "from_id", None), PeerChannel)


def _has_links(message: Message) -> bool:
    entities = getattr(message, "entities", None) or []
    return any(isinstance(entity, LINK_ENTITIES) for entity in entities)


def build_content(message: Message) -> MessageContent:
    text, caption = _split_text_and_caption(message)
    # Telethon also exposes a link preview's photo/document; those do not count.
    has_media = _has_media(message)

    def flag(name: str) -> bool:
        return has_media and bool(getattr(message, name, None))

    return MessageContent(
        text=text,
        caption=caption,
        has_photo=flag("photo"),
        has_video=flag("video"),
        has_document=flag("document"),
        has_sticker=flag("sticker"),
        has_audio=flag("audio"),
        has_voice=flag("voice"),
        from_channel=_is_channel_forward(message),
        has_links=_has_links(message),
    )


async def build_private_message(message: Message) -> PrivateMessage:
    """Build a PrivateMessage from a Telethon Message in a 1:1 chat."""

    sender = await message.get_sender()
    sender_id = str(message.sender_id)
    profile = SenderProfile(
        id=sender_id,
        display_name=format_display_name(
            getattr(sender, "first_name", None),
            getattr(sender, "last_name", None),
        ),
        username=format_username(getattr(sender, "username", None)),
    )
    return PrivateMessage(
        sender=profile,
        chat_id=str(message.chat_id),
        message_id=message.id,
        date=int(message.date.timestamp()),
        content=build_content(message),
    )


def build_edited_message(message: Message) -> EditedPrivateMessage:
    text, caption = _split_text_and_caption(message)
    return EditedPrivateMessage(
        sender_id=str(message.sender_id),
        message_id=message.id,
        text=text,
        caption=caption,
    )


async def build_group_message(message: Message) -> GroupMessage:
    """Build a GroupMessage from a message posted in a (forum) group."""

    sender = await message.get_sender()
    topic_id = _topic_id_from_message(message)
    text, _ = _split_text_and_caption(message)
    return GroupMessage(
        chat_id=str(message.chat_id),
        thread_id=str(topic_id) if topic_id is not None else None,
        is_topic_message=topic_id is not None,
        text=text,
        from_bot=bool(getattr(sender, "bot", False)),
    )


async def build_callback(event) -> ModerationCallback:
    """Build a ModerationCallback from a Telethon CallbackQuery event."""

    message = await event.get_message()
    topic_id = _topic_id_from_message(message) if message is not None else None
    data = event.data.decode("utf-8", errors="replace") if event.data else ""
    return ModerationCallback(
        callback_id=str(event.query.query_id),
        chat_id=str(event.chat_id),
        message_id=event.message_id,
        thread_id=str(topic_id) if topic_id is not None else None,
        data=data,
    )
