from __future__ import annotations

import asyncio

from fakes import ADMIN_GROUP, FakeMessenger, FakeStore, make_config

from core.models import GroupMessage
from core.processor import EventProcessor
from core.registry import CorrespondentRegistry


def _group_message(
    text: "str | None" = "hi there",
    *,
    chat_id: str = ADMIN_GROUP,
    thread_id: "str | None" = "100",
    from_bot: bool = False,
) -> GroupMessage:
    return GroupMessage(
        chat_id=chat_id,
        thread_id=thread_id,
        is_topic_message=thread_id is not None,
        text=text,
        from_bot=from_bot,
    )


def _processor(store: FakeStore, messenger: FakeMessenger) -> EventProcessor:
    CorrespondentRegistry(store).bind_thread("42", "100")
    return EventProcessor(store, messenger, make_config())


def test_staff_reply_is_relayed_verbatim() -> None:
    store = FakeStore()
    messenger = FakeMessenger()
    asyncio.run(_processor(store, messenger).handle(_group_message("<b>not html</b>")))
    assert messenger.named("send_text") == [("send_text", "42", "<b>not html</b>", None, None)]


def test_bot_messages_are_never_relayed() -> None:
    store = FakeStore()
    messenger = FakeMessenger()
    asyncio.run(_processor(store, messenger).handle(_group_message(from_bot=True)))
    assert messenger.calls == []


def test_unbound_thread_is_silent() -> None:
    store = FakeStore()
    messenger = FakeMessenger()
    asyncio.run(_processor(store, messenger).handle(_group_message(thread_id="999")))
    assert messenger.calls == []


def test_non_topic_and_media_messages_are_ignored() -> None:
    store = FakeStore()
    messenger = FakeMessenger()
    processor = _processor(store, messenger)
    asyncio.run(processor.handle(_group_message(thread_id=None)))
    asyncio.run(processor.handle(_group_message(text=None)))
    assert messenger.calls == []


def test_other_groups_are_ignored() -> None:
    store = FakeStore()
    messenger = FakeMessenger()
    asyncio.run(_processor(store, messenger).handle(_group_message(chat_id="-100555")))
    assert messenger.calls == []
