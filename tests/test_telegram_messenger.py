from __future__ import annotations

import asyncio
import logging
from types import SimpleNamespace

import pytest
from telethon import errors
from telethon.tl.functions.channels import CreateForumTopicRequest, EditForumTopicRequest
from telethon.tl.functions.messages import SetBotCallbackAnswerRequest
from telethon.tl.types import MessageActionTopicCreate

from adapters.telegram_messenger import TelethonMessenger
from core.models import ModerationControl


class FakeTelethonClient:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.requests: list = []
        self.sent: list[tuple] = []
        self.edited: list[tuple] = []
        self.history: dict = {}

    async def __call__(self, request):
        self.requests.append(request)
        if self.fail:
            raise errors.RPCError(request, "CHAT_ADMIN_REQUIRED", 400)
        service = SimpleNamespace(id=77, action=MessageActionTopicCreate(title="t", icon_color=0))
        return SimpleNamespace(updates=[SimpleNamespace(), SimpleNamespace(message=service)])

    async def send_message(self, entity, message, **kwargs):
        if self.fail:
            raise errors.RPCError(None, "USER_IS_BLOCKED", 403)
        self.sent.append((entity, message, kwargs))

    async def get_messages(self, entity, ids=None):
        return self.history.get((entity, ids))

    async def edit_message(self, entity, message=None, text=None, **kwargs):
        self.edited.append((entity, message, text, kwargs))


def test_create_thread_returns_topic_id() -> None:
    client = FakeTelethonClient()
    thread_id = asyncio.run(TelethonMessenger(client).create_thread("-100123", "Ada | 42"))

    assert thread_id == "77"
    (request,) = client.requests
    assert isinstance(request, CreateForumTopicRequest)
    assert request.title == "Ada | 42"


def test_failed_calls_are_logged_and_swallowed(caplog: pytest.LogCaptureFixture) -> None:
    messenger = TelethonMessenger(FakeTelethonClient(fail=True))

    with caplog.at_level(logging.ERROR, logger="adapters.telegram_messenger"):
        assert asyncio.run(messenger.create_thread("-100123", "Ada | 42")) is None
        asyncio.run(messenger.send_text("42", "hi"))

    assert "createForumTopic" in caplog.text
    assert "sendMessage" in caplog.text


def test_send_text_targets_topic_with_button() -> None:
    client = FakeTelethonClient()
    control = ModerationControl(label="Block", payload="block:42")

    asyncio.run(TelethonMessenger(client).send_text("-100123", "<b>card</b>", thread_id="77", control=control, parse_mode="html"))

    ((entity, text, kwargs),) = client.sent
    assert entity == -100123
    assert text == "<b>card</b>"
    assert kwargs["reply_to"] == 77
    assert kwargs["parse_mode"] == "html"
    assert kwargs["buttons"][0][0].data == b"block:42"


def test_plain_send_disables_markdown_parsing() -> None:
    client = FakeTelethonClient()
    asyncio.run(TelethonMessenger(client).send_text("42", "*not bold*"))
    ((_, _, kwargs),) = client.sent
    assert kwargs["parse_mode"] is None
    assert kwargs["reply_to"] is None


def test_copy_message_resends_original_into_topic() -> None:
    client = FakeTelethonClient()
    original = SimpleNamespace(id=5, message="hello")
    client.history[(42, 5)] = original

    asyncio.run(TelethonMessenger(client).copy_message("-100123", "42", 5, "77"))

    ((entity, message, kwargs),) = client.sent
    assert entity == -100123
    assert message is original
    assert kwargs["reply_to"] == 77


def test_copy_of_missing_message_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    client = FakeTelethonClient()

    with caplog.at_level(logging.ERROR, logger="adapters.telegram_messenger"):
        asyncio.run(TelethonMessenger(client).copy_message("-100123", "42", 5, "77"))

    assert client.sent == []
    assert "copyMessage" in caplog.text
    assert "message 5 not found" in caplog.text


def test_rename_thread_edits_forum_topic() -> None:
    client = FakeTelethonClient()
    asyncio.run(TelethonMessenger(client).rename_thread("-100123", "77", "Ada L. | 42"))

    (request,) = client.requests
    assert isinstance(request, EditForumTopicRequest)
    assert request.topic_id == 77
    assert request.title == "Ada L. | 42"


def test_edit_control_only_replaces_buttons() -> None:
    client = FakeTelethonClient()
    control = ModerationControl(label="Unblock", payload="unblock:42")

    asyncio.run(TelethonMessenger(client).edit_control("-100123", 9, control))

    ((entity, message_id, text, kwargs),) = client.edited
    assert entity == -100123
    assert message_id == 9
    assert text is None
    assert kwargs["buttons"][0][0].data == b"unblock:42"


def test_acknowledge_callback_answers_query() -> None:
    client = FakeTelethonClient()
    asyncio.run(TelethonMessenger(client).acknowledge_callback("123456789", "Blocking..."))

    (request,) = client.requests
    assert isinstance(request, SetBotCallbackAnswerRequest)
    assert request.query_id == 123456789
    assert request.message == "Blocking..."
    assert request.cache_time == 0
