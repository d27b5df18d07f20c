from __future__ import annotations

from typing import Optional

from core.config import ContentFilters, RelayConfig
from core.models import MessageContent, ModerationControl, PrivateMessage, SenderProfile

ADMIN_GROUP = "-1001000"


class FakeStore:
    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def put(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class FakeMessenger:
    """Records every outbound call; thread creation hands out 100, 101, ..."""

    def __init__(self, fail_create: bool = False) -> None:
        self.calls: list[tuple] = []
        self._fail_create = fail_create
        self._next_thread = 100

    async def send_text(
        self,
        target: str,
        text: str,
        *,
        thread_id: Optional[str] = None,
        control: Optional[ModerationControl] = None,
        parse_mode: Optional[str] = None,
    ) -> None:
        self.calls.append(("send_text", target, text, thread_id, control))

    async def copy_message(self, target: str, source: str, message_id: int, thread_id: str) -> None:
        self.calls.append(("copy_message", target, source, message_id, thread_id))

    async def create_thread(self, group: str, title: str) -> Optional[str]:
        self.calls.append(("create_thread", group, title))
        if self._fail_create:
            return None
        thread_id = str(self._next_thread)
        self._next_thread += 1
        return thread_id

    async def rename_thread(self, group: str, thread_id: str, title: str) -> None:
        self.calls.append(("rename_thread", group, thread_id, title))

    async def edit_control(self, target: str, message_id: int, control: ModerationControl) -> None:
        self.calls.append(("edit_control", target, message_id, control))

    async def acknowledge_callback(self, callback_id: str, text: str) -> None:
        self.calls.append(("acknowledge_callback", callback_id, text))

    def named(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]

    def texts_to(self, target: str) -> list[str]:
        return [call[2] for call in self.named("send_text") if call[1] == target]


def make_config(**overrides) -> RelayConfig:
    values = {"admin_group_id": ADMIN_GROUP, "filters": ContentFilters()}
    values.update(overrides)
    return RelayConfig(**values)


def make_private(
    text: Optional[str] = "hello",
    *,
    user_id: str = "42",
    message_id: int = 1,
    date: int = 1_700_000_000,
    display_name: str = "Ada Lovelace",
    username: str = "@ada",
    **content_flags,
) -> PrivateMessage:
    return PrivateMessage(
        sender=SenderProfile(id=user_id, display_name=display_name, username=username),
        chat_id=user_id,
        message_id=message_id,
        date=date,
        content=MessageContent(text=text, **content_flags),
    )
