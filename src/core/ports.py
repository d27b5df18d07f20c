"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for storage and messaging adapters so
that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Optional, Protocol

from core.models import ModerationControl


class KeyValueStore(Protocol):
    """String-keyed, string-valued store without transactions.

    Every read may be stale and every write is independently visible; the
    core never relies on two keys changing together.
    """

    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MessagingClient(Protocol):
    """Outbound messaging operations required by the core.

    Implementations log failed calls and return ``None`` instead of raising,
    so callers treat every call as fire-and-forget.
    """

    async def send_text(
        self,
        target: str,
        text: str,
        *,
        thread_id: Optional[str] = None,
        control: Optional[ModerationControl] = None,
        parse_mode: Optional[str] = None,
    ) -> None:
        ...

    async def copy_message(self, target: str, source: str, message_id: int, thread_id: str) -> None:
        ...

    async def create_thread(self, group: str, title: str) -> Optional[str]:
        ...

    async def rename_thread(self, group: str, thread_id: str, title: str) -> None:
        ...

    async def edit_control(self, target: str, message_id: int, control: ModerationControl) -> None:
        ...

    async def acknowledge_callback(self, callback_id: str, text: str) -> None:
        ...
