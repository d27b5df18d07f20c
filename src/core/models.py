"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types. Inbound updates are classified
by the transport adapter into one of the event variants below, each carrying
only the fields its handler needs.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class VerificationState(str, Enum):
    NEW = "new"
    PENDING = "pending_verification"
    VERIFIED = "verified"


@dataclass(frozen=True)
class Correspondent:
    """Read-only projection of everything stored about a correspondent."""

    id: str
    display_name: Optional[str]
    username: Optional[str]
    verification: VerificationState
    blocked: bool
    violation_count: int
    first_contact: Optional[int]


@dataclass(frozen=True)
class ProfileSnapshot:
    """Last profile fields seen for a correspondent (unix seconds for time)."""

    name: str
    username: str
    first_contact: Optional[int]


@dataclass(frozen=True)
class ForwardedMessageRecord:
    """Latest known text of a relayed message, used to diff edits."""

    text: str
    sent_at: Optional[int]


@dataclass(frozen=True)
class ModerationControl:
    """Inline button attached to an identity card."""

    label: str
    payload: str


@dataclass(frozen=True)
class SenderProfile:
    """Profile fields of a private sender as rendered on the staffed side."""

    id: str
    display_name: str
    username: str


@dataclass(frozen=True)
class MessageContent:
    """Content flags used by the forwarding filters."""

    text: Optional[str] = None
    caption: Optional[str] = None
    has_photo: bool = False
    has_video: bool = False
    has_document: bool = False
    has_sticker: bool = False
    has_audio: bool = False
    has_voice: bool = False
    from_channel: bool = False
    has_links: bool = False

    @property
    def is_pure_text(self) -> bool:
        return bool(self.text) and not (
            self.has_photo
            or self.has_video
            or self.has_document
            or self.has_sticker
            or self.has_audio
            or self.has_voice
            or self.from_channel
        )


@dataclass(frozen=True)
class PrivateMessage:
    sender: SenderProfile
    chat_id: str
    message_id: int
    date: int
    content: MessageContent


@dataclass(frozen=True)
class EditedPrivateMessage:
    sender_id: str
    message_id: int
    text: Optional[str]
    caption: Optional[str]


@dataclass(frozen=True)
class GroupMessage:
    chat_id: str
    thread_id: Optional[str]
    is_topic_message: bool
    text: Optional[str]
    from_bot: bool


@dataclass(frozen=True)
class ModerationCallback:
    callback_id: str
    chat_id: str
    message_id: int
    thread_id: Optional[str]
    data: str


InboundEvent = Union[PrivateMessage, EditedPrivateMessage, GroupMessage, ModerationCallback]
