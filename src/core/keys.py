"""Helpers for building key-value store keys.

Every piece of persisted state lives under one of these prefixes so the
store itself never needs to understand the domain.
"""

from __future__ import annotations

VERIFICATION_PREFIX = "user_state:"
BLOCKED_PREFIX = "is_blocked:"
VIOLATIONS_PREFIX = "block_count:"
THREAD_PREFIX = "user_topic:"
CORRESPONDENT_PREFIX = "topic_user:"
PROFILE_PREFIX = "user_info:"
MESSAGE_PREFIX = "msg_data:"


def verification_key(correspondent_id: str) -> str:
    return f"{VERIFICATION_PREFIX}{correspondent_id}"


def blocked_key(correspondent_id: str) -> str:
    return f"{BLOCKED_PREFIX}{correspondent_id}"


def violations_key(correspondent_id: str) -> str:
    return f"{VIOLATIONS_PREFIX}{correspondent_id}"


def thread_key(correspondent_id: str) -> str:
    """Forward mapping: correspondent -> thread."""

    return f"{THREAD_PREFIX}{correspondent_id}"


def correspondent_key(thread_id: str) -> str:
    """Reverse mapping: thread -> correspondent."""

    return f"{CORRESPONDENT_PREFIX}{thread_id}"


def profile_key(correspondent_id: str) -> str:
    return f"{PROFILE_PREFIX}{correspondent_id}"


def message_key(correspondent_id: str, message_id: int) -> str:
    return f"{MESSAGE_PREFIX}{correspondent_id}:{message_id}"
