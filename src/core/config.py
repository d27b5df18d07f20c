"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely. The
small coercion helpers live here because bad values must degrade to the
documented defaults instead of failing at startup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

LOGGER = logging.getLogger(__name__)

DEFAULT_BLOCK_THRESHOLD = 5
DEFAULT_VERIFICATION_ANSWER = "3"
DEFAULT_WELCOME_MESSAGE = "Welcome! Please complete a short verification before sending messages."
DEFAULT_VERIFICATION_QUESTION = (
    "Question: 1+1=?\n\n"
    "Hints:\n"
    "1. The correct answer is not \"2\".\n"
    "2. The answer is in the bot description, check it before answering."
)


@dataclass(frozen=True)
class ContentFilters:
    """Content categories that may be relayed into the staffed group."""

    image: bool = True
    link: bool = True
    text: bool = True
    channel: bool = True


@dataclass(frozen=True)
class RelayConfig:
    """Settings consumed by the relay and moderation components."""

    admin_group_id: str
    welcome_message: str = DEFAULT_WELCOME_MESSAGE
    verification_question: str = DEFAULT_VERIFICATION_QUESTION
    verification_answer: str = DEFAULT_VERIFICATION_ANSWER
    block_threshold: int = DEFAULT_BLOCK_THRESHOLD
    block_keywords: str = ""
    auto_replies: str = ""
    filters: ContentFilters = field(default_factory=ContentFilters)


def parse_threshold(value: Any, default: int = DEFAULT_BLOCK_THRESHOLD) -> int:
    """Return a positive violation threshold, falling back to the default."""

    if value is None or value == "":
        return default
    try:
        threshold = int(value)
    except (TypeError, ValueError):
        LOGGER.warning("Invalid block threshold %r, using %s", value, default)
        return default
    if threshold < 1:
        LOGGER.warning("Block threshold must be positive (got %s), using %s", threshold, default)
        return default
    return threshold


def parse_toggle(value: Any, default: bool = True) -> bool:
    """Parse a forwarding toggle; anything unrecognized keeps the default."""

    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "1", "yes", "on"}:
            return True
        if lowered in {"false", "0", "no", "off"}:
            return False
    LOGGER.warning("Invalid forwarding toggle %r, using %s", value, default)
    return default


def join_lines(value: Optional[Any]) -> str:
    """Accept either a newline-delimited string or a list of lines."""

    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return "\n".join(str(item) for item in value)
    LOGGER.warning("Ignoring keyword list of unsupported type %s", type(value).__name__)
    return ""
