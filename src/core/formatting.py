"""Identity cards, thread titles and notice texts.

Everything here is a pure function. User-controlled text that ends up in an
HTML-formatted message is escaped; thread titles are plain text.
"""

from __future__ import annotations

import html
from datetime import datetime
from typing import Optional

from core.models import ModerationControl

THREAD_TITLE_LIMIT = 128
TIMESTAMP_FORMAT = "%H:%M:%S %d-%m-%Y"
NO_USERNAME = "none"

AUTO_REPLY_PREFIX = "This is an automatic reply\n\n"
UNTRACKED_ORIGINAL = "[original content unavailable / not a text message]"
UNTRACKED_SENT_AT = "[send time unavailable]"
UNTRACKED_NEW_CONTENT = "[non-text content / media caption]"


def escape_html(value: Optional[object]) -> str:
    """Escape the three characters Telegram's HTML mode reserves."""

    if value is None:
        return ""
    return html.escape(str(value), quote=False)


def format_display_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    name = first_name or ""
    if last_name:
        name = f"{name} {last_name}"
    return name


def format_username(username: Optional[str]) -> str:
    return f"@{username}" if username else NO_USERNAME


def format_timestamp(timestamp: Optional[int] = None) -> str:
    """Render a unix timestamp (or now) in local time."""

    if timestamp is None:
        moment = datetime.now().astimezone()
    else:
        moment = datetime.fromtimestamp(timestamp).astimezone()
    return moment.strftime(TIMESTAMP_FORMAT)


def build_thread_title(display_name: str, correspondent_id: str) -> str:
    return f"{display_name.strip()} | {correspondent_id}"[:THREAD_TITLE_LIMIT]


def build_identity_card(
    correspondent_id: str,
    display_name: str,
    username: str,
    first_contact: Optional[int] = None,
) -> str:
    """Return the HTML profile card posted at the top of a thread.

    ``<code>`` spans are tap-to-copy in Telegram clients, which is what the
    staff use the card for.
    """

    lines = [
        "<b>👤 Correspondent profile</b>",
        "---",
        f"• Name: <code>{escape_html(display_name)}</code>",
        f"• Username: <code>{escape_html(username)}</code>",
        f"• ID: <code>{escape_html(correspondent_id)}</code>",
        f"• First contact: <code>{escape_html(format_timestamp(first_contact))}</code>",
    ]
    return "\n".join(lines)


def build_moderation_control(correspondent_id: str, blocked: bool) -> ModerationControl:
    if blocked:
        return ModerationControl(label="✅ Unblock", payload=f"unblock:{correspondent_id}")
    return ModerationControl(label="🚫 Block", payload=f"block:{correspondent_id}")


def build_profile_update_notice() -> str:
    return "🔔 <b>Profile updated</b>\nThe thread title was renamed automatically."


def build_edit_notice(
    previous_text: Optional[str],
    sent_at: Optional[int],
    new_text: Optional[str],
    new_caption: Optional[str],
) -> str:
    original = previous_text or UNTRACKED_ORIGINAL
    sent = format_timestamp(sent_at) if sent_at is not None else UNTRACKED_SENT_AT
    new_content = new_text or new_caption or UNTRACKED_NEW_CONTENT
    lines = [
        "⚠️ <b>Message edited</b>",
        "---",
        "<b>Previous content:</b>",
        f"<code>{escape_html(original)}</code>",
        "",
        "<b>Originally sent:</b>",
        f"<code>{escape_html(sent)}</code>",
        "",
        "<b>New content:</b>",
        escape_html(new_content),
    ]
    return "\n".join(lines)


def build_moderation_confirmation(display_name: str, blocked: bool) -> str:
    name = escape_html(display_name)
    if blocked:
        return f"❌ <b>{name} has been blocked.</b>\nNo further messages will be received from them."
    return f"✅ <b>{name} has been unblocked.</b>\nTheir messages will be relayed again."


def build_violation_notice(count: int, threshold: int) -> str:
    return (
        f"⚠️ Your message matched a blocked keyword ({count}/{threshold}). "
        "It was discarded and will not be delivered."
    )


def build_block_notice() -> str:
    return (
        "❌ You have triggered blocked keywords too many times and have been blocked. "
        "Further messages will not be received."
    )


def build_filter_notice(reason: str) -> str:
    return f"This message was filtered: {reason}. Content of this kind is not forwarded."
