"""Static configuration for switchboard.

All user-editable behavior settings (messages, verification, moderation,
forwarding filters, logging) live in a single JSON file for quick edits
without touching Python. Secrets stay in the environment (.env).
"""

import json
import os

from dotenv import load_dotenv

from core.config import (
    DEFAULT_VERIFICATION_ANSWER,
    DEFAULT_VERIFICATION_QUESTION,
    DEFAULT_WELCOME_MESSAGE,
    ContentFilters,
    RelayConfig,
    join_lines,
    parse_threshold,
    parse_toggle,
)

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.environ.get("SWITCHBOARD_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json; a missing file means every setting uses its default."""

    if not os.path.exists(CONFIG_PATH):
        return {}

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Where to store the SQLite database.
_database = _CONFIG.get("database", {})
DB_PATH = _database.get("path") or os.path.join(PROJECT_ROOT, "switchboard.db")
if not os.path.isabs(DB_PATH):
    DB_PATH = os.path.join(PROJECT_ROOT, DB_PATH)

# The staffed forum supergroup (marked id, e.g. -1001234567890). The env var
# wins so deployments can share one config.json.
ADMIN_GROUP_ID = str(os.getenv("ADMIN_GROUP_ID") or _CONFIG.get("admin_group_id") or "")

_messages = _CONFIG.get("messages", {})
WELCOME_MESSAGE = _messages.get("welcome") or DEFAULT_WELCOME_MESSAGE
VERIFICATION_QUESTION = _messages.get("verification_question") or DEFAULT_VERIFICATION_QUESTION

_verification = _CONFIG.get("verification", {})
VERIFICATION_ANSWER = str(_verification.get("answer") or DEFAULT_VERIFICATION_ANSWER)

# Keyword moderation: newline-delimited regex lines (a JSON list also works).
_moderation = _CONFIG.get("moderation", {})
BLOCK_THRESHOLD = parse_threshold(_moderation.get("block_threshold"))
BLOCK_KEYWORDS = join_lines(_moderation.get("block_keywords"))

# Auto replies: "pattern===response" per line.
AUTO_REPLIES = join_lines(_CONFIG.get("auto_replies"))

# Content categories that may be relayed; everything is allowed by default.
_forwarding = _CONFIG.get("forwarding", {})
FILTERS = ContentFilters(
    image=parse_toggle(_forwarding.get("image")),
    link=parse_toggle(_forwarding.get("link")),
    text=parse_toggle(_forwarding.get("text")),
    channel=parse_toggle(_forwarding.get("channel")),
)

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})


def build_relay_config() -> RelayConfig:
    """Bundle the settings the core consumes."""

    return RelayConfig(
        admin_group_id=ADMIN_GROUP_ID,
        welcome_message=WELCOME_MESSAGE,
        verification_question=VERIFICATION_QUESTION,
        verification_answer=VERIFICATION_ANSWER,
        block_threshold=BLOCK_THRESHOLD,
        block_keywords=BLOCK_KEYWORDS,
        auto_replies=AUTO_REPLIES,
        filters=FILTERS,
    )
