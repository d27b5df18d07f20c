"""Application entry point for the switchboard bot."""

from __future__ import annotations

import argparse
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv
from telethon import events

import settings
from adapters.sqlite_storage import SQLiteKeyValueStore
from adapters.telegram_mapper import (
    build_callback,
    build_edited_message,
    build_group_message,
    build_private_message,
)
from adapters.telegram_messenger import TelethonMessenger
from client import bot_token, build_client
from core import keys
from core.processor import EventProcessor
from core.rules_engine import (
    compile_block_rules,
    compile_response_rules,
    invalid_block_patterns,
    invalid_response_patterns,
)

NAME = "SWITCHBOARD"
FONT = "tarty-1"

DEFAULT_REDACTED_ENV = ["BOT_TOKEN", "API_HASH"]


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", True):
        return []
    values = []
    for name in redact_cfg.get("patterns", DEFAULT_REDACTED_ENV):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", True):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/switchboard.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting switchboard")

    config = settings.build_relay_config()
    if not config.admin_group_id:
        raise RuntimeError("admin_group_id (or ADMIN_GROUP_ID) is required")

    storage = SQLiteKeyValueStore(settings.DB_PATH)
    storage.init_db()

    logger.info(
        "%s block rules and %s auto replies are loaded",
        len(compile_block_rules(config.block_keywords)),
        len(compile_response_rules(config.auto_replies)),
    )

    client = build_client()
    processor = EventProcessor(storage, TelethonMessenger(client), config)

    # Telethon runs each handler in its own task; events are never ordered
    # against each other. Mapping errors stop here so the client keeps going.
    @client.on(events.NewMessage(incoming=True))
    async def on_message(event) -> None:
        try:
            if event.is_private:
                await processor.handle(await build_private_message(event.message))
            elif str(event.chat_id) == config.admin_group_id:
                await processor.handle(await build_group_message(event.message))
        except Exception:
            logger.exception("Error while processing message")

    @client.on(events.MessageEdited(incoming=True))
    async def on_edit(event) -> None:
        try:
            if event.is_private:
                await processor.handle(build_edited_message(event.message))
        except Exception:
            logger.exception("Error while processing edited message")

    @client.on(events.CallbackQuery())
    async def on_callback(event) -> None:
        try:
            await processor.handle(await build_callback(event))
        except Exception:
            logger.exception("Error while processing callback query")

    # Explicit lifecycle management makes start/shutdown behavior obvious.
    client.start(bot_token=bot_token())
    logger.info("Bot connected. Relaying for group %s...", config.admin_group_id)
    client.run_until_disconnected()


def _check() -> None:
    """Print the effective configuration without connecting to Telegram."""

    _print_banner()
    _configure_logging()
    config = settings.build_relay_config()

    print(f"Config file:      {settings.CONFIG_PATH}")
    print(f"Database:         {settings.DB_PATH}")
    print(f"Staffed group:    {config.admin_group_id or '(not set)'}")
    print(f"Block threshold:  {config.block_threshold}")
    print(f"Block rules:      {len(compile_block_rules(config.block_keywords))}")
    print(f"Auto replies:     {len(compile_response_rules(config.auto_replies))}")
    skipped = invalid_block_patterns(config.block_keywords) + invalid_response_patterns(config.auto_replies)
    for line in skipped:
        print(f"Skipped pattern:  {line}")
    filters = config.filters
    print(
        "Forwarding:       "
        f"image={filters.image} link={filters.link} text={filters.text} channel={filters.channel}"
    )

    if os.path.exists(settings.DB_PATH):
        storage = SQLiteKeyValueStore(settings.DB_PATH)
        storage.init_db()
        print(f"Bound threads:    {storage.count_keys(keys.THREAD_PREFIX)}")
        print(f"Blocked:          {storage.count_keys(keys.BLOCKED_PREFIX)}")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="switchboard")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the bot")
    subparsers.add_parser("check", help="Validate config.json and show what would be loaded")

    args = parser.parse_args(argv)
    if args.command == "check":
        _check()
        return
    _run()


if __name__ == "__main__":
    main()
