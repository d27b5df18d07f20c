from __future__ import annotations

import asyncio
import logging

import pytest
from fakes import FakeMessenger, make_config, make_private

from core.processor import EventProcessor


class BrokenStore:
    def get(self, key: str):
        raise OSError("store unavailable")

    def put(self, key: str, value: str) -> None:
        raise OSError("store unavailable")

    def delete(self, key: str) -> None:
        raise OSError("store unavailable")


def test_unexpected_errors_stop_at_the_boundary(caplog: pytest.LogCaptureFixture) -> None:
    messenger = FakeMessenger()
    processor = EventProcessor(BrokenStore(), messenger, make_config())

    with caplog.at_level(logging.ERROR, logger="core.processor"):
        asyncio.run(processor.handle(make_private("hello")))

    assert messenger.calls == []
    assert "PrivateMessage" in caplog.text


def test_unknown_event_types_are_ignored() -> None:
    messenger = FakeMessenger()
    processor = EventProcessor(BrokenStore(), messenger, make_config())
    asyncio.run(processor.handle(object()))
    assert messenger.calls == []
