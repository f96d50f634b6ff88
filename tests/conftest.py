"""Shared fakes for the transport and the name-resolution backend."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from telegram_address_scraper.resolution.base_resolver import BaseResolver
from telegram_address_scraper.storage.memory_store import MemoryChatStore

ALICE_ADDR = "0x1111111111111111111111111111111111111111"
BOB_ADDR = "0x2222222222222222222222222222222222222222"


class FakeResolver(BaseResolver):
    """Answers from a dict; raises for names listed in ``failing``."""

    def __init__(
        self,
        records: dict[str, str] | None = None,
        failing: set[str] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.records = records or {}
        self.failing = failing or set()
        self.delay = delay
        self.calls: list[str] = []
        self.closed = False

    async def resolve(self, name: str) -> str | None:
        self.calls.append(name)
        if self.delay:
            await asyncio.sleep(self.delay)
        if name in self.failing:
            raise RuntimeError(f"backend error for {name}")
        return self.records.get(name)

    async def aclose(self) -> None:
        self.closed = True


class FakeClient:
    """Records what would have been sent through ``TelegramClient``."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.messages: list[tuple[Any, str]] = []
        self.files: list[tuple[Any, Any, dict[str, Any]]] = []

    async def send_message(self, entity: Any, message: str, **kwargs: Any) -> None:
        if self.fail:
            raise ValueError("Could not find the input entity for PeerUser")
        self.messages.append((entity, message))

    async def send_file(self, entity: Any, file: Any, **kwargs: Any) -> None:
        if self.fail:
            raise ValueError("Could not find the input entity for PeerUser")
        self.files.append((entity, file, kwargs))


class ReplyRecorder:
    """Stand-in for the listener's ``reply`` callback."""

    def __init__(self) -> None:
        self.replies: list[tuple[int, str]] = []

    async def __call__(self, chat_id: int, text: str) -> None:
        self.replies.append((chat_id, text))

    @property
    def texts(self) -> list[str]:
        return [text for _, text in self.replies]


async def settle_background() -> None:
    """Let detached resolution tasks run to completion."""
    tasks = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
    if tasks:
        await asyncio.wait(tasks, timeout=1.0)


@pytest.fixture
def store() -> MemoryChatStore:
    return MemoryChatStore()


@pytest.fixture
def resolver() -> FakeResolver:
    return FakeResolver(records={"alice.eth": ALICE_ADDR, "bob.eth": BOB_ADDR})
