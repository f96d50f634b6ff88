"""Process-lifetime chat-state registry."""

from __future__ import annotations

import logging

from telegram_address_scraper.core.models import ChatState
from telegram_address_scraper.storage.base_store import BaseChatStore

logger = logging.getLogger(__name__)


class MemoryChatStore(BaseChatStore):
    """Keeps every ``ChatState`` in a dict for the life of the process.

    Only ever touched from the event loop, so no locking.
    """

    def __init__(self) -> None:
        self._chats: dict[int, ChatState] = {}

    def ensure(self, chat_id: int) -> ChatState:
        state = self._chats.get(chat_id)
        if state is None:
            state = ChatState(chat_id=chat_id)
            self._chats[chat_id] = state
            logger.debug("Tracking new chat=%d", chat_id)
        return state

    def chats(self) -> list[ChatState]:
        return list(self._chats.values())

    def __len__(self) -> int:
        return len(self._chats)

    def __contains__(self, chat_id: object) -> bool:
        return chat_id in self._chats
