"""Abstract chat-state store; the in-memory one is the only backend shipped."""

from __future__ import annotations

from abc import ABC, abstractmethod

from telegram_address_scraper.core.models import ChatState, ChatStatus


class BaseChatStore(ABC):
    """Contract for chat-state registries."""

    @abstractmethod
    def ensure(self, chat_id: int) -> ChatState:
        """Return the state for *chat_id*, creating a default one if needed."""
        ...

    @abstractmethod
    def chats(self) -> list[ChatState]:
        """All chats referenced so far."""
        ...

    def set_watching(self, chat_id: int, watching: bool) -> ChatState:
        state = self.ensure(chat_id)
        state.watching = watching
        return state

    def status(self, chat_id: int) -> ChatStatus:
        state = self.ensure(chat_id)
        resolved = sum(1 for r in state.names.values() if r.is_resolved)
        pending = sum(1 for r in state.names.values() if r.is_pending)
        return ChatStatus(
            watching=state.watching,
            address_count=len(state.addresses),
            name_count=len(state.names),
            resolved_count=resolved,
            pending_count=pending,
        )
