"""Storage layer."""

from telegram_address_scraper.storage.base_store import BaseChatStore
from telegram_address_scraper.storage.memory_store import MemoryChatStore

__all__ = ["BaseChatStore", "MemoryChatStore"]
