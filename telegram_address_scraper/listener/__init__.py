"""Telegram transport."""

from telegram_address_scraper.listener.telegram_listener import (
    TelegramListener,
    participant_status,
    to_inbound_text,
)

__all__ = ["TelegramListener", "participant_status", "to_inbound_text"]
