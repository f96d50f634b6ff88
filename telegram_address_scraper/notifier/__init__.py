"""Operator delivery."""

from telegram_address_scraper.notifier.operator_notifier import (
    MessageSender,
    OperatorNotifier,
)

__all__ = ["MessageSender", "OperatorNotifier"]
