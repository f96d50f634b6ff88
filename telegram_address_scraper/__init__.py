"""Collects EVM addresses and ENS names from Telegram chats."""

__version__ = "0.1.0"
