"""Bot commands."""

from telegram_address_scraper.commands.router import CommandRouter, parse_command

__all__ = ["CommandRouter", "parse_command"]
