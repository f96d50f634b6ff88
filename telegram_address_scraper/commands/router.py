"""Slash-command handling shared by messages and channel posts."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from telegram_address_scraper.core.errors import DeliveryError
from telegram_address_scraper.core.models import InboundText
from telegram_address_scraper.export.formatter import EMPTY_REPORT, ExportFormatter
from telegram_address_scraper.notifier.operator_notifier import OperatorNotifier
from telegram_address_scraper.storage.base_store import BaseChatStore

logger = logging.getLogger(__name__)

ReplyCallback = Callable[[int, str], Awaitable[None]]
# Called with True after a delivered list, False after a failed one
ExportCallback = Callable[[bool], None]

COMMAND_MARKER = "/"

HELP_TEXT = (
    "📝 Available Commands:\n"
    "\n"
    "/help - Show this help message\n"
    "/whoami - Show your Telegram ID\n"
    "/status - Show collection statistics\n"
    "/makelist - Send collected addresses to DM\n"
    "/watch - Start collecting in this chat\n"
    "/stop - Stop collecting in this chat\n"
    "\n"
    "🤖 This bot automatically collects ETH addresses and ENS names from all posts."
)
DELIVERED_TEXT = "Sent you a DM with the results."
DELIVERY_FAILED_TEXT = (
    "Failed to DM results. (Is the bot allowed to message you? "
    "Send /start to the bot in DM once.)"
)
WATCH_TEXT = (
    "Watching this chat. I will collect ETH addresses and ENS names "
    "from messages going forward."
)
STOP_TEXT = "Stopped watching this chat."


def parse_command(text: str, bot_username: str | None = None) -> str | None:
    """Return the lowercase command name in *text*, or None.

    Accepts ``/name`` and ``/name@bot``. A command addressed to a different
    bot is not ours.
    """
    stripped = text.strip()
    if not stripped.startswith(COMMAND_MARKER):
        return None
    token = stripped.split(maxsplit=1)[0][len(COMMAND_MARKER):]
    name, _, target = token.partition("@")
    if not name:
        return None
    if target and bot_username and target.lower() != bot_username.lower():
        return None
    return name.lower()


class CommandRouter:
    """Dispatches recognized commands and applies the operator gate."""

    def __init__(
        self,
        store: BaseChatStore,
        formatter: ExportFormatter,
        notifier: OperatorNotifier,
        reply: ReplyCallback,
        owner_id: int,
        allow_channel_commands: bool = True,
        bot_username: str | None = None,
        on_export: ExportCallback | None = None,
    ) -> None:
        self._store = store
        self._formatter = formatter
        self._notifier = notifier
        self._reply = reply
        self._owner_id = owner_id
        self._allow_channel_commands = allow_channel_commands
        self.bot_username = bot_username
        self._on_export = on_export

        self._public: dict[str, Callable[[InboundText], Awaitable[None]]] = {
            "help": self._handle_help,
            "whoami": self._handle_whoami,
        }
        self._owner_only: dict[str, Callable[[InboundText], Awaitable[None]]] = {
            "status": self._handle_status,
            "makelist": self._handle_makelist,
            "watch": self._handle_watch,
            "stop": self._handle_stop,
        }

        self.exports_sent = 0
        self.export_failures = 0

    def is_owner(self, event: InboundText) -> bool:
        if event.is_channel_post:
            return self._allow_channel_commands
        return event.sender_id is not None and event.sender_id == self._owner_id

    async def dispatch(self, event: InboundText) -> bool:
        """Run the command in *event*. Returns False if it is not a command."""
        name = parse_command(event.text, self.bot_username)
        if name is None:
            return False

        source = "channel" if event.is_channel_post else f"user {event.sender_id}"
        if name in self._public:
            logger.info("[CMD] /%s from %s in chat %d", name, source, event.chat_id)
            await self._public[name](event)
            return True

        if name in self._owner_only:
            logger.info("[CMD] /%s from %s in chat %d", name, source, event.chat_id)
            if not self.is_owner(event):
                logger.info("[CMD] /%s rejected - not owner", name)
                return True
            await self._owner_only[name](event)
            return True

        return False

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _handle_help(self, event: InboundText) -> None:
        await self._reply(event.chat_id, HELP_TEXT)

    async def _handle_whoami(self, event: InboundText) -> None:
        who = (
            str(event.sender_id)
            if event.sender_id is not None
            else "Channel Post (no user ID)"
        )
        await self._reply(event.chat_id, f"Your Telegram ID: {who}")

    async def _handle_status(self, event: InboundText) -> None:
        status = self._store.status(event.chat_id)
        logger.info(
            "[CMD] Status - watching: %s, ETH: %d, ENS: %d (%d resolved, %d pending)",
            status.watching,
            status.address_count,
            status.name_count,
            status.resolved_count,
            status.pending_count,
        )
        await self._reply(
            event.chat_id,
            f"Watched: {str(status.watching).lower()}\n"
            f"Collected: {status.total} "
            f"(ETH: {status.address_count}, ENS: {status.name_count})",
        )

    async def _handle_makelist(self, event: InboundText) -> None:
        state = self._store.ensure(event.chat_id)
        report = self._formatter.build_report(state, event.chat_title)
        logger.info(
            "[CMD] Generating list with %d unique addresses for chat %d",
            report.unique_count,
            event.chat_id,
        )

        if report.empty:
            await self._reply(event.chat_id, EMPTY_REPORT)
            return

        try:
            await self._notifier.deliver(report)
        except DeliveryError as exc:
            self.export_failures += 1
            if self._on_export is not None:
                self._on_export(False)
            logger.error("[CMD] Failed to send list: %s", exc)
            await self._reply(event.chat_id, DELIVERY_FAILED_TEXT)
            return

        self.exports_sent += 1
        if self._on_export is not None:
            self._on_export(True)
        await self._reply(event.chat_id, DELIVERED_TEXT)

    async def _handle_watch(self, event: InboundText) -> None:
        self._store.set_watching(event.chat_id, True)
        await self._reply(event.chat_id, WATCH_TEXT)

    async def _handle_stop(self, event: InboundText) -> None:
        self._store.set_watching(event.chat_id, False)
        await self._reply(event.chat_id, STOP_TEXT)
