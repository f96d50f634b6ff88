"""Telegram bot listener using Telethon.

Messages and channel posts are normalized into ``InboundText``; updates
about the bot's own membership become ``MembershipChange``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from telethon import TelegramClient, events, utils
from telethon.errors import FloodWaitError
from telethon.tl import types

from telegram_address_scraper.config import TelegramConfig
from telegram_address_scraper.core.models import InboundText, MembershipChange
from telegram_address_scraper.core.utils import truncate

logger = logging.getLogger(__name__)

# Types for the async callbacks the app registers
TextCallback = Callable[[InboundText], Awaitable[None]]
MembershipCallback = Callable[[MembershipChange], Awaitable[None]]


def participant_status(participant: Any) -> str:
    """Map a Telethon participant object to a Bot API style status."""
    if participant is None or isinstance(participant, types.ChannelParticipantLeft):
        return "left"
    if isinstance(participant, types.ChannelParticipantBanned):
        return "kicked"
    if isinstance(
        participant, (types.ChannelParticipantCreator, types.ChatParticipantCreator)
    ):
        return "creator"
    if isinstance(
        participant, (types.ChannelParticipantAdmin, types.ChatParticipantAdmin)
    ):
        return "administrator"
    return "member"


def to_inbound_text(event: Any, chat: Any = None) -> InboundText | None:
    """Build an ``InboundText`` from a ``NewMessage`` event.

    Channel posts carry no sender identity. Returns None for messages
    without text.
    """
    text = event.raw_text
    if not text:
        return None
    is_post = bool(getattr(event.message, "post", False))
    return InboundText(
        chat_id=event.chat_id,
        sender_id=None if is_post else event.sender_id,
        text=text,
        chat_title=getattr(chat, "title", None),
        is_channel_post=is_post,
    )


class TelegramListener:
    """Logs in as a bot and dispatches every incoming message.

    Handles:
    * Auto-reconnect
    * Flood-wait backoff
    * Per-event fault isolation
    """

    def __init__(
        self,
        config: TelegramConfig,
        on_text: TextCallback,
        on_membership: MembershipCallback,
    ) -> None:
        self._config = config
        self._on_text = on_text
        self._on_membership = on_membership
        self._client: TelegramClient | None = None
        self._me_id: int | None = None
        self.username: str | None = None

    @property
    def client(self) -> TelegramClient | None:
        return self._client

    def is_connected(self) -> bool:
        return self._client is not None and self._client.is_connected()

    async def start(self) -> TelegramClient:
        """Authenticate and begin listening."""
        self._client = TelegramClient(
            self._config.session_name,
            self._config.api_id,
            self._config.api_hash,
            auto_reconnect=True,
            retry_delay=5,
            connection_retries=10,
        )

        await self._client.start(bot_token=self._config.bot_token)
        me = await self._client.get_me()
        self._me_id = me.id
        self.username = me.username
        logger.info("Authenticated as @%s (id=%d)", me.username, me.id)

        # Private chats, groups and channel posts
        self._client.add_event_handler(
            self._handle_message,
            events.NewMessage(incoming=True),
        )
        self._client.add_event_handler(
            self._handle_participant,
            events.Raw(
                types=[types.UpdateChannelParticipant, types.UpdateChatParticipant]
            ),
        )

        logger.info(
            "Bot is up. For groups disable privacy mode; for channels make the bot an admin."
        )
        return self._client

    async def reply(self, chat_id: int, text: str) -> None:
        """Send plain text to *chat_id*."""
        assert self._client is not None
        await self._client.send_message(chat_id, text, link_preview=False)

    async def _handle_message(self, event: events.NewMessage.Event) -> None:
        """Normalize and dispatch a single incoming message."""
        try:
            chat = await event.get_chat()
            inbound = to_inbound_text(event, chat)
            if inbound is None:
                return
            if inbound.is_channel_post:
                logger.debug(
                    "[CHANNEL] Post in chat %d: %r",
                    inbound.chat_id,
                    truncate(inbound.text),
                )
            await self._on_text(inbound)

        except FloodWaitError as e:
            logger.warning(
                "Telegram flood-wait: sleeping %d seconds", e.seconds
            )
            await asyncio.sleep(e.seconds)

        except Exception:
            logger.exception("Error handling message event")

    async def _handle_participant(self, update: Any) -> None:
        """Turn a participant update about the bot itself into ``MembershipChange``."""
        try:
            if update.user_id != self._me_id:
                return

            if isinstance(update, types.UpdateChannelParticipant):
                peer: Any = types.PeerChannel(update.channel_id)
            else:
                peer = types.PeerChat(update.chat_id)

            chat = await self._get_chat(peer)
            if isinstance(peer, types.PeerChat):
                chat_type = "group"
            elif getattr(chat, "megagroup", False):
                chat_type = "supergroup"
            else:
                chat_type = "channel"

            change = MembershipChange(
                chat_id=utils.get_peer_id(peer),
                chat_type=chat_type,
                previous_status=participant_status(update.prev_participant),
                new_status=participant_status(update.new_participant),
                chat_title=getattr(chat, "title", None),
            )
            logger.debug(
                "Membership in %s %d: %s -> %s",
                change.chat_type,
                change.chat_id,
                change.previous_status,
                change.new_status,
            )
            await self._on_membership(change)

        except Exception:
            logger.exception("Error handling participant update")

    async def _get_chat(self, peer: Any) -> Any:
        assert self._client is not None
        try:
            return await self._client.get_entity(peer)
        except ValueError:
            logger.debug("Entity for %s not cached", peer)
            return None

    async def run_until_disconnected(self) -> None:
        """Block until the client disconnects."""
        if self._client:
            await self._client.run_until_disconnected()

    async def stop(self) -> None:
        """Gracefully disconnect."""
        if self._client and self._client.is_connected():
            await self._client.disconnect()
            logger.info("Telegram client disconnected")
