"""Delivers exported address lists to the operator by direct message.

Uses the bot's Telethon client. The operator must have opened a DM with the
bot once; until then Telegram refuses the message and ``DeliveryError`` is
raised.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Protocol

from telegram_address_scraper.config import ExportConfig
from telegram_address_scraper.core.errors import DeliveryError
from telegram_address_scraper.core.types import ExportMode
from telegram_address_scraper.export.formatter import Report

logger = logging.getLogger(__name__)


class MessageSender(Protocol):
    """The subset of ``TelegramClient`` used for sending."""

    async def send_message(self, entity: Any, message: str, **kwargs: Any) -> Any:
        ...

    async def send_file(self, entity: Any, file: Any, **kwargs: Any) -> Any:
        ...


class OperatorNotifier:
    """Sends reports to the operator as text blocks or a ``.txt`` document."""

    def __init__(
        self,
        client: MessageSender,
        owner_id: int,
        config: ExportConfig,
        dry_run: bool = False,
    ) -> None:
        self._client = client
        self._owner_id = owner_id
        self._mode = config.mode
        self._limit = config.max_message_length
        self._dry_run = dry_run

    async def deliver(self, report: Report) -> int:
        """Send *report* to the operator. Returns the number of messages sent.

        Raises
        ------
        DeliveryError
            If Telegram rejects any part of the delivery.
        """
        if self._mode is ExportMode.DOCUMENT:
            return await self._send_document(report)
        return await self._send_blocks(report)

    async def _send_blocks(self, report: Report) -> int:
        blocks = report.blocks(self._limit)
        for index, block in enumerate(blocks, start=1):
            if self._dry_run:
                logger.info(
                    "[DRY-RUN] Would send part %d/%d to operator:\n%s",
                    index,
                    len(blocks),
                    block,
                )
                continue
            try:
                await self._client.send_message(
                    self._owner_id, block, link_preview=False
                )
            except Exception as exc:
                logger.error(
                    "Failed to send part %d/%d to operator %d: %s",
                    index,
                    len(blocks),
                    self._owner_id,
                    exc,
                )
                raise DeliveryError(str(exc)) from exc

        logger.info(
            "List for chat=%d sent to operator %d in %d part(s)",
            report.chat_id,
            self._owner_id,
            len(blocks),
        )
        return len(blocks)

    async def _send_document(self, report: Report) -> int:
        doc = report.document()
        if self._dry_run:
            logger.info(
                "[DRY-RUN] Would send %s (%d bytes) to operator",
                doc.filename,
                len(doc.content),
            )
            return 1

        buffer = io.BytesIO(doc.content)
        buffer.name = doc.filename
        try:
            await self._client.send_file(
                self._owner_id, buffer, caption=doc.caption, force_document=True
            )
        except Exception as exc:
            logger.error(
                "Failed to send %s to operator %d: %s",
                doc.filename,
                self._owner_id,
                exc,
            )
            raise DeliveryError(str(exc)) from exc

        logger.info("Sent %s to operator %d", doc.filename, self._owner_id)
        return 1
