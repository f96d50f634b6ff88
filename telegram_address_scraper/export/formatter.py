"""Builds the address list sent to the operator by ``/makelist``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from telegram_address_scraper.config import TELEGRAM_MESSAGE_LIMIT
from telegram_address_scraper.core.models import ChatState

logger = logging.getLogger(__name__)

EMPTY_REPORT = "No addresses collected yet."

_PART_PREFIX = "Part {index}/{total}:\n\n"
_MAX_TITLE_LENGTH = 64

ChecksumFn = Callable[[str], str]


@dataclass(frozen=True, slots=True)
class ExportDocument:
    """The report as a text file attachment."""

    filename: str
    content: bytes
    caption: str


@dataclass(frozen=True, slots=True)
class Report:
    """Sorted, deduplicated addresses for one chat plus their provenance counts."""

    chat_id: int
    chat_title: str | None
    addresses: tuple[str, ...]
    raw_count: int
    resolved_count: int

    @property
    def unique_count(self) -> int:
        return len(self.addresses)

    @property
    def empty(self) -> bool:
        return not self.addresses

    @property
    def header(self) -> str:
        title = (self.chat_title or f"Chat {self.chat_id}")[:_MAX_TITLE_LENGTH]
        return (
            f"📋 Collected Addresses from {title}\n"
            f"({self.raw_count} ETH + {self.resolved_count} resolved ENS"
            f" = {self.unique_count} unique)\n\n"
        )

    def text(self) -> str:
        """The whole report as one string, ignoring size limits."""
        if self.empty:
            return EMPTY_REPORT
        return self.header + "\n".join(self.addresses)

    def blocks(self, limit: int = TELEGRAM_MESSAGE_LIMIT) -> list[str]:
        """Split the report into messages of at most *limit* characters.

        Splits happen between lines only. When more than one block is needed
        each one is prefixed with ``Part i/n:`` and the header stays in the
        first block.
        """
        full = self.text()
        if len(full) <= limit:
            return [full]
        chunks = split_lines(self.header, list(self.addresses), limit)
        logger.debug(
            "Report for chat=%d split into %d part(s)", self.chat_id, len(chunks)
        )
        return chunks

    def document(self) -> ExportDocument:
        return ExportDocument(
            filename=f"addresses_{self.chat_id}.txt",
            content=self.text().encode("utf-8"),
            caption=f"Collected from chat {self.chat_id}.",
        )


def split_lines(header: str, lines: list[str], limit: int) -> list[str]:
    """Pack *lines* into ``Part i/n`` blocks no longer than *limit*.

    *header* opens the first block and counts toward its size. Raises
    ``ValueError`` if a single line cannot fit in any block.
    """
    # Largest possible part count is one per line plus a header-only part
    worst = len(lines) + 1
    budget = limit - len(_PART_PREFIX.format(index=worst, total=worst))

    bodies: list[str] = []
    lead = header
    current: list[str] = []
    size = len(lead)

    for line in lines:
        if len(line) > budget:
            raise ValueError(f"Line of {len(line)} chars does not fit in {limit}")
        extra = len(line) + (1 if current else 0)
        if (current or lead) and size + extra > budget:
            bodies.append(lead + "\n".join(current))
            lead, current, size = "", [], 0
            extra = len(line)
        current.append(line)
        size += extra

    if current or lead:
        bodies.append(lead + "\n".join(current))

    total = len(bodies)
    return [
        _PART_PREFIX.format(index=i, total=total) + body
        for i, body in enumerate(bodies, start=1)
    ]


class ExportFormatter:
    """Turns a ``ChatState`` into a ``Report``.

    Pass *checksum* to render addresses in EIP-55 form; items it rejects
    are kept lowercase.
    """

    def __init__(self, checksum: ChecksumFn | None = None) -> None:
        self._checksum = checksum

    def build_report(self, state: ChatState, chat_title: str | None = None) -> Report:
        unique: set[str] = {addr.lower() for addr in state.addresses}
        resolved = state.resolved_addresses
        unique.update(addr.lower() for addr in resolved)

        addresses = [self._format(addr) for addr in unique]
        addresses.sort(key=str.lower)

        return Report(
            chat_id=state.chat_id,
            chat_title=chat_title,
            addresses=tuple(addresses),
            raw_count=len(state.addresses),
            resolved_count=len(resolved),
        )

    def _format(self, address: str) -> str:
        if self._checksum is None:
            return address
        try:
            return self._checksum(address)
        except ValueError:
            logger.warning("Could not checksum %s, keeping it as-is", address)
            return address
