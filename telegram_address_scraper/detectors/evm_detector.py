"""EVM address detector (Ethereum and every 0x-style chain)."""

from __future__ import annotations

import logging
import re

from telegram_address_scraper.core.models import Identifier
from telegram_address_scraper.core.types import IdentifierKind
from telegram_address_scraper.detectors.base_detector import BaseDetector

logger = logging.getLogger(__name__)

# Standard EVM address: 0x followed by exactly 40 hex characters
_EVM_PATTERN = re.compile(r"\b(0x[0-9a-f]{40})\b", re.IGNORECASE)


class EvmDetector(BaseDetector):
    """Detect EVM addresses (0x + 40 hex)."""

    @property
    def kind(self) -> IdentifierKind:
        return IdentifierKind.ADDRESS

    def extract(self, text: str) -> list[Identifier]:
        matches: list[Identifier] = []
        seen: set[str] = set()

        for m in _EVM_PATTERN.finditer(text):
            # EVM addresses are case-insensitive
            normalized = m.group(1).lower()
            if normalized in seen:
                continue
            seen.add(normalized)
            matches.append(Identifier(self.kind, normalized))

        if matches:
            logger.debug("EVM detector found %d address(es)", len(matches))
        return matches
