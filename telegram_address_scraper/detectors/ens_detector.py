"""ENS name detector (``alice.eth``, ``pay.alice.eth``)."""

from __future__ import annotations

import logging
import re

from telegram_address_scraper.core.models import Identifier
from telegram_address_scraper.core.types import IdentifierKind
from telegram_address_scraper.detectors.base_detector import BaseDetector

logger = logging.getLogger(__name__)

ENS_SUFFIX = "eth"

# One or more dot-separated labels, then the reserved suffix
_ENS_PATTERN = re.compile(
    rf"\b([a-z0-9-]+(?:\.[a-z0-9-]+)*\.{ENS_SUFFIX})\b",
    re.IGNORECASE,
)


class EnsDetector(BaseDetector):
    """Detect ENS names, subdomains included."""

    @property
    def kind(self) -> IdentifierKind:
        return IdentifierKind.NAME

    def extract(self, text: str) -> list[Identifier]:
        matches: list[Identifier] = []
        seen: set[str] = set()

        for m in _ENS_PATTERN.finditer(text):
            name = m.group(1).lower()
            if name in seen:
                continue
            seen.add(name)
            matches.append(Identifier(self.kind, name))

        if matches:
            logger.debug("ENS detector found %d name(s)", len(matches))
        return matches
