"""Shared type aliases and enumerations."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from telegram_address_scraper.detectors.base_detector import BaseDetector


class IdentifierKind(str, Enum):
    """Families of identifiers picked out of chat text."""

    ADDRESS = "address"
    NAME = "name"

    def __str__(self) -> str:
        return self.value


class ResolutionState(str, Enum):
    """Lifecycle of a single name lookup."""

    PENDING = "pending"
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"

    def __str__(self) -> str:
        return self.value


class ResolutionMode(str, Enum):
    """Which address capabilities are switched on at startup."""

    DISABLED = "disabled"
    ADDRESS_ONLY = "address_only"
    FULL = "full"

    @property
    def checksums(self) -> bool:
        return self is not ResolutionMode.DISABLED

    @property
    def resolves_names(self) -> bool:
        return self is ResolutionMode.FULL

    def __str__(self) -> str:
        return self.value


class ExportMode(str, Enum):
    """Delivery format for ``/makelist``."""

    TEXT = "text"
    DOCUMENT = "document"

    def __str__(self) -> str:
        return self.value


# A registry is simply a list of detector instances the pipeline iterates.
DetectorRegistry = list["BaseDetector"]
