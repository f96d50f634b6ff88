"""Core models, types, and utilities."""

from telegram_address_scraper.core.errors import DeliveryError, ScraperError
from telegram_address_scraper.core.models import (
    ChatState,
    ChatStatus,
    CollectionResult,
    Identifier,
    InboundText,
    MembershipChange,
    Resolution,
)
from telegram_address_scraper.core.types import (
    DetectorRegistry,
    ExportMode,
    IdentifierKind,
    ResolutionMode,
    ResolutionState,
)

__all__ = [
    "ChatState",
    "ChatStatus",
    "CollectionResult",
    "DeliveryError",
    "DetectorRegistry",
    "ExportMode",
    "Identifier",
    "IdentifierKind",
    "InboundText",
    "MembershipChange",
    "Resolution",
    "ResolutionMode",
    "ResolutionState",
    "ScraperError",
]
