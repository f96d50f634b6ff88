"""Domain models used across the application."""

from __future__ import annotations

from dataclasses import dataclass, field

from telegram_address_scraper.core.types import IdentifierKind, ResolutionState


@dataclass(frozen=True, slots=True)
class Identifier:
    """A single identifier extracted from message text (already lowercased)."""

    kind: IdentifierKind
    value: str


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of resolving one name."""

    state: ResolutionState
    address: str | None = None

    @classmethod
    def pending(cls) -> Resolution:
        return cls(ResolutionState.PENDING)

    @classmethod
    def resolved(cls, address: str) -> Resolution:
        return cls(ResolutionState.RESOLVED, address)

    @classmethod
    def unresolved(cls) -> Resolution:
        return cls(ResolutionState.UNRESOLVED)

    @property
    def is_pending(self) -> bool:
        return self.state is ResolutionState.PENDING

    @property
    def is_resolved(self) -> bool:
        return self.state is ResolutionState.RESOLVED


@dataclass(slots=True)
class ChatState:
    """Everything collected for one chat.

    ``names`` keeps insertion order. An entry is never removed and its
    outcome leaves ``PENDING`` at most once.
    """

    chat_id: int
    watching: bool = False
    addresses: set[str] = field(default_factory=set)
    names: dict[str, Resolution] = field(default_factory=dict)

    def add_address(self, address: str) -> bool:
        """Add a lowercase address. Return True if it was new."""
        normalized = address.lower()
        if normalized in self.addresses:
            return False
        self.addresses.add(normalized)
        return True

    def settle(self, name: str, address: str | None) -> Resolution:
        """Move a pending name to its terminal outcome.

        Names that already settled keep their first outcome.
        """
        current = self.names.get(name)
        if current is not None and not current.is_pending:
            return current
        outcome = (
            Resolution.resolved(address) if address else Resolution.unresolved()
        )
        self.names[name] = outcome
        return outcome

    @property
    def resolved_addresses(self) -> list[str]:
        return [r.address for r in self.names.values() if r.is_resolved and r.address]


@dataclass(frozen=True, slots=True)
class ChatStatus:
    """Counters reported by ``/status``."""

    watching: bool
    address_count: int
    name_count: int
    resolved_count: int = 0
    pending_count: int = 0

    @property
    def total(self) -> int:
        return self.address_count + self.name_count


@dataclass(frozen=True, slots=True)
class InboundText:
    """A text message or channel post, independent of the transport.

    ``sender_id`` is None for channel posts.
    """

    chat_id: int
    sender_id: int | None
    text: str
    chat_title: str | None = None
    is_channel_post: bool = False


@dataclass(frozen=True, slots=True)
class MembershipChange:
    """The bot's own membership in a chat changed."""

    chat_id: int
    chat_type: str
    previous_status: str | None
    new_status: str
    chat_title: str | None = None


@dataclass(frozen=True, slots=True)
class CollectionResult:
    """Identifiers that were new to the chat after one message."""

    new_addresses: int = 0
    new_names: int = 0

    @property
    def empty(self) -> bool:
        return not (self.new_addresses or self.new_names)


@dataclass(slots=True)
class HealthStatus:
    """Application health snapshot."""

    uptime_seconds: float = 0.0
    messages_processed: int = 0
    chats_tracked: int = 0
    chats_watching: int = 0
    addresses_collected: int = 0
    names_collected: int = 0
    resolutions_in_flight: int = 0
    resolutions_resolved: int = 0
    resolutions_unresolved: int = 0
    exports_sent: int = 0
    export_failures: int = 0
    telegram_connected: bool = False
    resolution_mode: str = ""
    detectors_loaded: list[str] = field(default_factory=list)
