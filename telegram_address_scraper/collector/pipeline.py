"""Merges identifiers from each inbound message into the chat's state."""

from __future__ import annotations

import logging

from telegram_address_scraper.core.models import CollectionResult, MembershipChange
from telegram_address_scraper.core.types import DetectorRegistry, IdentifierKind
from telegram_address_scraper.resolution.cache import ResolutionCache
from telegram_address_scraper.storage.base_store import BaseChatStore

logger = logging.getLogger(__name__)

_ABSENT_STATUSES = frozenset({"left", "kicked"})
_PRESENT_STATUSES = frozenset({"member", "administrator", "creator"})
_WATCHABLE_CHAT_TYPES = frozenset({"group", "supergroup", "channel"})


class CollectionPipeline:
    """Runs the detectors over watched chats and records what they find.

    Everything here is synchronous; name lookups are handed to the
    ``ResolutionCache`` and never awaited.
    """

    def __init__(
        self,
        store: BaseChatStore,
        detectors: DetectorRegistry,
        cache: ResolutionCache,
    ) -> None:
        self._store = store
        self._detectors = detectors
        self._cache = cache

    def on_text(self, chat_id: int, text: str) -> CollectionResult:
        """Collect identifiers from *text* if *chat_id* is being watched."""
        state = self._store.ensure(chat_id)
        if not state.watching or not text:
            return CollectionResult()

        found_addresses = 0
        found_names = 0
        new_addresses = 0
        new_names = 0

        for detector in self._detectors:
            for identifier in detector.extract(text):
                if identifier.kind is IdentifierKind.ADDRESS:
                    found_addresses += 1
                    if state.add_address(identifier.value):
                        new_addresses += 1
                elif identifier.kind is IdentifierKind.NAME:
                    found_names += 1
                    known = identifier.value in state.names
                    self._cache.lookup_or_schedule(state, identifier.value)
                    if not known:
                        new_names += 1

        if found_addresses or found_names:
            logger.info(
                "Chat %d: found %d address(es) (%d new), %d name(s) (%d new)",
                chat_id,
                found_addresses,
                new_addresses,
                found_names,
                new_names,
            )
        return CollectionResult(new_addresses=new_addresses, new_names=new_names)

    def on_membership_change(self, event: MembershipChange) -> bool:
        """Start watching a group or channel the bot was just added to.

        Returns True when watching was switched on.
        """
        was_absent = event.previous_status is None or event.previous_status in _ABSENT_STATUSES
        is_present = event.new_status in _PRESENT_STATUSES
        if not (was_absent and is_present and event.chat_type in _WATCHABLE_CHAT_TYPES):
            return False

        self._store.set_watching(event.chat_id, True)
        logger.info(
            "Added to %s %d (%s). Auto-started watching.",
            event.chat_type,
            event.chat_id,
            event.chat_title or "untitled",
        )
        return True
