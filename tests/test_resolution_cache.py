"""Tests for the per-chat resolution cache."""

from __future__ import annotations

import pytest

from conftest import ALICE_ADDR, FakeResolver, settle_background
from telegram_address_scraper.core.models import ChatState, Resolution
from telegram_address_scraper.core.types import ResolutionState
from telegram_address_scraper.resolution.cache import ResolutionCache


class TestLookupOrSchedule:
    @pytest.mark.asyncio
    async def test_new_name_is_pending_then_resolved(
        self, resolver: FakeResolver
    ) -> None:
        cache = ResolutionCache(resolver)
        state = ChatState(chat_id=1)

        outcome = cache.lookup_or_schedule(state, "alice.eth")
        assert outcome.state is ResolutionState.PENDING
        assert state.names["alice.eth"].is_pending

        await settle_background()
        assert state.names["alice.eth"] == Resolution.resolved(ALICE_ADDR)
        assert cache.resolved_total == 1

    @pytest.mark.asyncio
    async def test_name_is_lowercased(self, resolver: FakeResolver) -> None:
        cache = ResolutionCache(resolver)
        state = ChatState(chat_id=1)
        cache.lookup_or_schedule(state, "Alice.ETH")
        await settle_background()
        assert list(state.names) == ["alice.eth"]

    @pytest.mark.asyncio
    async def test_at_most_one_lookup_per_name(self, resolver: FakeResolver) -> None:
        cache = ResolutionCache(resolver)
        state = ChatState(chat_id=1)

        cache.lookup_or_schedule(state, "alice.eth")
        cache.lookup_or_schedule(state, "alice.eth")
        await settle_background()
        cache.lookup_or_schedule(state, "alice.eth")
        await settle_background()

        assert resolver.calls == ["alice.eth"]

    @pytest.mark.asyncio
    async def test_each_chat_resolves_independently(
        self, resolver: FakeResolver
    ) -> None:
        cache = ResolutionCache(resolver)
        cache.lookup_or_schedule(ChatState(chat_id=1), "alice.eth")
        cache.lookup_or_schedule(ChatState(chat_id=2), "alice.eth")
        await settle_background()
        assert resolver.calls == ["alice.eth", "alice.eth"]

    @pytest.mark.asyncio
    async def test_cached_outcome_returned(self, resolver: FakeResolver) -> None:
        cache = ResolutionCache(resolver)
        state = ChatState(chat_id=1)
        cache.lookup_or_schedule(state, "alice.eth")
        await settle_background()
        assert cache.lookup_or_schedule(state, "alice.eth").address == ALICE_ADDR

    @pytest.mark.asyncio
    async def test_missing_record_is_unresolved(self, resolver: FakeResolver) -> None:
        cache = ResolutionCache(resolver)
        state = ChatState(chat_id=1)
        cache.lookup_or_schedule(state, "nobody.eth")
        await settle_background()
        assert state.names["nobody.eth"].state is ResolutionState.UNRESOLVED
        assert cache.unresolved_total == 1

    @pytest.mark.asyncio
    async def test_backend_error_is_swallowed(self) -> None:
        resolver = FakeResolver(failing={"broken.eth"})
        cache = ResolutionCache(resolver)
        state = ChatState(chat_id=1)
        cache.lookup_or_schedule(state, "broken.eth")
        await settle_background()
        assert state.names["broken.eth"].state is ResolutionState.UNRESOLVED

    @pytest.mark.asyncio
    async def test_timeout_is_unresolved(self) -> None:
        resolver = FakeResolver(records={"slow.eth": ALICE_ADDR}, delay=5.0)
        cache = ResolutionCache(resolver, timeout_seconds=0.01)
        state = ChatState(chat_id=1)
        cache.lookup_or_schedule(state, "slow.eth")
        await settle_background()
        assert state.names["slow.eth"].state is ResolutionState.UNRESOLVED
        assert cache.in_flight == 0

    def test_disabled_backend_settles_immediately(self) -> None:
        cache = ResolutionCache(None)
        state = ChatState(chat_id=1)
        outcome = cache.lookup_or_schedule(state, "alice.eth")
        assert outcome.state is ResolutionState.UNRESOLVED
        assert not cache.enabled
        assert cache.in_flight == 0

    @pytest.mark.asyncio
    async def test_outcomes_reported_to_callback(self, resolver: FakeResolver) -> None:
        seen: list[ResolutionState] = []
        cache = ResolutionCache(resolver, on_settle=lambda r: seen.append(r.state))
        state = ChatState(chat_id=1)

        cache.lookup_or_schedule(state, "alice.eth")
        cache.lookup_or_schedule(state, "nobody.eth")
        await settle_background()

        assert sorted(seen) == [ResolutionState.RESOLVED, ResolutionState.UNRESOLVED]
        assert (cache.resolved_total, cache.unresolved_total) == (1, 1)


class TestShutdown:
    @pytest.mark.asyncio
    async def test_aclose_waits_for_quick_lookups(
        self, resolver: FakeResolver
    ) -> None:
        cache = ResolutionCache(resolver)
        state = ChatState(chat_id=1)
        cache.lookup_or_schedule(state, "alice.eth")
        await cache.aclose(drain_timeout=1.0)
        assert state.names["alice.eth"].is_resolved
        assert resolver.closed

    @pytest.mark.asyncio
    async def test_aclose_cancels_hung_lookups(self) -> None:
        resolver = FakeResolver(records={"slow.eth": ALICE_ADDR}, delay=10.0)
        cache = ResolutionCache(resolver, timeout_seconds=30.0)
        state = ChatState(chat_id=1)
        cache.lookup_or_schedule(state, "slow.eth")

        await cache.aclose(drain_timeout=0.01)

        assert cache.in_flight == 0
        assert state.names["slow.eth"].state is ResolutionState.UNRESOLVED


class TestSettle:
    def test_settles_once(self) -> None:
        state = ChatState(chat_id=1)
        state.names["alice.eth"] = Resolution.pending()
        state.settle("alice.eth", ALICE_ADDR)
        state.settle("alice.eth", None)
        assert state.names["alice.eth"].address == ALICE_ADDR

    def test_unresolved_is_terminal(self) -> None:
        state = ChatState(chat_id=1)
        state.names["alice.eth"] = Resolution.pending()
        state.settle("alice.eth", None)
        state.settle("alice.eth", ALICE_ADDR)
        assert state.names["alice.eth"].state is ResolutionState.UNRESOLVED
