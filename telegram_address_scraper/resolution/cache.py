"""Per-chat name resolution with at most one lookup per name."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from telegram_address_scraper.core.models import ChatState, Resolution
from telegram_address_scraper.resolution.base_resolver import BaseResolver

logger = logging.getLogger(__name__)

# Called with every settled outcome, e.g. to feed metrics
SettleCallback = Callable[[Resolution], None]


class ResolutionCache:
    """Schedules background lookups and records their outcome in ``ChatState``.

    The message path never awaits a lookup. Each name is looked up once per
    chat; failures, timeouts and empty answers all settle as unresolved.
    Without a resolver every new name settles as unresolved immediately.
    """

    def __init__(
        self,
        resolver: BaseResolver | None = None,
        timeout_seconds: float = 10.0,
        on_settle: SettleCallback | None = None,
    ) -> None:
        self._resolver = resolver
        self._timeout = timeout_seconds
        self._on_settle = on_settle
        self._tasks: set[asyncio.Task[Any]] = set()
        self.resolved_total = 0
        self.unresolved_total = 0

    @property
    def enabled(self) -> bool:
        return self._resolver is not None

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def lookup_or_schedule(self, state: ChatState, name: str) -> Resolution:
        """Return the stored outcome for *name*, scheduling a lookup if new."""
        key = name.lower()
        existing = state.names.get(key)
        if existing is not None:
            return existing

        # Stored before any await so a repeat in the next message is a hit
        state.names[key] = Resolution.pending()

        if self._resolver is None:
            return self._settle(state, key, None)

        task = asyncio.create_task(
            self._resolve(state, key), name=f"resolve:{key}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return state.names[key]

    async def _resolve(self, state: ChatState, name: str) -> None:
        assert self._resolver is not None
        address: str | None = None
        try:
            address = await asyncio.wait_for(
                self._resolver.resolve(name), timeout=self._timeout
            )
        except asyncio.CancelledError:
            self._settle(state, name, None)
            raise
        except asyncio.TimeoutError:
            logger.debug("Resolution of %s timed out after %.1fs", name, self._timeout)
        except Exception as exc:
            logger.debug("Resolution of %s failed: %s", name, exc)
        self._settle(state, name, address)

    def _settle(self, state: ChatState, name: str, address: str | None) -> Resolution:
        outcome = state.settle(name, address)
        if outcome.is_resolved:
            self.resolved_total += 1
            logger.info(
                "Resolved %s -> %s in chat=%d", name, outcome.address, state.chat_id
            )
        else:
            self.unresolved_total += 1
            logger.debug("No address for %s in chat=%d", name, state.chat_id)
        if self._on_settle is not None:
            self._on_settle(outcome)
        return outcome

    async def aclose(self, drain_timeout: float = 5.0) -> None:
        """Wait for in-flight lookups, then cancel whatever is left."""
        if self._tasks:
            pending_tasks = set(self._tasks)
            logger.info("Draining %d in-flight resolution(s)", len(pending_tasks))
            _, still_running = await asyncio.wait(pending_tasks, timeout=drain_timeout)
            for task in still_running:
                task.cancel()
            if still_running:
                await asyncio.gather(*still_running, return_exceptions=True)
                logger.warning("Cancelled %d resolution(s) on shutdown", len(still_running))

        if self._resolver is not None:
            await self._resolver.aclose()
