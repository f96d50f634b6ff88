"""Main application entry point: orchestrates all components.

Usage:
    python -m telegram_address_scraper
    python -m telegram_address_scraper --debug
    python -m telegram_address_scraper --dry-run
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import time
from typing import Any

from aiohttp import web
from prometheus_client import Counter, Gauge, start_http_server

from telegram_address_scraper.collector import CollectionPipeline
from telegram_address_scraper.commands import CommandRouter
from telegram_address_scraper.commands.router import ReplyCallback
from telegram_address_scraper.config import AppConfig
from telegram_address_scraper.core.models import (
    HealthStatus,
    InboundText,
    MembershipChange,
    Resolution,
)
from telegram_address_scraper.core.types import DetectorRegistry
from telegram_address_scraper.core.utils import setup_logging
from telegram_address_scraper.detectors import EnsDetector, EvmDetector
from telegram_address_scraper.export import ExportFormatter
from telegram_address_scraper.listener import TelegramListener
from telegram_address_scraper.notifier import MessageSender, OperatorNotifier
from telegram_address_scraper.resolution import (
    EnsResolver,
    ResolutionCache,
    checksum_address,
)
from telegram_address_scraper.storage import MemoryChatStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Prometheus metrics
# ---------------------------------------------------------------------------
MESSAGES_TOTAL = Counter(
    "scraper_messages_total",
    "Total text messages and channel posts received",
    ["kind"],
)
IDENTIFIERS_TOTAL = Counter(
    "scraper_identifiers_total",
    "Identifiers new to their chat",
    ["kind"],
)
EXPORTS_TOTAL = Counter(
    "scraper_exports_total",
    "Collected lists sent to the operator",
    ["outcome"],
)
RESOLUTIONS_TOTAL = Counter(
    "scraper_resolutions_total",
    "ENS lookups settled",
    ["outcome"],
)
CHATS_GAUGE = Gauge(
    "scraper_chats_tracked",
    "Chats with collection state",
)
RESOLUTIONS_IN_FLIGHT = Gauge(
    "scraper_resolutions_in_flight",
    "ENS lookups currently running",
)


def _count_resolution(outcome: Resolution) -> None:
    RESOLUTIONS_TOTAL.labels(outcome=str(outcome.state)).inc()


def _count_export(delivered: bool) -> None:
    EXPORTS_TOTAL.labels(outcome="sent" if delivered else "failed").inc()


class AddressScraperApp:
    """Top-level orchestrator: wires listener -> commands/pipeline -> store -> export -> notifier."""

    def __init__(self, config: AppConfig, dry_run: bool = False) -> None:
        self._config = config
        self._dry_run = dry_run
        self._start_time = time.monotonic()
        self._mode = config.resolver.mode

        self._store = MemoryChatStore()
        self._detectors: DetectorRegistry = [
            EvmDetector(),
            EnsDetector(),
        ]
        resolver = (
            EnsResolver(
                config.resolver.provider_url,
                request_timeout=config.resolver.timeout_seconds,
            )
            if self._mode.resolves_names
            else None
        )
        self._cache = ResolutionCache(
            resolver,
            timeout_seconds=config.resolver.timeout_seconds,
            on_settle=_count_resolution,
        )
        self._pipeline = CollectionPipeline(self._store, self._detectors, self._cache)
        self._formatter = ExportFormatter(
            checksum=checksum_address if self._mode.checksums else None
        )

        # Components that need the Telegram client (initialized in start())
        self._listener: TelegramListener | None = None
        self._router: CommandRouter | None = None

        # Background tasks
        self._tasks: list[asyncio.Task[Any]] = []
        self._stopped = False

        # Counters for health
        self._messages_processed = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Initialize all components and begin processing."""
        logger.info(
            "Starting address scraper (dry_run=%s, resolution=%s)",
            self._dry_run,
            self._mode,
        )

        # 1. Telegram listener
        self._listener = TelegramListener(
            config=self._config.telegram,
            on_text=self._on_text,
            on_membership=self._on_membership,
        )
        client = await self._listener.start()

        # 2. Operator delivery + commands (need the Telethon client)
        self.init_router(client, self._listener.reply, self._listener.username)

        # 3. Prometheus metrics endpoint
        if self._config.metrics.enabled:
            CHATS_GAUGE.set_function(lambda: len(self._store))
            RESOLUTIONS_IN_FLIGHT.set_function(lambda: self._cache.in_flight)
            start_http_server(self._config.metrics.port)
            logger.info(
                "Prometheus metrics on :%d/metrics",
                self._config.metrics.port,
            )

        # 4. Health check endpoint
        if self._config.health.enabled:
            self._tasks.append(
                asyncio.create_task(self._health_server(), name="health")
            )

        logger.info(
            "Address scraper fully started, %d detectors loaded: %s",
            len(self._detectors),
            ", ".join(str(d.kind) for d in self._detectors),
        )

        # Block until disconnect
        await self._listener.run_until_disconnected()

    def init_router(
        self,
        client: MessageSender,
        reply: ReplyCallback,
        bot_username: str | None = None,
    ) -> CommandRouter:
        """Create the command router around a connected client."""
        notifier = OperatorNotifier(
            client=client,
            owner_id=self._config.telegram.owner_id,
            config=self._config.export,
            dry_run=self._dry_run,
        )
        self._router = CommandRouter(
            store=self._store,
            formatter=self._formatter,
            notifier=notifier,
            reply=reply,
            owner_id=self._config.telegram.owner_id,
            allow_channel_commands=self._config.commands.allow_channel_commands,
            bot_username=bot_username,
            on_export=_count_export,
        )
        return self._router

    async def shutdown(self) -> None:
        """Graceful shutdown: drain lookups, cancel tasks, disconnect."""
        if self._stopped:
            return
        self._stopped = True
        logger.info("Shutting down address scraper...")

        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

        await self._cache.aclose(self._config.resolver.drain_timeout_seconds)

        if self._listener:
            await self._listener.stop()

        logger.info("Shutdown complete")

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    async def _on_text(self, event: InboundText) -> None:
        """Route a message to the command router or the collection pipeline."""
        assert self._router is not None
        self._messages_processed += 1
        MESSAGES_TOTAL.labels(kind="post" if event.is_channel_post else "message").inc()

        if await self._router.dispatch(event):
            return

        result = self._pipeline.on_text(event.chat_id, event.text)
        if result.new_addresses:
            IDENTIFIERS_TOTAL.labels(kind="address").inc(result.new_addresses)
        if result.new_names:
            IDENTIFIERS_TOTAL.labels(kind="name").inc(result.new_names)

    async def _on_membership(self, event: MembershipChange) -> None:
        self._pipeline.on_membership_change(event)

    # ------------------------------------------------------------------
    # Health check HTTP server
    # ------------------------------------------------------------------

    async def _health_server(self) -> None:
        """Minimal HTTP health check endpoint on configured port."""

        async def handle_health(_request: web.Request) -> web.Response:
            status = self.get_health()
            code = 200 if status.telegram_connected else 503
            return web.json_response(
                {
                    "status": "ok" if code == 200 else "degraded",
                    "uptime_seconds": round(status.uptime_seconds, 1),
                    "messages_processed": status.messages_processed,
                    "chats_tracked": status.chats_tracked,
                    "chats_watching": status.chats_watching,
                    "addresses_collected": status.addresses_collected,
                    "names_collected": status.names_collected,
                    "resolutions_in_flight": status.resolutions_in_flight,
                    "resolutions_resolved": status.resolutions_resolved,
                    "resolutions_unresolved": status.resolutions_unresolved,
                    "exports_sent": status.exports_sent,
                    "export_failures": status.export_failures,
                    "telegram_connected": status.telegram_connected,
                    "resolution_mode": status.resolution_mode,
                    "detectors": status.detectors_loaded,
                },
                status=code,
            )

        app = web.Application()
        app.router.add_get("/health", handle_health)
        app.router.add_get("/", handle_health)

        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, "0.0.0.0", self._config.health.port)
        await site.start()
        logger.info("Health endpoint on :%d/health", self._config.health.port)

        # Keep running until cancelled
        try:
            while True:
                await asyncio.sleep(3600)
        except asyncio.CancelledError:
            await runner.cleanup()

    def get_health(self) -> HealthStatus:
        chats = self._store.chats()
        exports_sent = self._router.exports_sent if self._router else 0
        export_failures = self._router.export_failures if self._router else 0
        return HealthStatus(
            uptime_seconds=time.monotonic() - self._start_time,
            messages_processed=self._messages_processed,
            chats_tracked=len(chats),
            chats_watching=sum(1 for c in chats if c.watching),
            addresses_collected=sum(len(c.addresses) for c in chats),
            names_collected=sum(len(c.names) for c in chats),
            resolutions_in_flight=self._cache.in_flight,
            resolutions_resolved=self._cache.resolved_total,
            resolutions_unresolved=self._cache.unresolved_total,
            exports_sent=exports_sent,
            export_failures=export_failures,
            telegram_connected=(
                self._listener is not None and self._listener.is_connected()
            ),
            resolution_mode=str(self._mode),
            detectors_loaded=[str(d.kind) for d in self._detectors],
        )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Telegram address scraper: collects EVM addresses and ENS names"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log operator deliveries instead of sending them",
    )
    return parser.parse_args()


async def _main() -> None:
    args = parse_args()

    config = AppConfig()

    # Override log level if --debug
    log_level = "DEBUG" if args.debug else config.log_level
    setup_logging(level=log_level, json_format=config.log_json)

    config.validate()

    app = AddressScraperApp(config=config, dry_run=args.dry_run)

    # Graceful shutdown on SIGINT / SIGTERM
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, lambda: asyncio.create_task(app.shutdown()))

    try:
        await app.start()
    except (KeyboardInterrupt, SystemExit):
        pass
    finally:
        await app.shutdown()


def main() -> None:
    asyncio.run(_main())


if __name__ == "__main__":
    main()
