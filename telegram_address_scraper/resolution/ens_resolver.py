"""ENS resolution over a web3 JSON-RPC provider."""

from __future__ import annotations

import asyncio
import logging

import aiohttp
from web3 import AsyncHTTPProvider, AsyncWeb3

from telegram_address_scraper.resolution.base_resolver import BaseResolver

logger = logging.getLogger(__name__)

_ZERO_ADDRESS = "0x" + "0" * 40


class EnsResolver(BaseResolver):
    """Resolves ENS names against mainnet through ``AsyncWeb3.ens``."""

    def __init__(self, provider_url: str, request_timeout: float = 10.0) -> None:
        self._provider_url = provider_url
        self._request_timeout = request_timeout
        self._session: aiohttp.ClientSession | None = None
        self._w3: AsyncWeb3 | None = None
        self._init_lock = asyncio.Lock()

    def _ready(self) -> bool:
        return (
            self._w3 is not None
            and self._session is not None
            and not self._session.closed
        )

    async def _get_web3(self) -> AsyncWeb3:
        if self._ready():
            return self._w3

        # Lookups arriving together share one session
        async with self._init_lock:
            if not self._ready():
                session = aiohttp.ClientSession(
                    timeout=aiohttp.ClientTimeout(total=self._request_timeout)
                )
                provider = AsyncHTTPProvider(self._provider_url)
                try:
                    await provider.cache_async_session(session)
                except BaseException:
                    await session.close()
                    raise
                self._session = session
                self._w3 = AsyncWeb3(provider)
                logger.debug("web3 provider ready")
        return self._w3

    async def resolve(self, name: str) -> str | None:
        w3 = await self._get_web3()
        address = await w3.ens.address(name)
        if not address or str(address).lower() == _ZERO_ADDRESS:
            return None
        return str(address)

    async def aclose(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self._w3 = None
