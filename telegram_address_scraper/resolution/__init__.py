"""Name resolution and address normalization."""

from telegram_address_scraper.resolution.base_resolver import BaseResolver
from telegram_address_scraper.resolution.cache import ResolutionCache
from telegram_address_scraper.resolution.checksum import checksum_address
from telegram_address_scraper.resolution.ens_resolver import EnsResolver

__all__ = ["BaseResolver", "EnsResolver", "ResolutionCache", "checksum_address"]
