"""Per-message collection."""

from telegram_address_scraper.collector.pipeline import CollectionPipeline

__all__ = ["CollectionPipeline"]
