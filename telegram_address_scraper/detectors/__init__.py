"""Pluggable identifier detectors."""

from telegram_address_scraper.detectors.base_detector import BaseDetector
from telegram_address_scraper.detectors.ens_detector import EnsDetector
from telegram_address_scraper.detectors.evm_detector import EvmDetector

__all__ = ["BaseDetector", "EnsDetector", "EvmDetector"]
