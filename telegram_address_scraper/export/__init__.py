"""Report building."""

from telegram_address_scraper.export.formatter import (
    EMPTY_REPORT,
    ExportDocument,
    ExportFormatter,
    Report,
)

__all__ = ["EMPTY_REPORT", "ExportDocument", "ExportFormatter", "Report"]
