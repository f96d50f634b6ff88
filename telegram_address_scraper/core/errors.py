"""Exception hierarchy."""


class ScraperError(Exception):
    """Base class for errors raised by the scraper."""


class DeliveryError(ScraperError):
    """The operator could not be reached by direct message."""
