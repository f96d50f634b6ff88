"""Abstract base class for identifier detectors."""

from __future__ import annotations

from abc import ABC, abstractmethod

from telegram_address_scraper.core.models import Identifier
from telegram_address_scraper.core.types import IdentifierKind


class BaseDetector(ABC):
    """Every detector must implement ``extract``.

    To add a new identifier family:
        1. Create ``myfamily_detector.py`` in this package.
        2. Subclass ``BaseDetector``.
        3. Implement ``extract()`` and ``kind``.
        4. Register the detector in ``app.py``.
    """

    @property
    @abstractmethod
    def kind(self) -> IdentifierKind:
        """Return the identifier family this detector produces."""
        ...

    @abstractmethod
    def extract(self, text: str) -> list[Identifier]:
        """Extract all identifiers from *text*.

        Parameters
        ----------
        text:
            Raw message text.

        Returns
        -------
        list[Identifier]
            Lowercased identifiers in order of first occurrence, without
            duplicates. Empty when nothing matches.
        """
        ...
