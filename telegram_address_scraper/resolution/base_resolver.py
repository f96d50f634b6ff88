"""Abstract name-resolution backend."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseResolver(ABC):
    """Contract for name -> address backends."""

    @abstractmethod
    async def resolve(self, name: str) -> str | None:
        """Return the address *name* points at, or None.

        May raise; callers treat any error like a missing record.
        """
        ...

    async def aclose(self) -> None:
        """Release network resources."""
