"""
Contract for the services that turn addresses into positions.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional
from .models import GeoLocation


class ProviderType(Enum):
    OSM = "osm"
    HERE = "here"


class GeoProvider(ABC):
    """
    Address lookup service.

    "Nothing matched" is an empty list (or ``None`` for a reverse lookup).
    A service that cannot be reached raises ``GeocodingUnavailableError``,
    so callers can tell the two apart.
    """

    @abstractmethod
    async def search(self, address: str, limit: int = 5) -> List[GeoLocation]:
        """Candidates for a free-text address, best match first."""

    @abstractmethod
    async def reverse_geocode(self, latitude: float, longitude: float) -> Optional[GeoLocation]:
        """Address label for a position, or ``None`` when the service has none."""

    async def geocode(self, address: str) -> Optional[GeoLocation]:
        candidates = await self.search(address, limit=1)
        return candidates[0] if candidates else None

    @property
    @abstractmethod
    def provider_type(self) -> ProviderType:
        ...

    @property
    @abstractmethod
    def rate_limit_per_second(self) -> float:
        """Requests per second the service's usage policy allows."""
