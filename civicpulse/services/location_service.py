"""
Position resolution for report drafts.

A draft's position comes from exactly one source: a typed "lat,lng" pair, a
point picked on the map, the device geolocation, or an address looked up in
the geocoding provider. Address lookups always take the first candidate.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from civicpulse.models.report_models import (
    CURRENT_LOCATION_LABEL,
    PINNED_LOCATION_LABEL,
    LocationInput,
    LocationStrategy,
    Position,
    ResolvedLocation,
)
from civicpulse.providers.base import GeoProvider
from civicpulse.providers.models import GeoLocation
from civicpulse.services.errors import (
    GeocodingUnavailableError,
    InvalidCoordinatesError,
    LocationNotFoundError,
    LocationUnavailableError,
    MissingFieldError,
)

logger = logging.getLogger(__name__)


def parse_coordinates(text: Optional[str]) -> Position:
    """
    Parse a "lat,lng" pair.

    Raises:
        InvalidCoordinatesError: if the text is not two finite numbers
            separated by a comma, or if they fall outside the valid ranges
    """
    parts = (text or "").split(",")
    if len(parts) != 2:
        raise InvalidCoordinatesError("Coordinates must be given as 'lat,lng'")

    try:
        latitude = float(parts[0].strip())
        longitude = float(parts[1].strip())
    except ValueError:
        raise InvalidCoordinatesError(f"Invalid coordinates: '{text}'") from None

    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise InvalidCoordinatesError(f"Invalid coordinates: '{text}'")
    if not -90 <= latitude <= 90:
        raise InvalidCoordinatesError("Latitude must be between -90 and 90")
    if not -180 <= longitude <= 180:
        raise InvalidCoordinatesError("Longitude must be between -180 and 180")

    return Position(latitude=latitude, longitude=longitude)


def validate_position(latitude: float, longitude: float) -> Position:
    """Range-check a coordinate pair given as numbers."""
    return parse_coordinates(f"{latitude},{longitude}")


class GeolocationSource(ABC):
    """The host device's current position."""

    @abstractmethod
    async def current_position(self) -> Position:
        """
        Ask the device for its position.

        Raises:
            LocationUnavailableError: if permission is denied or no fix is available
        """
        pass


class FixedGeolocationSource(GeolocationSource):
    """A device whose position is known up front (kiosks, tests, configured defaults)."""

    def __init__(self, position: Optional[Position] = None):
        self._position = position

    async def current_position(self) -> Position:
        if self._position is None:
            raise LocationUnavailableError()
        return self._position


class LocationResolver:
    """Resolves a draft's ``LocationInput`` into a labelled position."""

    def __init__(
        self,
        provider: Optional[GeoProvider] = None,
        geolocation: Optional[GeolocationSource] = None,
        search_limit: int = 5,
        provider_factory: Optional[Callable[[], GeoProvider]] = None,
    ):
        # The factory runs on the first address lookup only
        self._provider = provider
        self._provider_factory = provider_factory
        self._geolocation = geolocation
        self._search_limit = search_limit

    async def resolve(self, location: Optional[LocationInput]) -> ResolvedLocation:
        """
        Resolve a position source.

        Raises:
            MissingFieldError: no position source was chosen
            InvalidCoordinatesError: direct entry could not be parsed
            LocationUnavailableError: device geolocation failed
            LocationNotFoundError: the address matched nothing
            GeocodingUnavailableError: the geocoding provider is unreachable
        """
        if location is None:
            raise MissingFieldError("location")

        if location.strategy == LocationStrategy.DIRECT:
            position = parse_coordinates(location.text)
            return ResolvedLocation(position=position, label=PINNED_LOCATION_LABEL)

        if location.strategy == LocationStrategy.PIN:
            if location.position is None:
                raise MissingFieldError("location")
            return ResolvedLocation(position=location.position, label=PINNED_LOCATION_LABEL)

        if location.strategy == LocationStrategy.DEVICE:
            return await self._resolve_device()

        return await self._resolve_address(location.text)

    async def search(self, address: str) -> List[GeoLocation]:
        """Ask the geocoding provider for candidates matching an address."""
        provider = self._get_provider()
        candidates = await provider.search(address, limit=self._search_limit)
        logger.debug(f"📍 {len(candidates)} candidate(s) for '{address}'")
        return candidates

    def _get_provider(self) -> GeoProvider:
        if self._provider is None and self._provider_factory is not None:
            try:
                self._provider = self._provider_factory()
            except ValueError as e:
                logger.error(f"❌ Geocoding provider unavailable: {e}")
                raise GeocodingUnavailableError("Geocoding provider is not configured") from e
        if self._provider is None:
            raise GeocodingUnavailableError("No geocoding provider configured")
        return self._provider

    async def _resolve_device(self) -> ResolvedLocation:
        if self._geolocation is None:
            raise LocationUnavailableError()
        try:
            position = await self._geolocation.current_position()
        except (PermissionError, TimeoutError, OSError) as e:
            logger.warning(f"Device geolocation failed: {e}")
            raise LocationUnavailableError() from e
        return ResolvedLocation(position=position, label=CURRENT_LOCATION_LABEL)

    async def _resolve_address(self, address: Optional[str]) -> ResolvedLocation:
        query = (address or "").strip()
        if not query:
            raise MissingFieldError("address")

        candidates = await self.search(query)
        if not candidates:
            raise LocationNotFoundError(query)

        chosen = candidates[0]
        return ResolvedLocation(
            position=Position(latitude=chosen.latitude, longitude=chosen.longitude),
            label=query,
        )


def get_location_resolver() -> LocationResolver:
    """Resolver backed by the configured geocoding provider."""
    from civicpulse.providers.manager import create_provider
    from civicpulse.providers.settings import get_settings

    return LocationResolver(
        provider_factory=create_provider,
        search_limit=get_settings().geo_search_limit,
    )
