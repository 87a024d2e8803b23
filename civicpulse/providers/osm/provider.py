"""
OSM Provider implementation.

Geocodes addresses with the public Nominatim service through geopy.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

from geopy.exc import GeopyError
from geopy.geocoders import Nominatim

from civicpulse.services.errors import GeocodingUnavailableError

from ..base import GeoProvider, ProviderType
from ..cache import GeocodeCache
from ..models import GeoLocation

logger = logging.getLogger(__name__)


def _extract_city(address_dict: Dict[str, Any]) -> Optional[str]:
    return (address_dict.get('city') or
            address_dict.get('town') or
            address_dict.get('village') or
            address_dict.get('municipality') or
            address_dict.get('county'))


class OSMProvider(GeoProvider):
    """
    OpenStreetMap provider implementation.

    Nominatim's usage policy allows one request per second, so every request
    goes through a shared lock that spaces calls by the configured delay.
    """

    def __init__(self, cache: Optional[GeocodeCache] = None):
        from ..settings import get_settings

        settings = get_settings()
        self._cache = cache

        self.geolocator = Nominatim(
            user_agent=settings.osm_user_agent,
            domain=settings.osm_nominatim_endpoint,
        )

        # Rate limiting attributes
        self._last_request_time: float = 0.0
        self._query_delay: float = 1.0 / settings.get_provider_rate_limit("osm")
        self._request_lock = asyncio.Lock()

    async def search(self, address: str, limit: int = 5) -> List[GeoLocation]:
        """Return up to ``limit`` Nominatim matches for an address, best first."""
        params = {"address": address, "limit": limit}

        if self._cache:
            cached_result = await self._cache.get(
                provider=ProviderType.OSM,
                operation="search",
                params=params,
            )
            if cached_result is not None:
                return cached_result

        await self._wait_before_request()
        try:
            locations = await asyncio.to_thread(
                self.geolocator.geocode,
                address,
                exactly_one=False,
                limit=limit,
                addressdetails=True,
            )
        except GeopyError as e:
            logger.error(f"Geocoding error for '{address}': {e}")
            raise GeocodingUnavailableError(f"Nominatim request failed: {e}") from e

        results = [self._to_geo_location(location) for location in (locations or [])]
        logger.debug(f"📍 Nominatim returned {len(results)} result(s) for '{address}'")

        if self._cache:
            await self._cache.set(
                provider=ProviderType.OSM,
                operation="search",
                params=params,
                data=results,
            )

        return results

    async def reverse_geocode(self, latitude: float, longitude: float) -> Optional[GeoLocation]:
        """Convert coordinates to address using Nominatim."""
        params = {"latitude": latitude, "longitude": longitude}

        if self._cache:
            cached_result = await self._cache.get(
                provider=ProviderType.OSM,
                operation="reverse_geocode",
                params=params,
            )
            if cached_result is not None:
                return cached_result[0] if cached_result else None

        await self._wait_before_request()
        try:
            location = await asyncio.to_thread(
                self.geolocator.reverse, f"{latitude}, {longitude}", addressdetails=True
            )
        except GeopyError as e:
            logger.error(f"Reverse geocoding error for ({latitude}, {longitude}): {e}")
            raise GeocodingUnavailableError(f"Nominatim request failed: {e}") from e

        result = None
        if location:
            found = self._to_geo_location(location)
            # Keep the queried point; Nominatim answers with the nearest object
            result = found.model_copy(update={"latitude": latitude, "longitude": longitude})
            logger.debug(f"🌍 Extracted city={result.city}, state={result.state} from reverse geocoding")

        if self._cache:
            await self._cache.set(
                provider=ProviderType.OSM,
                operation="reverse_geocode",
                params=params,
                data=[result] if result else [],
            )

        return result

    def _to_geo_location(self, location) -> GeoLocation:
        raw = getattr(location, 'raw', None) or {}
        address_dict = raw.get('address', {})
        return GeoLocation(
            latitude=location.latitude,
            longitude=location.longitude,
            address=location.address,
            city=_extract_city(address_dict),
            state=address_dict.get('state'),
            country=address_dict.get('country'),
            postal_code=address_dict.get('postcode'),
        )

    @property
    def provider_type(self) -> ProviderType:
        """Return OSM provider type."""
        return ProviderType.OSM

    @property
    def rate_limit_per_second(self) -> float:
        return 1.0 / self._query_delay

    async def _wait_before_request(self):
        """Implement rate limiting for Nominatim requests."""
        async with self._request_lock:
            current_time = time.time()
            time_since_last = current_time - self._last_request_time

            if time_since_last < self._query_delay:
                await asyncio.sleep(self._query_delay - time_since_last)

            self._last_request_time = time.time()
