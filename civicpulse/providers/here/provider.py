"""
HERE Maps Provider implementation.

This module implements the GeoProvider interface on top of the HERE
Geocoding & Search API.
"""

import httpx
import logging
from typing import Any, Dict, List, Optional

from civicpulse.services.errors import GeocodingUnavailableError

from ..base import GeoProvider, ProviderType
from ..cache import GeocodeCache
from ..models import GeoLocation

logger = logging.getLogger(__name__)


class HEREProvider(GeoProvider):
    """
    HERE Maps provider implementation.

    Requires HERE_API_KEY environment variable to be set.
    """

    def __init__(self, cache: Optional[GeocodeCache] = None, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize HERE provider.

        Args:
            cache: Optional geocode cache instance
            client: Optional HTTP client (a new one is created otherwise)

        Raises:
            ValueError: If HERE_API_KEY is not configured
        """
        from ..settings import get_settings

        self._cache = cache
        settings = get_settings()
        self._api_key = settings.here_api_key
        self._rate_limit = settings.get_provider_rate_limit("here")

        if not self._api_key:
            raise ValueError(
                "HERE_API_KEY is required for HERE provider. Please set it in environment or .env file"
            )

        self._client = client or httpx.AsyncClient(
            timeout=30.0,
            headers={"User-Agent": "CivicPulse/1.0"}
        )

        # HERE API endpoints
        self._geocode_url = "https://geocode.search.hereapi.com/v1/geocode"
        self._reverse_geocode_url = "https://revgeocode.search.hereapi.com/v1/revgeocode"

        logger.info("HERE provider initialized successfully")

    async def search(self, address: str, limit: int = 5) -> List[GeoLocation]:
        """
        Search addresses using HERE Geocoding API.

        Args:
            address: Address to geocode
            limit: Maximum number of candidates

        Returns:
            Candidates ordered by HERE's relevance
        """
        cache_params = {"address": address, "limit": limit}
        if self._cache:
            cached_result = await self._cache.get(
                provider=self.provider_type,
                operation="search",
                params=cache_params
            )
            if cached_result is not None:
                return cached_result

        params = {
            "q": address,
            "apiKey": self._api_key,
            "limit": limit,
        }
        data = await self._get(self._geocode_url, params)
        results = [self._parse_item(item, address) for item in data.get("items", [])]

        if not results:
            logger.warning(f"No geocoding results for address: {address}")

        if self._cache:
            await self._cache.set(
                provider=self.provider_type,
                operation="search",
                params=cache_params,
                data=results
            )

        return results

    async def reverse_geocode(self, latitude: float, longitude: float) -> Optional[GeoLocation]:
        """Convert coordinates to address using HERE Reverse Geocoding API."""
        cache_params = {"latitude": latitude, "longitude": longitude}
        if self._cache:
            cached_result = await self._cache.get(
                provider=self.provider_type,
                operation="reverse_geocode",
                params=cache_params
            )
            if cached_result is not None:
                return cached_result[0] if cached_result else None

        params = {
            "at": f"{latitude},{longitude}",
            "apiKey": self._api_key,
            "limit": 1,
        }
        data = await self._get(self._reverse_geocode_url, params)
        items = data.get("items", [])

        result = None
        if items:
            found = self._parse_item(items[0])
            result = found.model_copy(update={"latitude": latitude, "longitude": longitude})

        if self._cache:
            await self._cache.set(
                provider=self.provider_type,
                operation="reverse_geocode",
                params=cache_params,
                data=[result] if result else []
            )

        return result

    async def _get(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"HERE geocoding API error: {e}")
            raise GeocodingUnavailableError(f"HERE request failed: {e}") from e
        return response.json()

    def _parse_item(self, item: Dict[str, Any], fallback_label: Optional[str] = None) -> GeoLocation:
        position = item["position"]
        address_data = item.get("address", {})
        return GeoLocation(
            latitude=position["lat"],
            longitude=position["lng"],
            address=address_data.get("label") or item.get("title", fallback_label),
            city=address_data.get("city"),
            state=address_data.get("state"),
            country=address_data.get("countryName"),
            postal_code=address_data.get("postalCode")
        )

    @property
    def provider_type(self) -> ProviderType:
        return ProviderType.HERE

    @property
    def rate_limit_per_second(self) -> float:
        return self._rate_limit

    async def close(self):
        await self._client.aclose()
