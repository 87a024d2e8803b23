"""
Tests for the HERE provider.

Requests are answered by an httpx mock transport.
"""

import httpx
import pytest

from civicpulse.providers.base import ProviderType
from civicpulse.providers.here.provider import HEREProvider
from civicpulse.providers.settings import reset_settings
from civicpulse.services.errors import GeocodingUnavailableError

GEOCODE_RESPONSE = {
    "items": [
        {
            "title": "Saravanampatti, Coimbatore, Tamil Nadu, India",
            "position": {"lat": 11.0790, "lng": 77.0020},
            "address": {
                "label": "Saravanampatti, Coimbatore, Tamil Nadu 641035, India",
                "city": "Coimbatore",
                "state": "Tamil Nadu",
                "countryName": "India",
                "postalCode": "641035",
            },
        },
        {
            "title": "Saravanampatti Road",
            "position": {"lat": 11.0700, "lng": 76.9990},
            "address": {},
        },
    ]
}


@pytest.fixture
def here_env(monkeypatch):
    monkeypatch.setenv("HERE_API_KEY", "test-here-key")
    reset_settings()


def make_provider(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HEREProvider(client=client)


class TestHEREProviderConfiguration:
    """Test HERE provider setup."""

    def test_requires_api_key(self, monkeypatch):
        """It should refuse to start without an API key."""
        monkeypatch.delenv("HERE_API_KEY", raising=False)
        reset_settings()
        with pytest.raises(ValueError, match="HERE_API_KEY"):
            HEREProvider()

    def test_provider_identity(self, here_env):
        """It should identify itself as HERE with the configured rate limit."""
        provider = make_provider(lambda request: httpx.Response(200, json={}))
        assert provider.provider_type == ProviderType.HERE
        assert provider.rate_limit_per_second == 10.0


@pytest.mark.asyncio
class TestHEREProviderSearch:
    """Test address search through the HERE Geocoding API."""

    async def test_search_parses_items(self, here_env):
        """It should return every item as a candidate with address details."""
        seen = {}

        def handler(request):
            seen["url"] = request.url
            return httpx.Response(200, json=GEOCODE_RESPONSE)

        provider = make_provider(handler)
        results = await provider.search("Saravanampatti", limit=2)

        assert seen["url"].host == "geocode.search.hereapi.com"
        assert seen["url"].params["q"] == "Saravanampatti"
        assert seen["url"].params["apiKey"] == "test-here-key"
        assert seen["url"].params["limit"] == "2"

        assert len(results) == 2
        assert results[0].latitude == 11.0790
        assert results[0].address == "Saravanampatti, Coimbatore, Tamil Nadu 641035, India"
        assert results[0].country == "India"
        assert results[0].postal_code == "641035"
        # Falls back to the title without an address label
        assert results[1].address == "Saravanampatti Road"

    async def test_search_no_items(self, here_env):
        """It should return an empty list when HERE finds nothing."""
        provider = make_provider(lambda request: httpx.Response(200, json={"items": []}))
        assert await provider.search("Atlantis") == []

    async def test_search_http_error(self, here_env):
        """It should report HTTP failures as geocoding unavailable."""
        provider = make_provider(lambda request: httpx.Response(503, json={"error": "down"}))
        with pytest.raises(GeocodingUnavailableError):
            await provider.search("Coimbatore")

    async def test_search_transport_error(self, here_env):
        """It should report connection failures as geocoding unavailable."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = make_provider(handler)
        with pytest.raises(GeocodingUnavailableError):
            await provider.search("Coimbatore")


@pytest.mark.asyncio
class TestHEREProviderReverseGeocoding:
    """Test reverse geocoding through the HERE API."""

    async def test_reverse_geocode(self, here_env):
        """It should keep the queried point and take the label from HERE."""
        seen = {}

        def handler(request):
            seen["url"] = request.url
            return httpx.Response(200, json={"items": GEOCODE_RESPONSE["items"][:1]})

        provider = make_provider(handler)
        result = await provider.reverse_geocode(11.08, 77.0)

        assert seen["url"].host == "revgeocode.search.hereapi.com"
        assert seen["url"].params["at"] == "11.08,77.0"
        assert (result.latitude, result.longitude) == (11.08, 77.0)
        assert result.city == "Coimbatore"

    async def test_reverse_geocode_nothing_found(self, here_env):
        """It should return None when HERE has no address nearby."""
        provider = make_provider(lambda request: httpx.Response(200, json={"items": []}))
        assert await provider.reverse_geocode(0.0, -30.0) is None
        await provider.close()
