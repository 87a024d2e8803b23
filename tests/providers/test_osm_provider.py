"""
Tests for the OSM provider.

Nominatim is never contacted: the geopy geolocator is patched on the
provider instance.
"""

import pytest
from unittest.mock import AsyncMock, Mock, patch

from geopy.exc import GeocoderServiceError, GeocoderTimedOut

from civicpulse.providers.base import ProviderType
from civicpulse.providers.models import GeoLocation
from civicpulse.providers.osm.provider import OSMProvider
from civicpulse.providers.settings import reset_settings
from civicpulse.services.errors import GeocodingUnavailableError


def make_location(latitude, longitude, address, raw_address=None):
    location = Mock()
    location.latitude = latitude
    location.longitude = longitude
    location.address = address
    location.raw = {"address": raw_address or {}}
    return location


@pytest.fixture
def osm_provider(monkeypatch):
    """OSM provider without cache and without request spacing."""
    monkeypatch.setenv("GEO_RATE_LIMIT_OSM", "1000")
    reset_settings()
    return OSMProvider()


class TestOSMProviderBasics:
    """Test basic functionality of OSM Provider."""

    def test_provider_type_identification(self, osm_provider):
        """It should identify itself as OSM provider."""
        assert osm_provider.provider_type == ProviderType.OSM

    def test_rate_limiting_configuration(self):
        """It should respect Nominatim's one request per second by default."""
        assert OSMProvider().rate_limit_per_second == 1.0

    def test_user_agent_from_settings(self, monkeypatch):
        """It should identify itself with the configured user agent."""
        monkeypatch.setenv("OSM_USER_AGENT", "civicpulse-tests/0.1")
        reset_settings()

        provider = OSMProvider()

        assert provider.geolocator.headers["User-Agent"] == "civicpulse-tests/0.1"


class TestOSMProviderSearch:
    """Test address search through Nominatim."""

    @pytest.mark.asyncio
    async def test_search_returns_candidates_in_order(self, osm_provider):
        """It should return every match, best first, with address details."""
        locations = [
            make_location(
                11.0168, 76.9558, "Coimbatore, Tamil Nadu, India",
                {"city": "Coimbatore", "state": "Tamil Nadu", "country": "India", "postcode": "641001"},
            ),
            make_location(
                11.0800, 76.9400, "Coimbatore North, Tamil Nadu, India",
                {"town": "Coimbatore North", "state": "Tamil Nadu", "country": "India"},
            ),
        ]

        with patch.object(osm_provider.geolocator, 'geocode') as mock_geocode:
            mock_geocode.return_value = locations

            results = await osm_provider.search("Coimbatore", limit=2)

            mock_geocode.assert_called_once_with(
                "Coimbatore", exactly_one=False, limit=2, addressdetails=True
            )

        assert [r.latitude for r in results] == [11.0168, 11.0800]
        assert results[0].city == "Coimbatore"
        assert results[0].postal_code == "641001"
        assert results[1].city == "Coimbatore North"

    @pytest.mark.asyncio
    async def test_search_not_found(self, osm_provider):
        """It should return an empty list for addresses Nominatim cannot find."""
        with patch.object(osm_provider.geolocator, 'geocode') as mock_geocode:
            mock_geocode.return_value = None

            assert await osm_provider.search("NonexistentPlace, XX") == []

    @pytest.mark.asyncio
    async def test_geocode_returns_first_match(self, osm_provider):
        """It should resolve a single address to the best match."""
        with patch.object(osm_provider.geolocator, 'geocode') as mock_geocode:
            mock_geocode.return_value = [make_location(18.5204, 73.8567, "Pune, Maharashtra, India")]

            result = await osm_provider.geocode("Pune")

        assert result.address == "Pune, Maharashtra, India"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [GeocoderTimedOut("timed out"), GeocoderServiceError("503")])
    async def test_search_service_failure(self, osm_provider, error):
        """It should report geopy failures as geocoding unavailable."""
        with patch.object(osm_provider.geolocator, 'geocode', side_effect=error):
            with pytest.raises(GeocodingUnavailableError):
                await osm_provider.search("Coimbatore")

    @pytest.mark.asyncio
    async def test_search_served_from_cache(self, osm_provider, coimbatore_candidates):
        """It should not call Nominatim when the cache has the answer."""
        cache = Mock()
        cache.get = AsyncMock(return_value=coimbatore_candidates)
        cache.set = AsyncMock()
        osm_provider._cache = cache

        with patch.object(osm_provider.geolocator, 'geocode') as mock_geocode:
            results = await osm_provider.search("Coimbatore")

            mock_geocode.assert_not_called()

        assert results == coimbatore_candidates
        cache.set.assert_not_called()

    @pytest.mark.asyncio
    async def test_search_result_is_cached(self, osm_provider):
        """It should store fresh results in the cache."""
        cache = Mock()
        cache.get = AsyncMock(return_value=None)
        cache.set = AsyncMock()
        osm_provider._cache = cache

        with patch.object(osm_provider.geolocator, 'geocode') as mock_geocode:
            mock_geocode.return_value = [make_location(1.0, 2.0, "Somewhere")]
            await osm_provider.search("Somewhere", limit=3)

        cache.set.assert_awaited_once()
        kwargs = cache.set.await_args.kwargs
        assert kwargs["operation"] == "search"
        assert kwargs["params"] == {"address": "Somewhere", "limit": 3}
        assert kwargs["data"] == [GeoLocation(latitude=1.0, longitude=2.0, address="Somewhere")]


class TestOSMProviderReverseGeocoding:
    """Test reverse geocoding through Nominatim."""

    @pytest.mark.asyncio
    async def test_reverse_geocode_functionality(self, osm_provider):
        """It should reverse geocode coordinates to addresses."""
        found = make_location(
            11.01702, 76.95601, "Town Hall, Coimbatore, Tamil Nadu, India",
            {"city": "Coimbatore", "state": "Tamil Nadu", "country": "India"},
        )

        with patch.object(osm_provider.geolocator, 'reverse') as mock_reverse:
            mock_reverse.return_value = found

            result = await osm_provider.reverse_geocode(11.0168, 76.9558)

            mock_reverse.assert_called_once_with("11.0168, 76.9558", addressdetails=True)

        assert result.address == "Town Hall, Coimbatore, Tamil Nadu, India"
        assert result.city == "Coimbatore"
        # The queried point is kept
        assert (result.latitude, result.longitude) == (11.0168, 76.9558)

    @pytest.mark.asyncio
    async def test_reverse_geocode_nothing_found(self, osm_provider):
        """It should return None when Nominatim has no object nearby."""
        with patch.object(osm_provider.geolocator, 'reverse', return_value=None):
            assert await osm_provider.reverse_geocode(0.0, -30.0) is None

    @pytest.mark.asyncio
    async def test_reverse_geocode_failure(self, osm_provider):
        """It should report geopy failures as geocoding unavailable."""
        with patch.object(osm_provider.geolocator, 'reverse', side_effect=GeocoderTimedOut()):
            with pytest.raises(GeocodingUnavailableError):
                await osm_provider.reverse_geocode(11.0, 76.9)
