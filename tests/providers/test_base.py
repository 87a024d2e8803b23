"""
Tests for the geocoding provider interface and models.
"""

import pytest
from pydantic import ValidationError

from civicpulse.providers.base import GeoProvider, ProviderType
from civicpulse.providers.models import GeoLocation
from tests.conftest import MockGeoProvider


class TestProviderType:
    """Test suite for ProviderType enum."""

    def test_provider_type_values(self):
        """It should expose the configured provider names."""
        assert ProviderType.OSM.value == "osm"
        assert ProviderType.HERE.value == "here"

    def test_provider_type_from_string(self):
        """It should build a provider type from its configuration value."""
        assert ProviderType("here") is ProviderType.HERE


class TestGeoLocation:
    """Test suite for the GeoLocation model."""

    def test_valid_location(self):
        """It should accept coordinates within range."""
        location = GeoLocation(latitude=11.0168, longitude=76.9558, address="Coimbatore")
        assert location.latitude == 11.0168
        assert location.label == "Coimbatore"

    def test_label_falls_back_to_coordinates(self):
        """It should label a candidate without address by its coordinates."""
        location = GeoLocation(latitude=11.0168, longitude=76.9558)
        assert location.label == "11.01680, 76.95580"

    @pytest.mark.parametrize("latitude,longitude", [(91, 0), (-91, 0), (0, 181), (0, -181)])
    def test_out_of_range_coordinates(self, latitude, longitude):
        """It should reject coordinates outside the valid ranges."""
        with pytest.raises(ValidationError):
            GeoLocation(latitude=latitude, longitude=longitude)

    def test_location_is_frozen(self):
        """It should not allow mutation after creation."""
        location = GeoLocation(latitude=1.0, longitude=2.0)
        with pytest.raises(ValidationError):
            location.latitude = 5.0


class TestGeoProvider:
    """Test suite for the GeoProvider base class."""

    def test_cannot_instantiate_abstract_provider(self):
        """It should refuse to instantiate the abstract interface."""
        with pytest.raises(TypeError):
            GeoProvider()

    @pytest.mark.asyncio
    async def test_geocode_returns_first_candidate(self, mock_provider):
        """It should return the best candidate from search."""
        location = await mock_provider.geocode("Coimbatore")
        assert location.latitude == 11.0168
        assert mock_provider.calls == ["Coimbatore"]

    @pytest.mark.asyncio
    async def test_geocode_without_match(self):
        """It should return None when the search is empty."""
        provider = MockGeoProvider()
        assert await provider.geocode("Nowhere") is None
