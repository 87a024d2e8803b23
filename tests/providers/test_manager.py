"""
Tests for GeoProviderManager.

Covers provider registration, instantiation from configuration and
statistics.
"""

import pytest
from unittest.mock import Mock

from civicpulse.providers.base import ProviderType
from civicpulse.providers.here.provider import HEREProvider
from civicpulse.providers.manager import GeoProviderManager, create_provider, get_manager, reset_manager
from civicpulse.providers.osm.provider import OSMProvider
from civicpulse.providers.settings import reset_settings
from tests.conftest import MockGeoProvider


class RecordingProvider(MockGeoProvider):
    """Mock provider that remembers the cache it was built with."""

    def __init__(self, cache=None, **kwargs):
        super().__init__()
        self.cache = cache


@pytest.fixture
def cache():
    stats = {'hits': 0, 'misses': 0, 'sets': 0, 'errors': 0, 'hit_rate_percent': 0.0}
    return Mock(get_stats=Mock(return_value=stats))


class TestGeoProviderManager:
    """Test suite for provider registration and lookup."""

    def test_register_and_get_provider(self, cache):
        """It should create a registered provider with the shared cache."""
        manager = GeoProviderManager(cache=cache)
        manager.register_provider(ProviderType.OSM, RecordingProvider)

        provider = manager.get_provider(ProviderType.OSM)

        assert isinstance(provider, RecordingProvider)
        assert provider.cache is cache

    def test_provider_instances_are_reused(self, cache):
        """It should return the same instance on repeated calls."""
        manager = GeoProviderManager(cache=cache)
        manager.register_provider(ProviderType.OSM, RecordingProvider)

        assert manager.get_provider(ProviderType.OSM) is manager.get_provider(ProviderType.OSM)

    def test_unregistered_provider(self, cache):
        """It should reject provider types that were never registered."""
        manager = GeoProviderManager(cache=cache)

        with pytest.raises(ValueError, match="not registered"):
            manager.get_provider(ProviderType.HERE)

    def test_default_provider_from_settings(self, cache, monkeypatch):
        """It should pick the provider named by GEO_PRIMARY_PROVIDER."""
        monkeypatch.setenv("GEO_PRIMARY_PROVIDER", "HERE")
        reset_settings()
        manager = GeoProviderManager(cache=cache)
        manager.register_provider(ProviderType.HERE, RecordingProvider)

        assert isinstance(manager.get_provider(), RecordingProvider)

    def test_invalid_default_provider(self, cache, monkeypatch):
        """It should list available providers when the configured one is unknown."""
        monkeypatch.setenv("GEO_PRIMARY_PROVIDER", "google")
        reset_settings()
        manager = GeoProviderManager(cache=cache)

        with pytest.raises(ValueError, match="Available providers: osm, here"):
            manager.get_provider()

    def test_stats(self, cache):
        """It should report registered and active providers with cache stats."""
        manager = GeoProviderManager(cache=cache)
        manager.register_provider(ProviderType.OSM, RecordingProvider)
        manager.register_provider(ProviderType.HERE, RecordingProvider)
        manager.get_provider(ProviderType.OSM)

        stats = manager.get_stats()

        assert stats["active_providers"] == ["osm"]
        assert stats["registered_providers"] == ["osm", "here"]
        assert stats["cache_stats"]["hits"] == 0


class TestGlobalManager:
    """Test suite for the module-level factory."""

    def test_global_manager_is_shared(self):
        """It should return one manager until it is reset."""
        manager = get_manager()
        assert get_manager() is manager

        reset_manager()
        assert get_manager() is not manager

    def test_create_default_provider(self):
        """It should build the OSM provider by default."""
        assert isinstance(create_provider(), OSMProvider)

    def test_create_here_provider(self, monkeypatch):
        """It should build the HERE provider when configured with a key."""
        monkeypatch.setenv("GEO_PRIMARY_PROVIDER", "here")
        monkeypatch.setenv("HERE_API_KEY", "test-here-key")
        reset_settings()

        assert isinstance(create_provider(), HEREProvider)
