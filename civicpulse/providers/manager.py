"""
Selection of the geocoding provider used for address lookups.

``GEO_PRIMARY_PROVIDER`` names the provider; the manager builds it once, hands
it the shared ``GeocodeCache`` and returns the same instance afterwards.
"""

import logging
from typing import Any, Dict, Optional, Type

from .base import GeoProvider, ProviderType
from .cache import GeocodeCache

logger = logging.getLogger(__name__)


class GeoProviderManager:
    """Registry of provider classes plus the instances built from them."""

    def __init__(self, cache: Optional[GeocodeCache] = None):
        self.cache = cache if cache is not None else GeocodeCache()
        self._classes: Dict[ProviderType, Type[GeoProvider]] = {}
        self._instances: Dict[ProviderType, GeoProvider] = {}

    def register_provider(self, provider_type: ProviderType, provider_class: Type[GeoProvider]) -> None:
        self._classes[provider_type] = provider_class
        logger.debug(f"Geocoding provider available: {provider_type.value}")

    def get_provider(self, provider_type: Optional[ProviderType] = None) -> GeoProvider:
        """
        Return the provider for ``provider_type``, or the configured one.

        Raises:
            ValueError: the type is unknown or has no registered class
        """
        provider_type = provider_type or self.configured_type()

        provider = self._instances.get(provider_type)
        if provider is not None:
            return provider

        provider_class = self._classes.get(provider_type)
        if provider_class is None:
            raise ValueError(f"Provider type {provider_type.value} is not registered")

        provider = provider_class(cache=self.cache)
        self._instances[provider_type] = provider
        logger.info(f"🌍 Geocoding through {provider_type.value}")
        return provider

    @staticmethod
    def configured_type() -> ProviderType:
        from .settings import get_settings

        name = get_settings().geo_primary_provider.lower()
        try:
            return ProviderType(name)
        except ValueError:
            choices = ", ".join(p.value for p in ProviderType)
            raise ValueError(f"Invalid provider '{name}'. Available providers: {choices}") from None

    def get_stats(self) -> Dict[str, Any]:
        return {
            "active_providers": [p.value for p in self._instances],
            "registered_providers": [p.value for p in self._classes],
            "cache_stats": self.cache.get_stats(),
        }


_manager: Optional[GeoProviderManager] = None


def get_manager() -> GeoProviderManager:
    """Process-wide manager with the OSM and HERE providers registered."""
    global _manager
    if _manager is None:
        # Deferred so importing the package does not pull in geopy or httpx clients
        from .here.provider import HEREProvider
        from .osm.provider import OSMProvider

        _manager = GeoProviderManager()
        _manager.register_provider(ProviderType.OSM, OSMProvider)
        _manager.register_provider(ProviderType.HERE, HEREProvider)
    return _manager


def reset_manager() -> None:
    global _manager
    _manager = None


def create_provider(provider_type: Optional[ProviderType] = None) -> GeoProvider:
    """Provider used by the location resolver and the ``/api/geocode`` routes."""
    return get_manager().get_provider(provider_type)
