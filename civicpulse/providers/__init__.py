"""
Geocoding provider abstraction layer.

This module provides a unified interface over the geocoding services the
report pipeline can use (OpenStreetMap Nominatim, HERE). The architecture
follows the Strategy pattern: the provider is picked from configuration and
the rest of the application only sees ``GeoProvider``.
"""

from .base import GeoProvider, ProviderType
from .models import GeoLocation
from .manager import GeoProviderManager, create_provider

__all__ = [
    'GeoProvider',
    'ProviderType',
    'GeoLocation',
    'GeoProviderManager',
    'create_provider'
]
