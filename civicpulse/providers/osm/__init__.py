"""OpenStreetMap (Nominatim) geocoding provider."""

from .provider import OSMProvider

__all__ = ['OSMProvider']
