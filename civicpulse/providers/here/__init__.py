"""
HERE Maps provider implementation.

This module provides access to the HERE Geocoding & Search API.
"""

from .provider import HEREProvider

__all__ = ['HEREProvider']
