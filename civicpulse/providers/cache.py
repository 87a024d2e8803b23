"""
Database-backed cache for geocoding results.

Candidates returned by a provider are stored in the ``cache_entries`` table
under a key built from the provider, the operation and its normalized
parameters, so "MG Road,  Pune" and "mg road, pune" share an entry.
"""

import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from .base import ProviderType
from .models import GeoLocation

logger = logging.getLogger(__name__)


@dataclass
class CacheKey:
    """Structure for generating consistent cache keys."""
    provider: ProviderType
    operation: str  # search, reverse_geocode
    params: Dict[str, Any]

    def generate_key(self) -> str:
        """Generate a unique key based on provider, operation and parameters."""
        normalized_params = self.normalized_params()
        params_json = json.dumps(normalized_params, sort_keys=True, ensure_ascii=False)
        param_hash = hashlib.md5(params_json.encode('utf-8')).hexdigest()

        return f"{self.provider.value}:{self.operation}:{param_hash}"

    def normalized_params(self) -> Dict[str, Any]:
        """Normalize parameters for consistent hashing."""
        normalized = {}
        coordinate_keys = {'latitude', 'longitude', 'lat', 'lon'}

        for key, value in self.params.items():
            if isinstance(value, str):
                # Lowercase, collapse whitespace
                normalized[key] = ' '.join(value.lower().split())
            elif isinstance(value, (int, float)) and key in coordinate_keys:
                # ~111m precision
                normalized[key] = round(float(value), 3)
            else:
                normalized[key] = value

        return normalized


class GeocodeCache:
    """
    Geocoding cache stored through the application database.

    Cache failures are logged and treated as misses; they never fail the
    lookup that triggered them.
    """

    def __init__(self, ttl_config: Optional[Dict[str, int]] = None):
        from .settings import get_settings

        settings = get_settings()
        self.ttl_config = ttl_config or {
            'search': settings.get_cache_ttl('search'),
            'reverse_geocode': settings.get_cache_ttl('reverse_geocode'),
        }
        self._stats = {'hits': 0, 'misses': 0, 'sets': 0, 'errors': 0}

    async def get(
        self, provider: ProviderType, operation: str, params: Dict[str, Any]
    ) -> Optional[List[GeoLocation]]:
        """
        Retrieve cached candidates.

        Returns:
            The cached list (possibly empty) or None on a miss
        """
        from civicpulse.database.connection import get_session
        from civicpulse.database.repositories.cache import CacheRepository

        key = CacheKey(provider=provider, operation=operation, params=params).generate_key()

        try:
            async with get_session() as session:
                data = await CacheRepository(session).lookup(key)
        except SQLAlchemyError as e:
            self._stats['errors'] += 1
            logger.error(f"❌ Cache read failed for {operation}: {e}")
            return None

        if data is None:
            self._stats['misses'] += 1
            logger.debug(f"Cache miss for {operation} with provider {provider.value}")
            return None

        self._stats['hits'] += 1
        logger.debug(f"Cache hit for {operation} with provider {provider.value}")
        return [GeoLocation(**item) for item in data]

    async def set(
        self,
        provider: ProviderType,
        operation: str,
        params: Dict[str, Any],
        data: List[GeoLocation],
    ) -> None:
        """Store candidates with the TTL configured for the operation."""
        from civicpulse.database.connection import get_session, utcnow
        from civicpulse.database.models.cache import CacheEntry
        from civicpulse.database.repositories.cache import CacheRepository

        cache_key = CacheKey(provider=provider, operation=operation, params=params)
        ttl = self.ttl_config.get(operation, 3600)
        now = utcnow()

        entry = CacheEntry(
            key=cache_key.generate_key(),
            data=[item.model_dump(mode='json') for item in data],
            provider=provider.value,
            operation=operation,
            params=cache_key.normalized_params(),
            created_at=now,
            expires_at=now + timedelta(seconds=ttl),
            hit_count=0,
        )

        try:
            async with get_session() as session:
                await CacheRepository(session).store(entry)
        except SQLAlchemyError as e:
            self._stats['errors'] += 1
            logger.error(f"❌ Cache write failed for {operation}: {e}")
            return

        self._stats['sets'] += 1

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        total = self._stats['hits'] + self._stats['misses']
        hit_rate = (self._stats['hits'] / total * 100) if total else 0.0
        return {**self._stats, 'hit_rate_percent': round(hit_rate, 2)}
