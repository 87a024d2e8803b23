"""
Pytest configuration and shared fixtures.

Database-backed tests run against an in-memory SQLite database through
aiosqlite; geocoding and device access are replaced by in-process fakes.
"""

import os
from typing import Dict, List, Optional
from unittest.mock import patch

import pytest
import pytest_asyncio

from civicpulse.models.media import MediaHandle, MediaKind
from civicpulse.models.report_models import Position
from civicpulse.providers.base import GeoProvider, ProviderType
from civicpulse.providers.models import GeoLocation
from civicpulse.providers.manager import reset_manager
from civicpulse.providers.settings import reset_settings
from civicpulse.services.location_service import FixedGeolocationSource, LocationResolver
from civicpulse.services.media_service import CaptureSession, MediaCaptureDevice

TEST_ENV = {
    'DATABASE_URL': 'sqlite+aiosqlite://',
    'JWT_SECRET_KEY': 'test-secret-key',
    'JWT_ALGORITHM': 'HS256',
    'GEO_PRIMARY_PROVIDER': 'osm',
    'REPORT_REQUIRE_PHOTO': 'false',
    'REPORT_REQUIRE_ADDRESS': 'false',
    'REPORT_REQUIRE_TITLE': 'false',
}


class MockGeoProvider(GeoProvider):
    """In-memory geocoder: answers from a dict of address -> candidates."""

    def __init__(self, results: Optional[Dict[str, List[GeoLocation]]] = None, error: Exception = None):
        self.results = results or {}
        self.error = error
        self.calls: List[str] = []

    async def search(self, address: str, limit: int = 5) -> List[GeoLocation]:
        self.calls.append(address)
        if self.error is not None:
            raise self.error
        return self.results.get(address, [])[:limit]

    async def reverse_geocode(self, latitude: float, longitude: float) -> Optional[GeoLocation]:
        self.calls.append(f"{latitude},{longitude}")
        return GeoLocation(
            latitude=latitude,
            longitude=longitude,
            address=f"Near {latitude:.4f}, {longitude:.4f}",
        )

    @property
    def provider_type(self) -> ProviderType:
        return ProviderType.OSM

    @property
    def rate_limit_per_second(self) -> float:
        return 10.0


class FakeSession(CaptureSession):
    def __init__(self, payload: bytes):
        self.payload = payload

    async def stop(self) -> bytes:
        return self.payload


class FakeMicrophone(MediaCaptureDevice):
    """Capture device that records a fixed payload, or denies access."""

    def __init__(self, payload: bytes = b"OggS-audio", denied: bool = False):
        self.payload = payload
        self.denied = denied
        self.starts = 0

    async def start(self) -> CaptureSession:
        if self.denied:
            raise PermissionError("NotAllowedError")
        self.starts += 1
        return FakeSession(self.payload)


@pytest.fixture(autouse=True)
def test_env():
    """Point settings at the test database and secret for every test."""
    with patch.dict(os.environ, TEST_ENV):
        reset_settings()
        reset_manager()
        yield TEST_ENV
    reset_settings()
    reset_manager()


@pytest.fixture
def coimbatore_candidates() -> List[GeoLocation]:
    return [
        GeoLocation(
            latitude=11.0168,
            longitude=76.9558,
            address="Coimbatore, Tamil Nadu, India",
            city="Coimbatore",
            state="Tamil Nadu",
            country="India",
        ),
        GeoLocation(
            latitude=11.0800,
            longitude=76.9400,
            address="Coimbatore North, Tamil Nadu, India",
            city="Coimbatore",
            state="Tamil Nadu",
            country="India",
        ),
    ]


@pytest.fixture
def mock_provider(coimbatore_candidates) -> MockGeoProvider:
    return MockGeoProvider({"Coimbatore": coimbatore_candidates})


@pytest.fixture
def resolver(mock_provider) -> LocationResolver:
    return LocationResolver(
        provider=mock_provider,
        geolocation=FixedGeolocationSource(Position(latitude=12.9716, longitude=77.5946)),
    )


@pytest.fixture
def photo() -> MediaHandle:
    return MediaHandle(MediaKind.IMAGE, "image/jpeg", data=b"\xff\xd8\xff\xe0fake-jpeg", filename="pothole.jpg")


@pytest_asyncio.fixture
async def db_session():
    """A session on a fresh in-memory database."""
    from civicpulse.database.connection import close_db, get_session_maker, init_db

    await init_db()
    async with get_session_maker()() as session:
        yield session
    await close_db()
