"""
Configuration settings for CivicPulse using Pydantic Settings.

This module centralizes configuration for the API server, the database,
authentication, the geocoding providers and the report submission policy.
"""

from pydantic import Field
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Environment-driven configuration (``.env`` is read too).

    Field names match the environment variables case-insensitively; unknown
    variables are ignored.
    """

    # API configuration
    civicpulse_api_url: str = Field(
        default="http://localhost:8000/api",
        alias="CIVICPULSE_API_URL",
        description="CivicPulse API base URL (used by the CLI)"
    )
    civicpulse_host: str = Field(
        default="127.0.0.1",
        alias="CIVICPULSE_HOST",
        description="API server host"
    )
    civicpulse_port: int = Field(
        default=8000,
        alias="CIVICPULSE_PORT",
        description="API server port"
    )

    # Database configuration
    database_url: Optional[str] = Field(
        default=None,
        alias="DATABASE_URL",
        description="Full async SQLAlchemy URL; overrides the POSTGRES_* settings"
    )
    postgres_host: str = Field(default="localhost", alias="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, alias="POSTGRES_PORT")
    postgres_database: str = Field(default="civicpulse", alias="POSTGRES_DATABASE")
    postgres_user: str = Field(default="civicpulse", alias="POSTGRES_USER")
    postgres_password: str = Field(default="civicpulse", alias="POSTGRES_PASSWORD")
    postgres_pool_max_size: int = Field(default=10, alias="POSTGRES_POOL_MAX_SIZE")

    # Authentication
    jwt_secret_key: str = Field(
        default="change-me-in-production",
        alias="JWT_SECRET_KEY",
        description="Shared secret used to verify bearer tokens"
    )
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_expire_hours: int = Field(default=24 * 7, alias="JWT_EXPIRE_HOURS")

    # Geocoding provider configuration
    geo_primary_provider: str = Field(
        default="osm",
        alias="GEO_PRIMARY_PROVIDER",
        description="Geocoding provider (osm, here)"
    )
    osm_nominatim_endpoint: str = Field(
        default="nominatim.openstreetmap.org",
        alias="OSM_NOMINATIM_ENDPOINT",
        description="Nominatim domain used by geopy"
    )
    osm_user_agent: str = Field(
        default="civicpulse/1.0",
        alias="OSM_USER_AGENT",
        description="User agent for OSM API requests"
    )
    here_api_key: Optional[str] = Field(
        default=None,
        alias="HERE_API_KEY",
        description="HERE API key (required when using HERE provider)"
    )
    geo_cache_ttl_geocode: int = Field(
        default=604800,  # 7 days
        alias="GEO_CACHE_TTL_GEOCODE",
        description="Cache TTL for geocoding results in seconds"
    )
    geo_rate_limit_osm: float = Field(
        default=1.0,
        alias="GEO_RATE_LIMIT_OSM",
        description="OpenStreetMap rate limit (requests per second)"
    )
    geo_rate_limit_here: float = Field(
        default=10.0,
        alias="GEO_RATE_LIMIT_HERE",
        description="HERE rate limit (requests per second)"
    )
    geo_search_limit: int = Field(
        default=5,
        alias="GEO_SEARCH_LIMIT",
        description="Maximum number of candidates returned by an address search"
    )

    # Report submission policy
    report_require_photo: bool = Field(default=False, alias="REPORT_REQUIRE_PHOTO")
    report_require_address: bool = Field(default=False, alias="REPORT_REQUIRE_ADDRESS")
    report_require_title: bool = Field(default=True, alias="REPORT_REQUIRE_TITLE")
    report_max_photos: int = Field(default=3, alias="REPORT_MAX_PHOTOS")
    report_max_file_size_mb: int = Field(default=10, alias="REPORT_MAX_FILE_SIZE_MB")

    # Initial map focus
    map_default_latitude: float = Field(default=20.0, alias="MAP_DEFAULT_LATITUDE")
    map_default_longitude: float = Field(default=77.0, alias="MAP_DEFAULT_LONGITUDE")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_prefix": "",
        "extra": "ignore",
    }

    def get_provider_rate_limit(self, provider: str) -> float:
        """Requests per second for ``osm`` or ``here``; 1/s for anything else."""
        rate_limits = {
            "osm": self.geo_rate_limit_osm,
            "here": self.geo_rate_limit_here,
        }
        return rate_limits.get(provider.lower(), 1.0)

    def get_cache_ttl(self, operation: str) -> int:
        """Seconds a cached geocoding answer stays valid."""
        ttl_config = {
            "geocode": self.geo_cache_ttl_geocode,
            "search": self.geo_cache_ttl_geocode,
            "reverse_geocode": self.geo_cache_ttl_geocode,
        }
        return ttl_config.get(operation, 3600)  # Default 1 hour


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget the loaded settings so the environment is read again."""
    global _settings
    _settings = None
