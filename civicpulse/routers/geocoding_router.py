"""
Geocoding router: address search and reverse lookup for the report form.
"""

import logging

from fastapi import APIRouter, Depends, Query

from civicpulse.database.models.user import User
from civicpulse.middleware.auth import get_current_user
from civicpulse.models.complaint_models import (
    GeocodeCandidate,
    GeocodeResponse,
    ReverseGeocodeResponse,
)
from civicpulse.providers.base import GeoProvider
from civicpulse.providers.manager import create_provider
from civicpulse.services.errors import GeocodingUnavailableError, MissingFieldError
from civicpulse.services.location_service import (
    LocationResolver,
    get_location_resolver,
    validate_position,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/geocode", tags=["geocoding"])


def get_geo_provider() -> GeoProvider:
    try:
        return create_provider()
    except ValueError as e:
        logger.error(f"❌ Geocoding provider unavailable: {e}")
        raise GeocodingUnavailableError("Geocoding provider is not configured") from e


@router.get("", response_model=GeocodeResponse)
async def search_address(
    q: str = Query(..., min_length=1, description="Address to look up"),
    current_user: User = Depends(get_current_user),
    resolver: LocationResolver = Depends(get_location_resolver),
) -> GeocodeResponse:
    """
    Candidate positions for an address, best match first.

    An empty list means nothing matched; the form treats the first
    candidate as the selected one.
    """
    query = q.strip()
    if not query:
        raise MissingFieldError("q")

    candidates = await resolver.search(query)
    return GeocodeResponse(
        query=query,
        candidates=[
            GeocodeCandidate(
                latitude=c.latitude,
                longitude=c.longitude,
                label=c.label,
                city=c.city,
                state=c.state,
                country=c.country,
            )
            for c in candidates
        ],
    )


@router.get("/reverse", response_model=ReverseGeocodeResponse)
async def reverse_geocode(
    lat: float = Query(..., description="Latitude"),
    lng: float = Query(..., description="Longitude"),
    current_user: User = Depends(get_current_user),
    provider: GeoProvider = Depends(get_geo_provider),
) -> ReverseGeocodeResponse:
    """Address label for a position picked on the map."""
    position = validate_position(lat, lng)
    location = await provider.reverse_geocode(position.latitude, position.longitude)
    return ReverseGeocodeResponse(
        latitude=position.latitude,
        longitude=position.longitude,
        label=location.label if location else None,
    )
