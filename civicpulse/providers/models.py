"""
Geocoding candidate shared by every provider.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class GeoLocation(BaseModel):
    """
    One match for an address query, or the answer to a reverse lookup.

    Providers fill in whatever address parts their service returns; only the
    coordinates are guaranteed.
    """
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: Optional[str] = Field(None, description="Formatted address, used as the location label")
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def label(self) -> str:
        return self.address or f"{self.latitude:.5f}, {self.longitude:.5f}"
