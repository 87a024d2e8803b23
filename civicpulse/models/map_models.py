"""
Models handed to the map rendering surface.
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class IconMode(str, Enum):
    """Which icon a marker is drawn with."""

    STATUS = "status"
    PHOTO = "photo"


class MarkerIcon(BaseModel):
    """Icon asset and geometry for a marker."""

    url: str = Field(..., description="Icon image URL")
    size: Tuple[int, int] = Field(..., description="Icon size in pixels")
    anchor: Optional[Tuple[int, int]] = Field(None, description="Pixel of the icon placed on the position")
    popup_anchor: Optional[Tuple[int, int]] = Field(None, description="Popup offset relative to the anchor")


class MarkerPopup(BaseModel):
    """Payload shown when a marker is opened."""

    report_id: str
    category: str
    authority_id: str
    authority_name: str
    urgency: str
    status: str
    status_label: str
    title: str = ""
    location_label: str = ""
    photo_urls: List[str] = Field(default_factory=list)
    audio_url: Optional[str] = None
    votes: int = 0
    comments: List[str] = Field(default_factory=list)


class MapMarker(BaseModel):
    """One marker on the map."""

    latitude: float
    longitude: float
    icon: MarkerIcon
    popup: MarkerPopup
