"""
Domain models for civic issue reports.

Reports are built from an immutable ``ReportDraft`` once a position has been
resolved; the same ``Report`` model backs the in-memory board and the
projection of persisted complaints onto the map.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from civicpulse.models.media import MediaHandle

PINNED_LOCATION_LABEL = "Pinned Location"
CURRENT_LOCATION_LABEL = "Current Location"


class Category(str, Enum):
    """Closed set of issue categories."""

    POTHOLE = "Pothole"
    GARBAGE = "Garbage"
    STREETLIGHT = "Streetlight"
    WATERLOGGING = "Waterlogging"
    OTHER = "Other"


class Urgency(str, Enum):
    """How urgent the reporter considers the issue."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ReportStatus(str, Enum):
    """Status of a report. Only authorities move a report forward."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    ReportStatus.PENDING: "New",
    ReportStatus.IN_PROGRESS: "In Progress",
    ReportStatus.RESOLVED: "Resolved",
}


class Authority(BaseModel):
    """A public body a report can be addressed to."""

    id: str
    name: str

    model_config = ConfigDict(frozen=True)


AUTHORITIES: Tuple[Authority, ...] = (
    Authority(id="muni-1", name="City Municipal Corp"),
    Authority(id="roads-1", name="Roads & Transport Dept"),
    Authority(id="parks-1", name="Parks Division"),
)


def get_authority(authority_id: Optional[str]) -> Optional[Authority]:
    """Look up an authority by id."""
    for authority in AUTHORITIES:
        if authority.id == authority_id:
            return authority
    return None


class Position(BaseModel):
    """A validated latitude/longitude pair."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    model_config = ConfigDict(frozen=True)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


class LocationStrategy(str, Enum):
    """How the position of a draft gets resolved."""

    DIRECT = "direct"
    PIN = "pin"
    DEVICE = "device"
    ADDRESS = "address"


class LocationInput(BaseModel):
    """
    The position source chosen for a draft.

    ``text`` carries the "lat,lng" pair for direct entry or the free-text
    query for address lookup; ``position`` carries the point picked on the map.
    """

    strategy: LocationStrategy
    text: Optional[str] = None
    position: Optional[Position] = None

    model_config = ConfigDict(frozen=True)


class ResolvedLocation(BaseModel):
    """A position together with the label shown for it."""

    position: Position
    label: str

    model_config = ConfigDict(frozen=True)


class ReportDraft(BaseModel):
    """Snapshot of the report form taken at submission time."""

    category: Optional[Category] = None
    authority: Optional[str] = None
    title: str = ""
    description: str = ""
    urgency: Urgency = Urgency.LOW
    address: str = ""
    location: Optional[LocationInput] = None
    photos: Tuple[MediaHandle, ...] = ()
    audio: Optional[MediaHandle] = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class Report(BaseModel):
    """A submitted civic issue report."""

    id: str
    category: Category
    authority: str
    title: str = ""
    description: str = ""
    urgency: Urgency = Urgency.LOW
    position: Position
    location_label: str
    photos: List[MediaHandle] = Field(default_factory=list)
    audio: Optional[MediaHandle] = None
    status: ReportStatus = ReportStatus.PENDING
    votes: int = Field(default=0, ge=0)
    comments: List[str] = Field(default_factory=list)
    assigned_to: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def authority_name(self) -> str:
        authority = get_authority(self.authority)
        return authority.name if authority else self.authority
