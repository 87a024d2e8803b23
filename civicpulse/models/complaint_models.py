"""
Request and response models for the complaints API.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from civicpulse.models.map_models import MapMarker
from civicpulse.models.report_models import Report


class AttachmentResponse(BaseModel):
    """Attachment reference within a complaint."""

    id: str = Field(..., description="Attachment id")
    url: str = Field(..., description="Download URL")
    mime_type: str = Field(..., description="MIME type")
    filename: str = Field(..., description="Original filename")


class ComplaintResponse(BaseModel):
    """A complaint as returned by the API."""

    id: str = Field(..., description="Complaint id")
    category: str
    authority: str = Field(..., description="Authority id")
    authority_name: str
    title: str = ""
    description: str = ""
    urgency: str
    latitude: float
    longitude: float
    location_label: str
    status: str = Field(..., description="pending, in-progress or resolved")
    status_label: str = Field(..., description="New, In Progress or Resolved")
    votes: int = 0
    comments: List[str] = Field(default_factory=list)
    assigned_to: Optional[str] = None
    photos: List[AttachmentResponse] = Field(default_factory=list)
    audio: Optional[AttachmentResponse] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_report(cls, report: Report) -> "ComplaintResponse":
        def attachment(handle) -> AttachmentResponse:
            return AttachmentResponse(
                id=handle.handle_id,
                url=handle.url,
                mime_type=handle.mime_type,
                filename=handle.filename,
            )

        return cls(
            id=report.id,
            category=report.category.value,
            authority=report.authority,
            authority_name=report.authority_name,
            title=report.title,
            description=report.description,
            urgency=report.urgency.value,
            latitude=report.position.latitude,
            longitude=report.position.longitude,
            location_label=report.location_label,
            status=report.status.value,
            status_label=report.status.label,
            votes=report.votes,
            comments=list(report.comments),
            assigned_to=report.assigned_to,
            photos=[attachment(photo) for photo in report.photos],
            audio=attachment(report.audio) if report.audio else None,
            created_at=report.created_at,
            updated_at=report.updated_at,
        )


class ComplaintListResponse(BaseModel):
    """A page of complaints."""

    complaints: List[ComplaintResponse]
    total: int = Field(..., description="Number of complaints matching the filters")


class MarkerListResponse(BaseModel):
    markers: List[MapMarker]


class CommentRequest(BaseModel):
    text: str = Field("", description="Comment text; blank comments are ignored")


class UpdateStatusRequest(BaseModel):
    """Request to update complaint status."""

    status: str = Field(..., description="New status (pending, in-progress, resolved)")


class AssignRequest(BaseModel):
    """Request to assign a complaint. An empty value clears the assignment."""

    assigned_to: Optional[str] = Field(None, description="Officer or team handling the complaint")


class AnalyticsResponse(BaseModel):
    total: int
    total_votes: int
    by_status: Dict[str, int]
    by_category: Dict[str, int]
    by_authority: Dict[str, int]


class CategoryResponse(BaseModel):
    value: str


class AuthorityResponse(BaseModel):
    id: str
    name: str


class GeocodeCandidate(BaseModel):
    latitude: float
    longitude: float
    label: str
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


class GeocodeResponse(BaseModel):
    query: str
    candidates: List[GeocodeCandidate]


class ReverseGeocodeResponse(BaseModel):
    latitude: float
    longitude: float
    label: Optional[str] = None
