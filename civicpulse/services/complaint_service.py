"""
Persisted complaints.

Complaints go through the same validation and position resolution as the
in-memory report board; the result is stored with SQLAlchemy and handed back
as ``Report`` objects so the marker projection works unchanged.
"""

import logging
from typing import Dict, List, Optional, Tuple, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from civicpulse.database.models.complaint import Complaint
from civicpulse.database.models.complaint_attachment import ComplaintAttachment
from civicpulse.database.models.user import User
from civicpulse.database.repositories.complaint import ComplaintFilter, ComplaintRepository
from civicpulse.database.repositories.complaint_attachment import ComplaintAttachmentRepository
from civicpulse.models.map_models import IconMode, MapMarker
from civicpulse.models.media import MediaHandle, MediaKind
from civicpulse.models.report_models import (
    Category,
    LocationInput,
    LocationStrategy,
    Position,
    Report,
    ReportDraft,
    ReportStatus,
    Urgency,
)
from civicpulse.services.errors import InvalidFieldError, MissingFieldError, ReportNotFoundError
from civicpulse.services.location_service import LocationResolver, parse_coordinates, validate_position
from civicpulse.services.marker_service import project_markers
from civicpulse.services.media_service import check_size
from civicpulse.services.submission_service import SubmissionPolicy, validate_draft

logger = logging.getLogger(__name__)


def location_from_form(
    coordinates: Optional[str] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    address: Optional[str] = None,
    use_current_location: bool = False,
) -> Optional[LocationInput]:
    """
    Pick the position source of a submitted form.

    Typed coordinates win over a picked point, which wins over the address.
    ``use_current_location`` is honoured only when nothing else was given.
    """
    if coordinates and coordinates.strip():
        return LocationInput(strategy=LocationStrategy.DIRECT, text=coordinates)
    if latitude is not None or longitude is not None:
        if latitude is None or longitude is None:
            raise MissingFieldError("latitude" if latitude is None else "longitude")
        return LocationInput(
            strategy=LocationStrategy.PIN,
            position=validate_position(latitude, longitude),
        )
    if address and address.strip():
        return LocationInput(strategy=LocationStrategy.ADDRESS, text=address)
    if use_current_location:
        return LocationInput(strategy=LocationStrategy.DEVICE)
    return None


def parse_near(near: Optional[str]) -> Optional[Position]:
    """Parse the ``near`` query parameter ("lat,lng")."""
    if not near:
        return None
    return parse_coordinates(near)


def attachment_url(complaint_id: UUID, attachment_id: UUID) -> str:
    return f"/api/complaints/{complaint_id}/attachments/{attachment_id}"


def to_report(complaint: Complaint) -> Report:
    """Convert a stored complaint into a ``Report``."""
    photos = []
    audio = None
    for attachment in complaint.attachments:
        handle = MediaHandle(
            kind=MediaKind(attachment.type),
            mime_type=attachment.mime_type,
            filename=attachment.filename,
            url=attachment_url(complaint.id, attachment.id),
            handle_id=str(attachment.id),
        )
        if handle.kind == MediaKind.AUDIO:
            audio = handle
        else:
            photos.append(handle)

    return Report(
        id=str(complaint.id),
        category=Category(complaint.category),
        authority=complaint.authority,
        title=complaint.title,
        description=complaint.description,
        urgency=Urgency(complaint.urgency),
        position=Position(latitude=complaint.latitude, longitude=complaint.longitude),
        location_label=complaint.location_label,
        photos=photos,
        audio=audio,
        status=ReportStatus(complaint.status),
        votes=complaint.votes,
        comments=[comment.text for comment in complaint.comments],
        assigned_to=complaint.assigned_to,
        created_at=complaint.created_at,
        updated_at=complaint.updated_at,
    )


class ComplaintService:
    """Service for creating, listing and updating stored complaints."""

    def __init__(
        self,
        session: AsyncSession,
        resolver: Optional[LocationResolver] = None,
        policy: Optional[SubmissionPolicy] = None,
        max_file_size_mb: int = 10,
    ):
        self.session = session
        self.repo = ComplaintRepository(session)
        self.attachment_repo = ComplaintAttachmentRepository(session)
        self._resolver = resolver
        self._policy = policy or SubmissionPolicy()
        self._max_file_size_mb = max_file_size_mb

    async def create(self, draft: ReportDraft, author: Optional[User] = None) -> Report:
        """
        Validate a draft, resolve its position and store it.

        Media payloads are written to the attachments table and the handles
        are released afterwards.

        Raises:
            ReportError: validation or position resolution failed
        """
        validate_draft(draft, self._policy)
        for photo in draft.photos:
            check_size(photo, self._max_file_size_mb)
        if draft.audio is not None:
            check_size(draft.audio, self._max_file_size_mb)

        resolver = self._resolver or LocationResolver()
        location = await resolver.resolve(draft.location)

        complaint = await self.repo.create_complaint(Complaint(
            title=draft.title.strip(),
            description=draft.description.strip(),
            category=draft.category.value,
            authority=draft.authority,
            urgency=draft.urgency.value,
            latitude=location.position.latitude,
            longitude=location.position.longitude,
            location_label=location.label,
            created_by=author.id if author else None,
        ))

        media = list(draft.photos) + ([draft.audio] if draft.audio else [])
        for handle in media:
            await self.attachment_repo.create_attachment(
                complaint_id=complaint.id,
                type=handle.kind.value,
                filename=handle.filename,
                mime_type=handle.mime_type,
                data=handle.data or b"",
            )
            handle.release()

        complaint = await self.repo.get_by_id_with_relations(complaint.id)
        report = to_report(complaint)

        logger.info(
            f"Complaint {report.id} created by {author.email if author else 'anonymous'}: "
            f"category={report.category.value}, authority={report.authority}, "
            f"position={report.position.as_tuple()}, attachments={len(media)}"
        )
        return report

    async def _get_complaint(self, complaint_id: Union[str, UUID]) -> Complaint:
        try:
            uuid = complaint_id if isinstance(complaint_id, UUID) else UUID(str(complaint_id))
        except ValueError:
            raise ReportNotFoundError(str(complaint_id)) from None

        complaint = await self.repo.get_by_id_with_relations(uuid)
        if complaint is None:
            raise ReportNotFoundError(str(complaint_id))
        return complaint

    async def get(self, complaint_id: Union[str, UUID]) -> Report:
        """
        Raises:
            ReportNotFoundError: no complaint has this id
        """
        return to_report(await self._get_complaint(complaint_id))

    async def list_complaints(
        self,
        filters: Optional[ComplaintFilter] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[Report], int]:
        """
        List complaints newest first.

        Returns:
            The requested page and the total number of matches
        """
        filters = filters or ComplaintFilter()
        if filters.status and filters.status not in {s.value for s in ReportStatus}:
            raise InvalidFieldError("status", f"Unknown status: {filters.status}")
        if filters.category and filters.category not in {c.value for c in Category}:
            raise InvalidFieldError("category", f"Unknown category: {filters.category}")

        complaints = await self.repo.list_complaints(filters, skip=skip, limit=limit)
        total = await self.repo.get_total_count(filters)
        return [to_report(c) for c in complaints], total

    async def markers(
        self,
        filters: Optional[ComplaintFilter] = None,
        icon_mode: IconMode = IconMode.STATUS,
        limit: int = 500,
    ) -> List[MapMarker]:
        reports, _ = await self.list_complaints(filters, skip=0, limit=limit)
        return project_markers(reports, icon_mode)

    async def upvote(self, complaint_id: Union[str, UUID]) -> Optional[Report]:
        """Add one vote. An unknown id is a no-op and returns None."""
        try:
            complaint = await self._get_complaint(complaint_id)
        except ReportNotFoundError:
            logger.debug(f"Upvote ignored for unknown complaint {complaint_id}")
            return None
        complaint = await self.repo.upvote(complaint)
        return to_report(complaint)

    async def add_comment(
        self,
        complaint_id: Union[str, UUID],
        text: Optional[str],
        author: Optional[User] = None,
    ) -> Report:
        """Append a trimmed comment. Blank text leaves the complaint unchanged."""
        complaint = await self._get_complaint(complaint_id)
        trimmed = (text or "").strip()
        if not trimmed:
            return to_report(complaint)

        complaint = await self.repo.add_comment(
            complaint, trimmed, author_id=author.id if author else None
        )
        return to_report(complaint)

    async def set_status(self, complaint_id: Union[str, UUID], status: str) -> Report:
        """
        Raises:
            InvalidFieldError: the status is not one of pending, in-progress, resolved
            ReportNotFoundError: no complaint has this id
        """
        try:
            new_status = ReportStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in ReportStatus)
            raise InvalidFieldError("status", f"Invalid status. Use: {allowed}") from None

        complaint = await self._get_complaint(complaint_id)
        previous = complaint.status
        complaint = await self.repo.update_status(complaint, new_status.value)
        logger.info(f"Complaint {complaint.id} status {previous} -> {new_status.value}")
        return to_report(complaint)

    async def set_assignment(self, complaint_id: Union[str, UUID], assignee: Optional[str]) -> Report:
        """Assign a complaint; a blank assignee clears the assignment."""
        complaint = await self._get_complaint(complaint_id)
        value = assignee.strip() if assignee else None
        complaint = await self.repo.update_assignment(complaint, value or None)
        logger.info(f"Complaint {complaint.id} assigned to {complaint.assigned_to}")
        return to_report(complaint)

    async def get_attachment(
        self, complaint_id: Union[str, UUID], attachment_id: Union[str, UUID]
    ) -> ComplaintAttachment:
        complaint = await self._get_complaint(complaint_id)
        try:
            aid = attachment_id if isinstance(attachment_id, UUID) else UUID(str(attachment_id))
        except ValueError:
            raise ReportNotFoundError(str(attachment_id)) from None

        attachment = await self.attachment_repo.get_with_data(complaint.id, aid)
        if attachment is None:
            raise ReportNotFoundError(str(attachment_id))
        return attachment

    async def analytics(self) -> Dict[str, object]:
        return {
            "total": await self.repo.count(),
            "total_votes": await self.repo.total_votes(),
            "by_status": await self.repo.count_by_status(),
            "by_category": await self.repo.count_by_category(),
            "by_authority": await self.repo.count_by_authority(),
        }
