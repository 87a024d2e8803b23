"""
Complaints router for citizen endpoints.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from civicpulse.database.connection import get_db
from civicpulse.database.models.user import User
from civicpulse.database.repositories.complaint import ComplaintFilter
from civicpulse.middleware.auth import get_current_user
from civicpulse.models.complaint_models import (
    CommentRequest,
    ComplaintListResponse,
    ComplaintResponse,
    MarkerListResponse,
)
from civicpulse.models.map_models import IconMode
from civicpulse.models.media import MediaHandle
from civicpulse.models.report_models import Category, ReportDraft, Urgency
from civicpulse.providers.settings import get_settings
from civicpulse.services.complaint_service import ComplaintService, location_from_form, parse_near
from civicpulse.services.errors import InvalidFieldError
from civicpulse.services.location_service import LocationResolver, get_location_resolver
from civicpulse.services.media_service import audio_handle, photo_handle
from civicpulse.services.submission_service import SubmissionPolicy

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/complaints", tags=["complaints"])


def _service(db: AsyncSession, resolver: Optional[LocationResolver] = None) -> ComplaintService:
    settings = get_settings()
    return ComplaintService(
        db,
        resolver,
        policy=SubmissionPolicy.from_settings(settings),
        max_file_size_mb=settings.report_max_file_size_mb,
    )


def _build_filter(
    current_user: User,
    mine: bool,
    status_filter: Optional[str],
    category: Optional[str],
    near: Optional[str],
    radius_km: Optional[float],
) -> ComplaintFilter:
    center = parse_near(near)
    if center is not None and radius_km is None:
        raise InvalidFieldError("radius_km", "radius_km is required with near")
    if radius_km is not None and radius_km <= 0:
        raise InvalidFieldError("radius_km", "radius_km must be positive")
    return ComplaintFilter(
        status=status_filter,
        category=category,
        created_by=current_user.id if mine else None,
        near_latitude=center.latitude if center else None,
        near_longitude=center.longitude if center else None,
        radius_km=radius_km if center else None,
    )


async def _read_uploads(photos: List[UploadFile], audio: Optional[UploadFile]):
    photo_handles: List[MediaHandle] = []
    for photo in photos:
        if not photo.filename:
            continue
        data = await photo.read()
        if not data:
            continue
        photo_handles.append(photo_handle(data, photo.content_type, filename=photo.filename))

    audio_media = None
    if audio is not None and audio.filename:
        data = await audio.read()
        if data:
            audio_media = audio_handle(data, audio.content_type, filename=audio.filename)

    return photo_handles, audio_media


@router.post("", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
async def create_complaint(
    category: Optional[str] = Form(None, description="Issue category"),
    authority: Optional[str] = Form(None, description="Authority id"),
    title: str = Form("", description="Short title"),
    description: str = Form("", description="Issue description"),
    urgency: str = Form(Urgency.LOW.value, description="Low, Medium or High"),
    address: str = Form("", description="Address to geocode"),
    coordinates: Optional[str] = Form(None, description="Position typed as 'lat,lng'"),
    latitude: Optional[float] = Form(None, description="Latitude of a point picked on the map"),
    longitude: Optional[float] = Form(None, description="Longitude of a point picked on the map"),
    photos: List[UploadFile] = File(default=[], description="Photo attachments"),
    audio: Optional[UploadFile] = File(None, description="Audio note (max 1)"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    resolver: LocationResolver = Depends(get_location_resolver),
) -> ComplaintResponse:
    """
    Submit a new complaint.

    Accepts multipart form data with optional photo and audio attachments.
    The position comes from ``coordinates``, from ``latitude``/``longitude``
    or, failing both, from geocoding ``address`` (first match wins).
    """
    try:
        category_value = Category(category) if category else None
    except ValueError:
        raise InvalidFieldError("category", f"Unknown category: {category}") from None
    try:
        urgency_value = Urgency(urgency)
    except ValueError:
        raise InvalidFieldError("urgency", f"Unknown urgency: {urgency}") from None

    photo_handles, audio_media = await _read_uploads(photos, audio)

    draft = ReportDraft(
        category=category_value,
        authority=authority,
        title=title,
        description=description,
        urgency=urgency_value,
        address=address,
        location=location_from_form(
            coordinates=coordinates,
            latitude=latitude,
            longitude=longitude,
            address=address,
        ),
        photos=tuple(photo_handles),
        audio=audio_media,
    )

    try:
        report = await _service(db, resolver).create(draft, author=current_user)
    finally:
        # Released after storage; on failure nothing else owns them
        for handle in photo_handles + ([audio_media] if audio_media else []):
            handle.release()

    await db.commit()
    return ComplaintResponse.from_report(report)


@router.get("", response_model=ComplaintListResponse)
async def list_complaints(
    mine: bool = Query(False, description="Only complaints I submitted"),
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = None,
    near: Optional[str] = Query(None, description="Centre as 'lat,lng'"),
    radius_km: Optional[float] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ComplaintListResponse:
    """List complaints newest first."""
    filters = _build_filter(current_user, mine, status_filter, category, near, radius_km)
    reports, total = await _service(db).list_complaints(filters, skip=skip, limit=limit)
    return ComplaintListResponse(
        complaints=[ComplaintResponse.from_report(r) for r in reports],
        total=total,
    )


@router.get("/markers", response_model=MarkerListResponse)
async def complaint_markers(
    icon_mode: IconMode = IconMode.STATUS,
    mine: bool = False,
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = None,
    near: Optional[str] = None,
    radius_km: Optional[float] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MarkerListResponse:
    """Map markers for the filtered complaints."""
    filters = _build_filter(current_user, mine, status_filter, category, near, radius_km)
    markers = await _service(db).markers(filters, icon_mode=icon_mode)
    return MarkerListResponse(markers=markers)


@router.get("/{complaint_id}", response_model=ComplaintResponse)
async def get_complaint(
    complaint_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ComplaintResponse:
    report = await _service(db).get(complaint_id)
    return ComplaintResponse.from_report(report)


@router.post(
    "/{complaint_id}/upvote",
    response_model=ComplaintResponse,
    responses={status.HTTP_204_NO_CONTENT: {"description": "Unknown complaint, nothing changed"}},
)
async def upvote_complaint(
    complaint_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Add one vote. Votes are cumulative; repeated calls count again."""
    report = await _service(db).upvote(complaint_id)
    if report is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    await db.commit()
    return ComplaintResponse.from_report(report)


@router.post("/{complaint_id}/comments", response_model=ComplaintResponse)
async def comment_complaint(
    complaint_id: str,
    request: CommentRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ComplaintResponse:
    """Append a comment. Blank comments are ignored."""
    report = await _service(db).add_comment(complaint_id, request.text, author=current_user)
    await db.commit()
    return ComplaintResponse.from_report(report)


@router.get("/{complaint_id}/attachments/{attachment_id}")
async def download_attachment(
    complaint_id: str,
    attachment_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Download a photo or audio note."""
    attachment = await _service(db).get_attachment(complaint_id, attachment_id)
    return Response(
        content=attachment.data,
        media_type=attachment.mime_type,
        headers={"Content-Disposition": f'inline; filename="{attachment.filename}"'},
    )
