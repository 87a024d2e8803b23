"""
Admin router for authority actions on complaints.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from civicpulse.database.connection import get_db
from civicpulse.database.models.user import User
from civicpulse.database.repositories.complaint import ComplaintFilter
from civicpulse.middleware.auth import get_current_admin
from civicpulse.models.complaint_models import (
    AnalyticsResponse,
    AssignRequest,
    ComplaintListResponse,
    ComplaintResponse,
    UpdateStatusRequest,
)
from civicpulse.services.complaint_service import ComplaintService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/complaints", response_model=ComplaintListResponse)
async def list_all_complaints(
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    admin_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> ComplaintListResponse:
    """
    List every complaint, newest first.

    Requires admin privileges.
    """
    service = ComplaintService(db)
    reports, total = await service.list_complaints(
        ComplaintFilter(status=status_filter, category=category), skip=skip, limit=limit
    )
    return ComplaintListResponse(
        complaints=[ComplaintResponse.from_report(r) for r in reports],
        total=total,
    )


@router.patch("/complaints/{complaint_id}/status", response_model=ComplaintResponse)
async def update_complaint_status(
    complaint_id: str,
    request: UpdateStatusRequest,
    admin_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> ComplaintResponse:
    """
    Update the status of a complaint.

    Requires admin privileges.
    """
    report = await ComplaintService(db).set_status(complaint_id, request.status)
    await db.commit()

    logger.info(f"Complaint {complaint_id} status updated to {request.status} by {admin_user.email}")
    return ComplaintResponse.from_report(report)


@router.patch("/complaints/{complaint_id}/assign", response_model=ComplaintResponse)
async def assign_complaint(
    complaint_id: str,
    request: AssignRequest,
    admin_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> ComplaintResponse:
    report = await ComplaintService(db).set_assignment(complaint_id, request.assigned_to)
    await db.commit()

    logger.info(f"Complaint {complaint_id} assigned to {report.assigned_to} by {admin_user.email}")
    return ComplaintResponse.from_report(report)


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    admin_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
) -> AnalyticsResponse:
    """Complaint counts by status, category and authority."""
    stats = await ComplaintService(db).analytics()
    return AnalyticsResponse(**stats)
