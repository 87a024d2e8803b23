"""Repository for complaint operations."""

from dataclasses import dataclass
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from civicpulse.database.connection import utcnow
from civicpulse.database.models.complaint import Complaint, ComplaintComment
from civicpulse.database.repositories.base import BaseRepository
from civicpulse.models.report_models import Category, ReportStatus
from civicpulse.utils.geo_utils import bounding_box, calculate_distance_meters


@dataclass(frozen=True)
class ComplaintFilter:
    """Optional filters for listing complaints."""

    status: Optional[str] = None
    category: Optional[str] = None
    created_by: Optional[UUID] = None
    near_latitude: Optional[float] = None
    near_longitude: Optional[float] = None
    radius_km: Optional[float] = None

    @property
    def has_radius(self) -> bool:
        return (
            self.near_latitude is not None
            and self.near_longitude is not None
            and self.radius_km is not None
        )


class ComplaintRepository(BaseRepository[Complaint]):
    """Repository for complaint CRUD operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Complaint)

    async def get_by_id_with_relations(self, id: UUID) -> Optional[Complaint]:
        """Get a complaint by ID with comments and attachments freshly loaded."""
        result = await self.session.execute(
            select(Complaint)
            .where(Complaint.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    def _apply_filters(self, query, filters: ComplaintFilter):
        if filters.status:
            query = query.where(Complaint.status == filters.status)
        if filters.category:
            query = query.where(Complaint.category == filters.category)
        if filters.created_by:
            query = query.where(Complaint.created_by == filters.created_by)
        if filters.has_radius:
            min_lat, max_lat, min_lon, max_lon = bounding_box(
                filters.near_latitude, filters.near_longitude, filters.radius_km * 1000
            )
            if min_lon <= max_lon:
                longitude_match = Complaint.longitude.between(min_lon, max_lon)
            else:
                # Box wraps across the antimeridian
                longitude_match = or_(Complaint.longitude >= min_lon, Complaint.longitude <= max_lon)
            query = query.where(Complaint.latitude.between(min_lat, max_lat), longitude_match)
        return query

    async def list_complaints(
        self,
        filters: Optional[ComplaintFilter] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[Complaint]:
        """
        List complaints newest first, optionally filtered.

        The radius filter narrows by bounding box in SQL and then drops the
        corners with an exact distance check.
        """
        filters = filters or ComplaintFilter()
        query = self._apply_filters(select(Complaint), filters)
        query = query.order_by(Complaint.created_at.desc(), Complaint.id)

        if not filters.has_radius:
            result = await self.session.execute(query.offset(skip).limit(limit))
            return list(result.scalars().all())

        result = await self.session.execute(query)
        radius_m = filters.radius_km * 1000
        nearby = [
            complaint
            for complaint in result.scalars().all()
            if calculate_distance_meters(
                filters.near_latitude, filters.near_longitude,
                complaint.latitude, complaint.longitude,
            ) <= radius_m
        ]
        return nearby[skip:skip + limit]

    async def create_complaint(self, complaint: Complaint) -> Complaint:
        """Persist a new complaint in its initial state."""
        complaint.status = ReportStatus.PENDING.value
        complaint.votes = 0
        return await self.create(complaint)

    async def upvote(self, complaint: Complaint) -> Complaint:
        complaint.votes = complaint.votes + 1
        complaint.updated_at = utcnow()
        return await self.update(complaint)

    async def add_comment(
        self, complaint: Complaint, text: str, author_id: Optional[UUID] = None
    ) -> Complaint:
        complaint.comments.append(ComplaintComment(text=text, author_id=author_id))
        complaint.updated_at = utcnow()
        return await self.update(complaint)

    async def update_status(self, complaint: Complaint, status: str) -> Complaint:
        """Update the status of a complaint."""
        complaint.status = status
        complaint.updated_at = utcnow()
        return await self.update(complaint)

    async def update_assignment(self, complaint: Complaint, assignee: Optional[str]) -> Complaint:
        complaint.assigned_to = assignee
        complaint.updated_at = utcnow()
        return await self.update(complaint)

    async def count_by_status(self) -> Dict[str, int]:
        """Get count of complaints grouped by status."""
        result = await self.session.execute(
            select(Complaint.status, func.count(Complaint.id))
            .group_by(Complaint.status)
        )
        counts = {status.value: 0 for status in ReportStatus}
        for row in result.all():
            counts[row[0]] = row[1]
        return counts

    async def count_by_category(self) -> Dict[str, int]:
        """Get count of complaints grouped by category."""
        result = await self.session.execute(
            select(Complaint.category, func.count(Complaint.id))
            .group_by(Complaint.category)
        )
        counts = {category.value: 0 for category in Category}
        for row in result.all():
            counts[row[0]] = row[1]
        return counts

    async def count_by_authority(self) -> Dict[str, int]:
        result = await self.session.execute(
            select(Complaint.authority, func.count(Complaint.id))
            .group_by(Complaint.authority)
        )
        return {row[0]: row[1] for row in result.all()}

    async def get_total_count(self, filters: Optional[ComplaintFilter] = None) -> int:
        """Get total count of complaints, optionally filtered."""
        filters = filters or ComplaintFilter()
        if not filters.has_radius:
            query = self._apply_filters(select(func.count(Complaint.id)), filters)
            result = await self.session.execute(query)
            return result.scalar_one()

        query = self._apply_filters(select(Complaint.latitude, Complaint.longitude), filters)
        result = await self.session.execute(query)
        radius_m = filters.radius_km * 1000
        return sum(
            1
            for latitude, longitude in result.all()
            if calculate_distance_meters(
                filters.near_latitude, filters.near_longitude, latitude, longitude
            ) <= radius_m
        )

    async def total_votes(self) -> int:
        result = await self.session.execute(
            select(func.coalesce(func.sum(Complaint.votes), 0))
        )
        return result.scalar_one()
