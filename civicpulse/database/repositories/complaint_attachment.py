"""Repository for complaint attachments."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from civicpulse.database.models.complaint_attachment import ComplaintAttachment
from civicpulse.database.repositories.base import BaseRepository


class ComplaintAttachmentRepository(BaseRepository[ComplaintAttachment]):
    """Repository for complaint attachment operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ComplaintAttachment)

    async def create_attachment(
        self,
        complaint_id: UUID,
        type: str,
        filename: str,
        mime_type: str,
        data: bytes,
    ) -> ComplaintAttachment:
        """Create a new attachment."""
        attachment = ComplaintAttachment(
            complaint_id=complaint_id,
            type=type,
            filename=filename,
            mime_type=mime_type,
            size_bytes=len(data),
            data=data,
        )
        self.session.add(attachment)
        await self.session.flush()
        return attachment

    async def get_with_data(
        self, complaint_id: UUID, attachment_id: UUID
    ) -> Optional[ComplaintAttachment]:
        """Get an attachment of a complaint, payload included."""
        result = await self.session.execute(
            select(ComplaintAttachment)
            .where(
                ComplaintAttachment.id == attachment_id,
                ComplaintAttachment.complaint_id == complaint_id,
            )
            .options(undefer(ComplaintAttachment.data))
        )
        return result.scalar_one_or_none()
