"""
Complaint attachment model for storing photos and audio in the database.
"""
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID as PyUUID
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, Integer, LargeBinary, String, Uuid
from sqlalchemy.orm import Mapped, deferred, mapped_column, relationship

from civicpulse.database.connection import Base, utcnow

if TYPE_CHECKING:
    from civicpulse.database.models.complaint import Complaint


class ComplaintAttachment(Base):
    """
    Photo or audio attached to a complaint.

    Files are stored as binary data (BYTEA in PostgreSQL). The payload is
    deferred so listing complaints does not load it.
    """

    __tablename__ = "complaint_attachments"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    complaint_id: Mapped[PyUUID] = mapped_column(
        Uuid,
        ForeignKey("complaints.id", ondelete="CASCADE"),
        index=True,
    )
    type: Mapped[str] = mapped_column(String(20))  # "image" or "audio"
    filename: Mapped[str] = mapped_column(String(255))
    mime_type: Mapped[str] = mapped_column(String(100))
    size_bytes: Mapped[int] = mapped_column(Integer)
    data: Mapped[bytes] = deferred(mapped_column(LargeBinary))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    complaint: Mapped["Complaint"] = relationship("Complaint", back_populates="attachments")

    def __repr__(self) -> str:
        return f"<ComplaintAttachment(id={self.id}, type='{self.type}', filename='{self.filename}')>"
