"""
Complaint model for citizen-submitted civic issues.
"""
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID as PyUUID
from uuid import uuid4

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from civicpulse.database.connection import Base, utcnow
from civicpulse.models.report_models import ReportStatus, Urgency

if TYPE_CHECKING:
    from civicpulse.database.models.complaint_attachment import ComplaintAttachment
    from civicpulse.database.models.user import User


class Complaint(Base):
    """
    Complaint model.

    Stores the report fields, its position and counters; comments and
    attachments live in their own tables.
    """

    __tablename__ = "complaints"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    title: Mapped[str] = mapped_column(String(200), default="")
    description: Mapped[str] = mapped_column(Text, default="")
    category: Mapped[str] = mapped_column(String(50), index=True)
    authority: Mapped[str] = mapped_column(String(50))
    urgency: Mapped[str] = mapped_column(String(20), default=Urgency.LOW.value)
    status: Mapped[str] = mapped_column(
        String(20), default=ReportStatus.PENDING.value, index=True
    )
    votes: Mapped[int] = mapped_column(Integer, default=0)
    assigned_to: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Location data
    latitude: Mapped[float] = mapped_column(Float)
    longitude: Mapped[float] = mapped_column(Float)
    location_label: Mapped[str] = mapped_column(String(500), default="")

    created_by: Mapped[Optional[PyUUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    # Relationships
    creator: Mapped[Optional["User"]] = relationship("User", lazy="selectin")
    comments: Mapped[List["ComplaintComment"]] = relationship(
        "ComplaintComment",
        back_populates="complaint",
        cascade="all, delete-orphan",
        order_by="ComplaintComment.id",
        lazy="selectin",
    )
    attachments: Mapped[List["ComplaintAttachment"]] = relationship(
        "ComplaintAttachment",
        back_populates="complaint",
        cascade="all, delete-orphan",
        order_by="ComplaintAttachment.created_at",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_complaints_status_created", "status", "created_at"),
        Index("idx_complaints_creator", "created_by"),
        Index("idx_complaints_position", "latitude", "longitude"),
    )

    def __repr__(self) -> str:
        return f"<Complaint(id={self.id}, category='{self.category}', status='{self.status}')>"


class ComplaintComment(Base):
    """A comment on a complaint. Comments are never edited or removed."""

    __tablename__ = "complaint_comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    complaint_id: Mapped[PyUUID] = mapped_column(
        Uuid, ForeignKey("complaints.id", ondelete="CASCADE"), index=True
    )
    author_id: Mapped[Optional[PyUUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    text: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    complaint: Mapped["Complaint"] = relationship("Complaint", back_populates="comments")

    def __repr__(self) -> str:
        return f"<ComplaintComment(id={self.id}, complaint_id={self.complaint_id})>"
