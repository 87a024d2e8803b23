"""
SQLAlchemy models for CivicPulse.
"""
from civicpulse.database.models.cache import CacheEntry
from civicpulse.database.models.complaint import Complaint, ComplaintComment
from civicpulse.database.models.complaint_attachment import ComplaintAttachment
from civicpulse.database.models.user import User, UserRole

__all__ = [
    "CacheEntry",
    "Complaint",
    "ComplaintComment",
    "ComplaintAttachment",
    "User",
    "UserRole",
]
