"""
Repository pattern implementations for database operations.
"""
from civicpulse.database.repositories.base import BaseRepository
from civicpulse.database.repositories.cache import CacheRepository
from civicpulse.database.repositories.complaint import ComplaintFilter, ComplaintRepository
from civicpulse.database.repositories.complaint_attachment import ComplaintAttachmentRepository
from civicpulse.database.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "CacheRepository",
    "ComplaintFilter",
    "ComplaintRepository",
    "ComplaintAttachmentRepository",
    "UserRepository",
]
