"""
Database module for CivicPulse.

Provides SQLAlchemy async database connection, models, and repositories.
"""
from civicpulse.database.connection import (
    Base,
    close_db,
    get_db,
    get_engine,
    get_session,
    get_session_maker,
    init_db,
)
from civicpulse.database.repositories import (
    BaseRepository,
    CacheRepository,
    ComplaintAttachmentRepository,
    ComplaintRepository,
    UserRepository,
)

__all__ = [
    # Connection
    "Base",
    "get_engine",
    "get_session",
    "get_session_maker",
    "get_db",
    "init_db",
    "close_db",
    # Repositories
    "BaseRepository",
    "CacheRepository",
    "ComplaintRepository",
    "ComplaintAttachmentRepository",
    "UserRepository",
]
