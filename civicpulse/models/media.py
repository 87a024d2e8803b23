"""
Owned media handles for report photos and audio notes.
"""

from enum import Enum
from typing import Optional
from uuid import uuid4


class MediaKind(str, Enum):
    """Kinds of media a report can carry."""

    IMAGE = "image"
    AUDIO = "audio"


class MediaHandle:
    """
    An owned reference to a photo or an audio recording.

    A handle either holds the payload in memory (captured or uploaded
    media) or points at stored media through a URL. Whoever owns the
    handle calls ``release()`` when it is no longer needed; after that the
    payload is gone and ``data`` returns None.
    """

    def __init__(
        self,
        kind: MediaKind,
        mime_type: str,
        data: Optional[bytes] = None,
        filename: Optional[str] = None,
        url: Optional[str] = None,
        handle_id: Optional[str] = None,
    ):
        self.handle_id = handle_id or uuid4().hex
        self.kind = MediaKind(kind)
        self.mime_type = mime_type
        self.filename = filename or f"{self.kind.value}-{self.handle_id[:8]}"
        self._data = data
        self._url = url
        self._released = False

    @property
    def data(self) -> Optional[bytes]:
        return self._data

    @property
    def size_bytes(self) -> int:
        return len(self._data) if self._data is not None else 0

    @property
    def url(self) -> str:
        """URL the rendering surface uses to display the media."""
        return self._url or f"media://{self.handle_id}"

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Drop the payload. Calling it twice is harmless."""
        self._data = None
        self._released = True

    def __enter__(self) -> "MediaHandle":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    def __repr__(self) -> str:
        return (
            f"<MediaHandle(id={self.handle_id}, kind='{self.kind.value}', "
            f"mime_type='{self.mime_type}', released={self._released})>"
        )
