"""
Photo and audio capture for report drafts.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from civicpulse.models.media import MediaHandle, MediaKind
from civicpulse.services.errors import (
    InvalidFieldError,
    MediaPermissionDeniedError,
    RecordingInProgressError,
)

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
ALLOWED_AUDIO_TYPES = {"audio/webm", "audio/mp3", "audio/mpeg", "audio/wav", "audio/ogg", "audio/mp4"}
RECORDING_MIME_TYPE = "audio/webm"


class CaptureSession(ABC):
    """An active recording on a capture device."""

    @abstractmethod
    async def stop(self) -> bytes:
        """Finish the recording and return the encoded audio."""
        pass


class MediaCaptureDevice(ABC):
    """A microphone, or anything that behaves like one."""

    @abstractmethod
    async def start(self) -> CaptureSession:
        """
        Begin capturing audio.

        Raises:
            PermissionError: if the device cannot be acquired
        """
        pass


class AudioRecorder:
    """
    Start/stop toggle around a capture device.

    At most one recording is active at a time.
    """

    def __init__(self, device: MediaCaptureDevice, mime_type: str = RECORDING_MIME_TYPE):
        self._device = device
        self._mime_type = mime_type
        self._session: Optional[CaptureSession] = None

    @property
    def recording(self) -> bool:
        return self._session is not None

    async def start(self) -> None:
        """
        Start a recording.

        Raises:
            RecordingInProgressError: a recording is already active
            MediaPermissionDeniedError: the device could not be acquired
        """
        if self._session is not None:
            raise RecordingInProgressError()
        try:
            self._session = await self._device.start()
        except MediaPermissionDeniedError:
            raise
        except (PermissionError, OSError) as e:
            logger.warning(f"🎙️ Microphone unavailable: {e}")
            raise MediaPermissionDeniedError() from e

    async def stop(self) -> Optional[MediaHandle]:
        """Stop the active recording. Returns None when nothing was recording."""
        if self._session is None:
            return None
        session, self._session = self._session, None
        data = await session.stop()
        return MediaHandle(MediaKind.AUDIO, self._mime_type, data=data)


def photo_handle(data: bytes, mime_type: str, filename: Optional[str] = None) -> MediaHandle:
    """Wrap uploaded image bytes in a handle after checking the type."""
    if mime_type not in ALLOWED_IMAGE_TYPES:
        raise InvalidFieldError("photo", f"Image type not allowed: {mime_type}")
    return MediaHandle(MediaKind.IMAGE, mime_type, data=data, filename=filename)


def audio_handle(data: bytes, mime_type: str, filename: Optional[str] = None) -> MediaHandle:
    """Wrap uploaded audio bytes in a handle after checking the type."""
    if mime_type not in ALLOWED_AUDIO_TYPES:
        raise InvalidFieldError("audio", f"Audio type not allowed: {mime_type}")
    return MediaHandle(MediaKind.AUDIO, mime_type, data=data, filename=filename)


def check_size(handle: MediaHandle, max_size_mb: int) -> None:
    """Reject media larger than the configured limit."""
    if handle.size_bytes > max_size_mb * 1024 * 1024:
        raise InvalidFieldError(
            handle.kind.value,
            f"{handle.kind.value.capitalize()} too large. Maximum: {max_size_mb}MB",
        )
