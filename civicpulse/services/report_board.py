"""
In-memory report board.

The board owns the draft being edited, the ordered collection of submitted
reports (newest first) and the current map focus. Every mutation happens on
one discrete event at a time; the only suspension point is position
resolution, which is single-flight and guarded against drafts that were reset
while it was pending.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Union

from civicpulse.models.map_models import IconMode, MapMarker
from civicpulse.models.media import MediaHandle
from civicpulse.models.report_models import (
    AUTHORITIES,
    Category,
    LocationInput,
    LocationStrategy,
    Position,
    Report,
    ReportDraft,
    Urgency,
)
from civicpulse.providers.models import GeoLocation
from civicpulse.services.errors import (
    InvalidFieldError,
    LocationNotFoundError,
    MissingFieldError,
    StaleSubmissionError,
    SubmissionInProgressError,
)
from civicpulse.services.location_service import LocationResolver, validate_position
from civicpulse.services.marker_service import project_markers
from civicpulse.services.media_service import AudioRecorder
from civicpulse.services.submission_service import SubmissionPolicy, build_report, validate_draft

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = list(Category)[0]
DEFAULT_AUTHORITY = AUTHORITIES[0].id


class DraftForm:
    """
    The report form being filled in.

    Fields change only through the setters. ``snapshot()`` returns the
    immutable draft a submission works on, and ``generation`` increases
    every time the form is reset.

    Media captured by a submission that is still resolving is held: the form
    will not release it until the submission settles.
    """

    def __init__(self):
        self._generation = 0
        self._held: Dict[int, MediaHandle] = {}
        self._photos: List[MediaHandle] = []
        self._audio: Optional[MediaHandle] = None
        self._clear()

    def _clear(self) -> None:
        self._category: Optional[Category] = DEFAULT_CATEGORY
        self._authority: Optional[str] = DEFAULT_AUTHORITY
        self._title = ""
        self._description = ""
        self._urgency = Urgency.LOW
        self._address = ""
        self._location: Optional[LocationInput] = None
        self._photos = []
        self._audio = None

    @property
    def generation(self) -> int:
        return self._generation

    def set_category(self, category: Union[Category, str, None]) -> None:
        if category is None:
            self._category = None
            return
        try:
            self._category = Category(category)
        except ValueError:
            raise InvalidFieldError("category", f"Unknown category: {category}") from None

    def set_authority(self, authority_id: Optional[str]) -> None:
        self._authority = authority_id

    def set_title(self, title: str) -> None:
        self._title = title or ""

    def set_description(self, description: str) -> None:
        self._description = description or ""

    def set_urgency(self, urgency: Union[Urgency, str]) -> None:
        try:
            self._urgency = Urgency(urgency)
        except ValueError:
            raise InvalidFieldError("urgency", f"Unknown urgency: {urgency}") from None

    def set_address(self, address: str) -> None:
        """Type an address; the position will be geocoded from it."""
        self._address = address or ""
        self._location = LocationInput(strategy=LocationStrategy.ADDRESS, text=self._address)

    def set_coordinates(self, text: str) -> None:
        """Type a "lat,lng" pair; it is parsed at submission."""
        self._location = LocationInput(strategy=LocationStrategy.DIRECT, text=text)

    def pin_location(self, latitude: float, longitude: float) -> Position:
        """Use a point picked on the map."""
        position = validate_position(latitude, longitude)
        self._location = LocationInput(strategy=LocationStrategy.PIN, position=position)
        return position

    def use_current_location(self) -> None:
        """Ask for the device position at submission."""
        self._location = LocationInput(strategy=LocationStrategy.DEVICE)

    def attach_photo(self, photo: MediaHandle) -> None:
        self._photos.append(photo)

    def clear_photos(self) -> None:
        for photo in self._photos:
            self._drop(photo)
        self._photos = []

    def set_audio(self, audio: Optional[MediaHandle]) -> None:
        if self._audio is not None and self._audio is not audio:
            self._drop(self._audio)
        self._audio = audio

    def media(self) -> List[MediaHandle]:
        return self._photos + ([self._audio] if self._audio is not None else [])

    def hold(self, handles: Iterable[MediaHandle]) -> None:
        self._held = {id(handle): handle for handle in handles}

    def settle(self, published: bool) -> None:
        """
        End the hold of the last submission.

        Held media that was not published and is no longer on the form is
        released.
        """
        held, self._held = self._held, {}
        if published:
            return
        current = {id(handle) for handle in self.media()}
        for key, handle in held.items():
            if key not in current:
                handle.release()

    def _drop(self, handle: MediaHandle) -> None:
        if id(handle) not in self._held:
            handle.release()

    def snapshot(self) -> ReportDraft:
        return ReportDraft(
            category=self._category,
            authority=self._authority,
            title=self._title,
            description=self._description,
            urgency=self._urgency,
            address=self._address,
            location=self._location,
            photos=tuple(self._photos),
            audio=self._audio,
        )

    def reset(self, keep: Iterable[MediaHandle] = ()) -> None:
        """
        Clear every field and start a new generation.

        Media on the form is released, except the handles in ``keep`` (they
        now belong to a published report) and any held by a submission.
        """
        kept = {id(handle) for handle in keep}
        for handle in self.media():
            if id(handle) not in kept:
                self._drop(handle)
        self._clear()
        self._generation += 1


class ReportBoard:
    """Submitted reports plus the form and map state that drive them."""

    def __init__(
        self,
        resolver: LocationResolver,
        policy: Optional[SubmissionPolicy] = None,
        recorder: Optional[AudioRecorder] = None,
        initial_focus: Optional[Position] = None,
    ):
        self._resolver = resolver
        self._policy = policy or SubmissionPolicy()
        self._recorder = recorder
        self._reports: List[Report] = []
        self._comment_buffers: Dict[str, str] = {}
        self._busy = False
        self.form = DraftForm()
        self.map_focus: Position = initial_focus or Position(latitude=20.0, longitude=77.0)
        self.preview: Optional[Position] = None

    @property
    def reports(self) -> List[Report]:
        """Reports, newest first."""
        return list(self._reports)

    @property
    def busy(self) -> bool:
        """True while a submission is waiting for its position."""
        return self._busy

    def get(self, report_id: str) -> Optional[Report]:
        for report in self._reports:
            if report.id == report_id:
                return report
        return None

    async def submit(self) -> Report:
        """
        Turn the current draft into a report.

        On success the report is prepended, the form is reset and the map is
        focused on the report. On any error nothing changes.

        Raises:
            SubmissionInProgressError: another submission is still resolving
            StaleSubmissionError: the form was reset while resolving
            ReportError: validation or location resolution failed
        """
        if self._busy:
            raise SubmissionInProgressError()

        draft = self.form.snapshot()
        generation = self.form.generation
        validate_draft(draft, self._policy)

        media = self.form.media()
        self._busy = True
        self.form.hold(media)
        published = False
        try:
            location = await self._resolver.resolve(draft.location)
            if self.form.generation != generation:
                logger.info("Discarding location resolved for a draft that was reset")
                raise StaleSubmissionError()
            report = build_report(draft, location)
            published = True
        finally:
            self._busy = False
            self.form.settle(published)

        self._reports.insert(0, report)
        self._comment_buffers[report.id] = ""
        # Media attached while resolving is not part of the report
        self.form.reset(keep=media)
        self.preview = None
        self.map_focus = report.position

        logger.info(
            f"Report {report.id} submitted: category={report.category.value}, "
            f"authority={report.authority}, position={report.position.as_tuple()}"
        )
        return report

    async def preview_address(self) -> List[GeoLocation]:
        """
        Geocode the typed address and focus the map on the first match.

        Raises:
            LocationNotFoundError: the address matched nothing
        """
        generation = self.form.generation
        address = self.form.snapshot().address.strip()
        if not address:
            raise MissingFieldError("address")
        candidates = await self._resolver.search(address)
        if not candidates:
            raise LocationNotFoundError(address)
        if self.form.generation != generation:
            raise StaleSubmissionError()

        first = candidates[0]
        self.preview = Position(latitude=first.latitude, longitude=first.longitude)
        self.map_focus = self.preview
        return candidates

    def pin_location(self, latitude: float, longitude: float) -> Position:
        """Select a point on the map as the draft position."""
        return self.form.pin_location(latitude, longitude)

    async def start_recording(self) -> None:
        if self._recorder is None:
            raise InvalidFieldError("audio", "No recording device configured")
        await self._recorder.start()

    async def stop_recording(self) -> Optional[MediaHandle]:
        """Stop recording and attach the audio note to the draft."""
        if self._recorder is None:
            return None
        audio = await self._recorder.stop()
        if audio is not None:
            self.form.set_audio(audio)
        return audio

    def upvote(self, report_id: str) -> Optional[Report]:
        """Add one vote. Unknown ids are ignored."""
        report = self.get(report_id)
        if report is None:
            return None
        report.votes += 1
        report.updated_at = datetime.now(timezone.utc)
        return report

    def set_comment_text(self, report_id: str, text: str) -> None:
        self._comment_buffers[report_id] = text

    def comment_text(self, report_id: str) -> str:
        return self._comment_buffers.get(report_id, "")

    def add_comment(self, report_id: str, text: Optional[str] = None) -> Optional[Report]:
        """
        Append a comment, taken from ``text`` or from the report's input buffer.

        Blank comments and unknown ids are ignored.
        """
        if text is None:
            text = self._comment_buffers.get(report_id, "")
        trimmed = text.strip()
        if not trimmed:
            return None

        report = self.get(report_id)
        if report is None:
            return None

        report.comments.append(trimmed)
        report.updated_at = datetime.now(timezone.utc)
        self._comment_buffers[report_id] = ""
        return report

    def markers(self, icon_mode: IconMode = IconMode.STATUS) -> List[MapMarker]:
        return project_markers(self._reports, icon_mode)
