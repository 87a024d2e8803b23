"""
Validation and construction of reports from drafts.

Both the in-memory report board and the persisted complaint service go
through these functions so the two paths accept exactly the same drafts.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from civicpulse.models.report_models import (
    Report,
    ReportDraft,
    ReportStatus,
    ResolvedLocation,
    get_authority,
)
from civicpulse.providers.settings import Settings, get_settings
from civicpulse.services.errors import InvalidFieldError, MissingFieldError


@dataclass(frozen=True)
class SubmissionPolicy:
    """Which optional fields a deployment insists on."""

    require_photo: bool = False
    require_address: bool = False
    require_title: bool = False
    max_photos: int = 3

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SubmissionPolicy":
        settings = settings or get_settings()
        return cls(
            require_photo=settings.report_require_photo,
            require_address=settings.report_require_address,
            require_title=settings.report_require_title,
            max_photos=settings.report_max_photos,
        )


def validate_draft(draft: ReportDraft, policy: SubmissionPolicy) -> None:
    """
    Check the required fields of a draft.

    Position is not checked here; it is resolved afterwards.

    Raises:
        MissingFieldError: a required field is absent or blank
        InvalidFieldError: the authority is unknown or too many photos are attached
    """
    if draft.category is None:
        raise MissingFieldError("category")

    if not draft.authority:
        raise MissingFieldError("authority")
    if get_authority(draft.authority) is None:
        raise InvalidFieldError("authority", f"Unknown authority: {draft.authority}")

    if policy.require_title and not draft.title.strip():
        raise MissingFieldError("title")

    if policy.require_address and not draft.address.strip():
        raise MissingFieldError("address")

    if policy.require_photo and not draft.photos:
        raise MissingFieldError("photo")

    if len(draft.photos) > policy.max_photos:
        raise InvalidFieldError("photos", f"At most {policy.max_photos} photos are allowed")


def new_report_id() -> str:
    return uuid4().hex


def build_report(
    draft: ReportDraft,
    location: ResolvedLocation,
    report_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Report:
    """Assemble a new report from a validated draft and its resolved position."""
    now = now or datetime.now(timezone.utc)
    return Report(
        id=report_id or new_report_id(),
        category=draft.category,
        authority=draft.authority,
        title=draft.title.strip(),
        description=draft.description.strip(),
        urgency=draft.urgency,
        position=location.position,
        location_label=location.label,
        photos=list(draft.photos),
        audio=draft.audio,
        status=ReportStatus.PENDING,
        votes=0,
        comments=[],
        created_at=now,
        updated_at=now,
    )
