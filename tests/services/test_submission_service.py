"""
Tests for draft validation and report construction.
"""

from datetime import datetime, timezone

import pytest

from civicpulse.models.media import MediaHandle, MediaKind
from civicpulse.models.report_models import (
    Category,
    Position,
    ReportDraft,
    ReportStatus,
    ResolvedLocation,
    Urgency,
)
from civicpulse.providers.settings import Settings
from civicpulse.services.errors import InvalidFieldError, MissingFieldError
from civicpulse.services.submission_service import (
    SubmissionPolicy,
    build_report,
    new_report_id,
    validate_draft,
)


def make_draft(**overrides) -> ReportDraft:
    fields = dict(category=Category.POTHOLE, authority="muni-1", title="Deep pothole")
    fields.update(overrides)
    return ReportDraft(**fields)


class TestSubmissionPolicy:
    """Test suite for SubmissionPolicy."""

    def test_defaults_require_nothing_optional(self):
        """It should not require optional fields by default."""
        policy = SubmissionPolicy()
        assert not policy.require_photo
        assert not policy.require_address
        assert not policy.require_title
        assert policy.max_photos == 3

    def test_from_settings(self):
        """It should mirror the REPORT_* settings."""
        settings = Settings(
            _env_file=None,
            REPORT_REQUIRE_PHOTO=True,
            REPORT_REQUIRE_TITLE=False,
            REPORT_MAX_PHOTOS=1,
        )

        policy = SubmissionPolicy.from_settings(settings)

        assert policy == SubmissionPolicy(
            require_photo=True, require_address=False, require_title=False, max_photos=1
        )


class TestValidateDraft:
    """Test suite for validate_draft."""

    def test_minimal_draft(self):
        """It should accept a draft with category and authority."""
        validate_draft(make_draft(title=""), SubmissionPolicy())

    def test_missing_category(self):
        """It should require a category."""
        with pytest.raises(MissingFieldError) as exc_info:
            validate_draft(make_draft(category=None), SubmissionPolicy())
        assert exc_info.value.field == "category"

    @pytest.mark.parametrize("authority", [None, ""])
    def test_missing_authority(self, authority):
        """It should require an authority."""
        with pytest.raises(MissingFieldError) as exc_info:
            validate_draft(make_draft(authority=authority), SubmissionPolicy())
        assert exc_info.value.field == "authority"

    def test_unknown_authority(self):
        """It should only accept authorities from the fixed list."""
        with pytest.raises(InvalidFieldError):
            validate_draft(make_draft(authority="police-9"), SubmissionPolicy())

    def test_required_title(self):
        """It should reject a blank title when titles are required."""
        with pytest.raises(MissingFieldError) as exc_info:
            validate_draft(make_draft(title="   "), SubmissionPolicy(require_title=True))
        assert exc_info.value.field == "title"

    def test_required_address(self):
        """It should reject a blank address when addresses are required."""
        with pytest.raises(MissingFieldError) as exc_info:
            validate_draft(make_draft(address=""), SubmissionPolicy(require_address=True))
        assert exc_info.value.field == "address"

    def test_required_photo(self, photo):
        """It should require a photo when the policy says so."""
        policy = SubmissionPolicy(require_photo=True)

        with pytest.raises(MissingFieldError) as exc_info:
            validate_draft(make_draft(), policy)
        assert exc_info.value.field == "photo"

        validate_draft(make_draft(photos=(photo,)), policy)

    def test_too_many_photos(self):
        """It should cap the number of attached photos."""
        photos = tuple(MediaHandle(MediaKind.IMAGE, "image/png", data=b"x") for _ in range(3))

        with pytest.raises(InvalidFieldError):
            validate_draft(make_draft(photos=photos), SubmissionPolicy(max_photos=2))


class TestBuildReport:
    """Test suite for build_report."""

    def test_new_report_defaults(self, photo):
        """It should start with pending status, no votes and no comments."""
        location = ResolvedLocation(position=Position(latitude=11.0168, longitude=76.9558), label="Pinned Location")
        now = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
        draft = make_draft(
            title="  Deep pothole  ",
            description=" Near the bus stop ",
            urgency=Urgency.HIGH,
            photos=(photo,),
        )

        report = build_report(draft, location, now=now)

        assert report.status == ReportStatus.PENDING
        assert report.votes == 0
        assert report.comments == []
        assert report.title == "Deep pothole"
        assert report.description == "Near the bus stop"
        assert report.urgency == Urgency.HIGH
        assert report.position.as_tuple() == (11.0168, 76.9558)
        assert report.location_label == "Pinned Location"
        assert report.photos == [photo]
        assert report.created_at == report.updated_at == now
        assert report.authority_name == "City Municipal Corp"

    def test_ids_are_unique(self):
        """It should never hand out the same id twice in quick succession."""
        ids = {new_report_id() for _ in range(1000)}
        assert len(ids) == 1000
