"""
Tests for the projection of reports onto map markers.
"""

from datetime import datetime, timezone

from civicpulse.models.map_models import IconMode
from civicpulse.models.media import MediaHandle, MediaKind
from civicpulse.models.report_models import Category, Position, Report, ReportStatus, Urgency
from civicpulse.services.marker_service import (
    PHOTO_ICON_SIZE,
    STATUS_ICONS,
    marker_icon,
    project_marker,
    project_markers,
)

NOW = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)


def make_report(report_id="r1", status=ReportStatus.PENDING, photos=None, audio=None, **overrides):
    fields = dict(
        id=report_id,
        category=Category.STREETLIGHT,
        authority="roads-1",
        title="Light out",
        urgency=Urgency.MEDIUM,
        position=Position(latitude=11.0168, longitude=76.9558),
        location_label="Pinned Location",
        photos=photos or [],
        audio=audio,
        status=status,
        created_at=NOW,
        updated_at=NOW,
    )
    fields.update(overrides)
    return Report(**fields)


class TestMarkerIcon:
    """Test suite for marker icon selection."""

    def test_status_icons(self):
        """It should key the icon by report status."""
        for status in ReportStatus:
            assert marker_icon(make_report(status=status)) == STATUS_ICONS[status]

    def test_photo_icon(self):
        """It should draw the first photo as the marker in photo mode."""
        photos = [
            MediaHandle(MediaKind.IMAGE, "image/jpeg", handle_id="first"),
            MediaHandle(MediaKind.IMAGE, "image/jpeg", handle_id="second"),
        ]

        icon = marker_icon(make_report(photos=photos), IconMode.PHOTO)

        assert icon.url == "media://first"
        assert icon.size == PHOTO_ICON_SIZE
        assert icon.anchor == (25, 50)

    def test_photo_mode_without_photo(self):
        """It should fall back to the status icon when there is no photo."""
        report = make_report(status=ReportStatus.RESOLVED)
        assert marker_icon(report, IconMode.PHOTO) == STATUS_ICONS[ReportStatus.RESOLVED]


class TestProjectMarker:
    """Test suite for the marker payload."""

    def test_popup_payload(self):
        """It should carry every field the popup displays."""
        audio = MediaHandle(MediaKind.AUDIO, "audio/webm", handle_id="note")
        photo = MediaHandle(MediaKind.IMAGE, "image/png", handle_id="pic")
        report = make_report(
            photos=[photo],
            audio=audio,
            status=ReportStatus.IN_PROGRESS,
            votes=4,
            comments=["seen it too", "still broken"],
        )

        marker = project_marker(report)

        assert (marker.latitude, marker.longitude) == (11.0168, 76.9558)
        popup = marker.popup
        assert popup.report_id == "r1"
        assert popup.category == "Streetlight"
        assert popup.authority_id == "roads-1"
        assert popup.authority_name == "Roads & Transport Dept"
        assert popup.urgency == "Medium"
        assert popup.status == "in-progress"
        assert popup.status_label == "In Progress"
        assert popup.photo_urls == ["media://pic"]
        assert popup.audio_url == "media://note"
        assert popup.votes == 4
        assert popup.comments == ["seen it too", "still broken"]

    def test_unknown_authority_name(self):
        """It should show the raw id when the authority is not in the list."""
        marker = project_marker(make_report(authority="legacy-7"))
        assert marker.popup.authority_name == "legacy-7"
        assert marker.popup.audio_url is None

    def test_project_markers_keeps_order(self):
        """It should emit one marker per report in collection order."""
        reports = [make_report("a"), make_report("b"), make_report("c")]

        markers = project_markers(reports)

        assert [m.popup.report_id for m in markers] == ["a", "b", "c"]
