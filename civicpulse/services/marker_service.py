"""
Projection of reports onto map markers.
"""

from typing import Iterable, List

from civicpulse.models.map_models import IconMode, MapMarker, MarkerIcon, MarkerPopup
from civicpulse.models.report_models import Report, ReportStatus

STATUS_ICONS = {
    ReportStatus.PENDING: MarkerIcon(
        url="https://maps.google.com/mapfiles/ms/icons/red-dot.png",
        size=(32, 32),
    ),
    ReportStatus.IN_PROGRESS: MarkerIcon(
        url="https://maps.google.com/mapfiles/ms/icons/yellow-dot.png",
        size=(32, 32),
    ),
    ReportStatus.RESOLVED: MarkerIcon(
        url="https://maps.google.com/mapfiles/ms/icons/green-dot.png",
        size=(32, 32),
    ),
}

PHOTO_ICON_SIZE = (50, 50)
PHOTO_ICON_ANCHOR = (25, 50)
PHOTO_POPUP_ANCHOR = (0, -50)


def marker_icon(report: Report, icon_mode: IconMode = IconMode.STATUS) -> MarkerIcon:
    """
    Pick the icon for a report.

    In photo mode the first photo becomes the marker image; reports without
    a photo fall back to the status icon.
    """
    if icon_mode == IconMode.PHOTO and report.photos:
        return MarkerIcon(
            url=report.photos[0].url,
            size=PHOTO_ICON_SIZE,
            anchor=PHOTO_ICON_ANCHOR,
            popup_anchor=PHOTO_POPUP_ANCHOR,
        )
    return STATUS_ICONS[report.status]


def marker_popup(report: Report) -> MarkerPopup:
    return MarkerPopup(
        report_id=report.id,
        category=report.category.value,
        authority_id=report.authority,
        authority_name=report.authority_name,
        urgency=report.urgency.value,
        status=report.status.value,
        status_label=report.status.label,
        title=report.title,
        location_label=report.location_label,
        photo_urls=[photo.url for photo in report.photos],
        audio_url=report.audio.url if report.audio else None,
        votes=report.votes,
        comments=list(report.comments),
    )


def project_marker(report: Report, icon_mode: IconMode = IconMode.STATUS) -> MapMarker:
    """Build the marker the map displays for a report."""
    return MapMarker(
        latitude=report.position.latitude,
        longitude=report.position.longitude,
        icon=marker_icon(report, icon_mode),
        popup=marker_popup(report),
    )


def project_markers(reports: Iterable[Report], icon_mode: IconMode = IconMode.STATUS) -> List[MapMarker]:
    """Build markers for a collection of reports, keeping its order."""
    return [project_marker(report, icon_mode) for report in reports]
