"""
Error taxonomy for report submission and complaint handling.

Every error carries a user-facing message and the HTTP status code the API
answers with, in the same way ``AuthError`` does for authentication.
"""


class ReportError(Exception):
    """Base class for recoverable report errors."""

    error_type = "report_error"

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


# Validation errors


class MissingFieldError(ReportError):
    """A required draft field is absent or blank."""

    error_type = "missing_required_field"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing required field: {field}", status_code=400)


class InvalidFieldError(ReportError):
    """A draft field holds a value outside its allowed set."""

    error_type = "invalid_field"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message, status_code=400)


class InvalidCoordinatesError(ReportError):
    """Coordinates text is malformed or out of range."""

    error_type = "invalid_coordinates"

    def __init__(self, message: str = "Invalid coordinates"):
        super().__init__(message, status_code=400)


# External dependency errors


class LocationUnavailableError(ReportError):
    """The device geolocation was denied or is unavailable."""

    error_type = "location_unavailable"

    def __init__(self, message: str = "Unable to fetch current location"):
        super().__init__(message, status_code=422)


class LocationNotFoundError(ReportError):
    """The geocoding oracle returned no match for an address."""

    error_type = "location_not_found"

    def __init__(self, address: str):
        self.address = address
        super().__init__(
            f"Could not find location '{address}'. Try a more specific address.",
            status_code=404,
        )


class GeocodingUnavailableError(ReportError):
    """The geocoding oracle could not be reached."""

    error_type = "geocoding_unavailable"

    def __init__(self, message: str = "Geocoding service unavailable"):
        super().__init__(message, status_code=503)


class MediaPermissionDeniedError(ReportError):
    """The media capture device could not be acquired."""

    error_type = "media_permission_denied"

    def __init__(self, message: str = "Microphone access is required for recording"):
        super().__init__(message, status_code=403)


class RecordingInProgressError(ReportError):
    """A recording session is already active."""

    error_type = "recording_in_progress"

    def __init__(self):
        super().__init__("A recording is already in progress", status_code=409)


# Lifecycle errors


class SubmissionInProgressError(ReportError):
    """A submission is already resolving its location for this draft."""

    error_type = "submission_in_progress"

    def __init__(self):
        super().__init__("A submission is already in progress", status_code=409)


class StaleSubmissionError(ReportError):
    """The draft was reset while its location was being resolved."""

    error_type = "stale_submission"

    def __init__(self):
        super().__init__("The draft changed while the location was resolving", status_code=409)


class ReportNotFoundError(ReportError):
    """No report exists with the requested id."""

    error_type = "not_found"

    def __init__(self, report_id):
        self.report_id = report_id
        super().__init__("Complaint not found", status_code=404)
