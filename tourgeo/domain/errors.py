"""
Domain error taxonomy.

Pure computational errors (validation, malformed polyline) and missing
referenced entities are surfaced to the caller.  ``ProviderUnavailable`` is
raised by directions-provider clients and recovered inside
``RouteSynthesizer``; it never escapes a route build.

``status_code`` is the HTTP status the API layer maps each error to.
"""


class TourGeoError(Exception):
    status_code = 400


class ValidationError(TourGeoError):
    """Malformed query or route request."""

    status_code = 422


class NotFound(TourGeoError):
    """Referenced entity ids are absent from the repository."""

    status_code = 404

    def __init__(self, message: str, missing_ids: list | None = None):
        super().__init__(message)
        self.missing_ids = list(missing_ids or [])


class MalformedPolyline(TourGeoError):
    """Encoded path is corrupt (dangling continuation, bad characters)."""

    status_code = 400


class ProviderUnavailable(TourGeoError):
    """External directions provider failed, timed out, or sent an unusable payload."""

    status_code = 503
