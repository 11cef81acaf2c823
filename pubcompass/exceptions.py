"""Errors raised by Pub Compass."""

from typing import Optional


class PubCompassError(Exception):
    """Base class for all Pub Compass errors"""


class SensorUnavailable(PubCompassError):
    """The magnetometer is missing or could not be read"""


class PositionUnavailable(PubCompassError):
    """No position fix could be obtained"""


class PermissionDenied(PositionUnavailable):
    """The platform refused access to the location service"""


class RetrievalError(PubCompassError):
    """A single pub retrieval attempt failed"""


class RetrievalTimeout(RetrievalError):
    """The request did not complete before the deadline"""


class RetrievalHttpError(RetrievalError):
    """The Overpass API answered with a non-2xx status"""

    def __init__(self, status: int):
        super().__init__(f"Overpass API error: {status}")
        self.status = status


class RetrievalNetworkError(RetrievalError):
    """Connection or transport failure"""


class RetrievalMalformedResponse(RetrievalError):
    """The response body was not an Overpass JSON result"""


class RetrievalFailed(RetrievalError):
    """Every attempt failed. Carries the last underlying error."""

    def __init__(self, last_error: Optional[RetrievalError], attempts: int):
        detail = str(last_error) if last_error else "unknown error"
        super().__init__(f"Pub retrieval failed after {attempts} attempts: {detail}")
        self.last_error = last_error
        self.attempts = attempts
