"""Pub Compass - Point the way to the nearest pub."""

from .config import CONFIG
from .models import (
    GeoPoint,
    PointOfInterest,
    HeadingSample,
    RetrievalQuery,
    NodeElement,
    AreaElement,
    InvalidElement,
    parse_element,
)
from .exceptions import (
    PubCompassError,
    SensorUnavailable,
    PositionUnavailable,
    PermissionDenied,
    RetrievalError,
    RetrievalTimeout,
    RetrievalHttpError,
    RetrievalNetworkError,
    RetrievalMalformedResponse,
    RetrievalFailed,
)
from .logger import Logger
from .geo import (
    haversine_distance,
    distance,
    bearing,
    format_distance,
    bearing_to_compass,
    relative_direction,
    arrow_rotation,
    normalize_offset,
    adjust_offset,
)
from .sensors import Magnetometer, SensorSubscription, TermuxMagnetometer, MagnetometerPlayback
from .heading import HeadingFilter, HeadingTracker, raw_heading
from .gps import GPS, FixedPosition
from .overpass import PubFetcher, fetch_nearby_pubs
from .compass import PubCompass, Pointer

__all__ = [
    "CONFIG",
    "GeoPoint",
    "PointOfInterest",
    "HeadingSample",
    "RetrievalQuery",
    "NodeElement",
    "AreaElement",
    "InvalidElement",
    "parse_element",
    "PubCompassError",
    "SensorUnavailable",
    "PositionUnavailable",
    "PermissionDenied",
    "RetrievalError",
    "RetrievalTimeout",
    "RetrievalHttpError",
    "RetrievalNetworkError",
    "RetrievalMalformedResponse",
    "RetrievalFailed",
    "Logger",
    "haversine_distance",
    "distance",
    "bearing",
    "format_distance",
    "bearing_to_compass",
    "relative_direction",
    "arrow_rotation",
    "normalize_offset",
    "adjust_offset",
    "Magnetometer",
    "SensorSubscription",
    "TermuxMagnetometer",
    "MagnetometerPlayback",
    "HeadingFilter",
    "HeadingTracker",
    "raw_heading",
    "GPS",
    "FixedPosition",
    "PubFetcher",
    "fetch_nearby_pubs",
    "PubCompass",
    "Pointer",
]
