"""Data classes for Pub Compass."""

import math
from dataclasses import dataclass, asdict
from typing import Optional, Union

from .config import CONFIG


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "GeoPoint":
        return cls(latitude=d["latitude"], longitude=d["longitude"])


@dataclass(frozen=True)
class PointOfInterest:
    """A pub or bar returned by a nearby search"""
    id: int
    name: str
    position: GeoPoint
    distance_meters: float  # from the search origin, computed locally

    @property
    def latitude(self) -> float:
        return self.position.latitude

    @property
    def longitude(self) -> float:
        return self.position.longitude

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "distance_meters": self.distance_meters,
        }


@dataclass(frozen=True)
class HeadingSample:
    """Raw two-axis magnetometer reading"""
    x: float
    y: float

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


@dataclass(frozen=True)
class RetrievalQuery:
    origin: GeoPoint
    radius_meters: float

    def __post_init__(self):
        if not self.radius_meters > 0:
            raise ValueError(f"radius_meters must be positive, got {self.radius_meters!r}")


# Overpass result elements. A node carries its own coordinate, a way only
# carries a centroid when queried with "out center", anything else is unusable.

@dataclass(frozen=True)
class NodeElement:
    id: int
    name: str
    position: GeoPoint


@dataclass(frozen=True)
class AreaElement:
    id: int
    name: str
    center: GeoPoint

    @property
    def position(self) -> GeoPoint:
        return self.center


@dataclass(frozen=True)
class InvalidElement:
    id: Optional[int]

    @property
    def position(self) -> None:
        return None


OverpassElement = Union[NodeElement, AreaElement, InvalidElement]


def _coordinate(container) -> Optional[GeoPoint]:
    """GeoPoint from a dict holding numeric "lat" and "lon", else None"""
    if not isinstance(container, dict):
        return None
    lat, lon = container.get("lat"), container.get("lon")
    if isinstance(lat, bool) or isinstance(lon, bool):
        return None
    if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
        return None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    return GeoPoint(float(lat), float(lon))


def parse_element(raw: dict) -> OverpassElement:
    """Classify one raw Overpass element as a node, an area or invalid."""
    element_id = raw.get("id") if isinstance(raw, dict) else None
    if isinstance(element_id, bool) or not isinstance(element_id, int):
        return InvalidElement(id=None)

    tags = raw.get("tags") or {}
    name = tags.get("name") if isinstance(tags, dict) else None
    if not isinstance(name, str):
        name = CONFIG["default_pub_name"]

    position = _coordinate(raw)
    if position:
        return NodeElement(id=element_id, name=name, position=position)

    center = _coordinate(raw.get("center"))
    if center:
        return AreaElement(id=element_id, name=name, center=center)

    return InvalidElement(id=element_id)
