"""Main Pub Compass application."""

import threading
from dataclasses import dataclass
from typing import Optional

from .config import CONFIG
from .exceptions import PositionUnavailable, RetrievalFailed
from .geo import (
    adjust_offset,
    arrow_rotation,
    bearing,
    bearing_to_compass,
    format_distance,
    normalize_offset,
    relative_direction,
)
from .heading import HeadingTracker
from .logger import Logger
from .models import GeoPoint, PointOfInterest
from .overpass import PubFetcher


@dataclass(frozen=True)
class Pointer:
    """Where to point the arrow for one rendered frame"""
    pub: PointOfInterest
    bearing: float  # degrees from north to the pub
    distance_meters: float
    distance_text: str
    rotation: float  # arrow rotation on screen
    compass: str  # "northeast" etc.
    direction: str  # relative to the device heading


class PubCompass:
    """Keeps the nearest pubs for the current position and points at the closest"""

    def __init__(self, fetcher: PubFetcher, position_source,
                 heading_tracker: Optional[HeadingTracker] = None,
                 radius: Optional[float] = None,
                 offset: Optional[float] = None,
                 logger: Optional[Logger] = None):
        self.fetcher = fetcher
        self.position_source = position_source
        self.heading_tracker = heading_tracker
        self.radius = radius if radius is not None else CONFIG["search_radius"]
        self._offset = normalize_offset(CONFIG["compass_offset"] if offset is None else offset)
        self.logger = logger or fetcher.logger

        self.position: Optional[GeoPoint] = None
        self.pubs: list[PointOfInterest] = []

        # Overlapping refreshes all run; only the newest one's result is kept
        self._lock = threading.Lock()
        self._generation = 0

    @property
    def nearest(self) -> Optional[PointOfInterest]:
        pubs = self.pubs
        return pubs[0] if pubs else None

    @property
    def heading(self) -> float:
        if self.heading_tracker and self.heading_tracker.is_running:
            return self.heading_tracker.heading
        return 0.0

    @property
    def offset(self) -> float:
        return self._offset

    def adjust_offset(self, delta: float) -> float:
        """Nudge the compass calibration by delta degrees"""
        self._offset = adjust_offset(self._offset, delta)
        self.logger.log("Compass offset changed", {"offset": self._offset})
        return self._offset

    def reset_offset(self) -> float:
        self._offset = normalize_offset(CONFIG["compass_offset"])
        return self._offset

    def refresh(self) -> list[PointOfInterest]:
        """Re-read the position and search for pubs around it"""
        with self._lock:
            self._generation += 1
            generation = self._generation

        position = self.position_source.get_location()
        if position is None:
            self.logger.log("Could not get location")
            raise PositionUnavailable("Failed to get location. Please try again.")

        self.logger.log("Searching for nearby pubs", {
            "lat": position.latitude, "lon": position.longitude, "radius": self.radius,
        })
        try:
            pubs = self.fetcher.fetch_nearby(position, self.radius)
        except RetrievalFailed as e:
            self.logger.error("Failed to find nearby pubs", e)
            raise

        with self._lock:
            if generation == self._generation:
                self.position = position
                self.pubs = pubs
            else:
                self.logger.log("Discarding stale pub search", {"generation": generation})

        if pubs:
            self.logger.log("Nearest pub", {"name": pubs[0].name,
                                            "distance": format_distance(pubs[0].distance_meters)})
        else:
            self.logger.log("No pubs found", {"radius": self.radius})
        return pubs

    def _snapshot(self) -> tuple[Optional[GeoPoint], list[PointOfInterest]]:
        # Position and pubs are replaced together by refresh()
        with self._lock:
            return self.position, self.pubs

    def pointer(self) -> Optional[Pointer]:
        """Arrow state for the nearest pub, or None without a position or a pub"""
        position, pubs = self._snapshot()
        if position is None or not pubs:
            return None
        pub = pubs[0]

        target = bearing(position.latitude, position.longitude,
                         pub.latitude, pub.longitude)
        heading = self.heading
        return Pointer(
            pub=pub,
            bearing=target,
            distance_meters=pub.distance_meters,
            distance_text=format_distance(pub.distance_meters),
            rotation=arrow_rotation(target, heading, self._offset),
            compass=bearing_to_compass(target),
            direction=relative_direction(heading, target),
        )

    def get_state(self) -> dict:
        """Get current state as dict for logging"""
        position, pubs = self._snapshot()
        return {
            "position": position.to_dict() if position else None,
            "pubs_found": len(pubs),
            "nearest": pubs[0].to_dict() if pubs else None,
            "heading": round(self.heading, 1),
            "compass_error": str(self.heading_tracker.error)
            if self.heading_tracker and self.heading_tracker.error else None,
            "offset": self._offset,
        }
