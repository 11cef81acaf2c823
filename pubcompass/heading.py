"""Compass heading smoothing."""

import math
import threading
from typing import Callable, Optional

from .config import CONFIG
from .exceptions import SensorUnavailable
from .logger import Logger
from .models import HeadingSample
from .sensors import Magnetometer, SensorSubscription


def raw_heading(sample: HeadingSample, orientation_correction: float = 0) -> float:
    """Heading in degrees (0-360) of a raw magnetometer reading"""
    angle = math.degrees(math.atan2(sample.y, sample.x))
    if angle < 0:
        angle += 360
    return (angle + orientation_correction) % 360


class HeadingFilter:
    """Exponential smoothing of headings over the 0-360 circle.

    Each update moves the smoothed heading a fraction (1 - smoothing) of the
    way toward the new reading along the shorter arc, so 350 -> 10 is a
    20 degree step rather than -340.
    """

    def __init__(self, smoothing: Optional[float] = None,
                 orientation_correction: Optional[float] = None):
        self.smoothing = CONFIG["heading_smoothing"] if smoothing is None else smoothing
        if not 0 <= self.smoothing < 1:
            raise ValueError(f"smoothing must be in [0, 1), got {self.smoothing!r}")
        self.orientation_correction = (CONFIG["heading_orientation_correction"]
                                       if orientation_correction is None
                                       else orientation_correction)
        self._heading = 0.0
        self._lock = threading.Lock()

    @property
    def heading(self) -> float:
        return self._heading

    def reset(self):
        with self._lock:
            self._heading = 0.0

    def update(self, sample: HeadingSample) -> float:
        """Fold one sample into the smoothed heading and return it"""
        if not sample.is_finite():
            return self._heading

        angle = raw_heading(sample, self.orientation_correction)

        with self._lock:
            diff = angle - self._heading
            if diff > 180:
                diff -= 360
            elif diff < -180:
                diff += 360

            smoothed = (self._heading + diff * (1 - self.smoothing)) % 360
            if smoothed >= 360:
                smoothed = 0.0
            self._heading = smoothed
            return smoothed


class HeadingTracker:
    """Subscribes a HeadingFilter to a magnetometer.

    A missing or failing sensor puts the tracker into an error state: no more
    headings are emitted until start() is called again.
    """

    def __init__(self, sensor: Magnetometer, logger: Optional[Logger] = None,
                 smoothing: Optional[float] = None,
                 update_interval_ms: Optional[int] = None):
        self.sensor = sensor
        self.logger = logger or Logger()
        self.smoothing = smoothing
        self.update_interval_ms = (update_interval_ms if update_interval_ms is not None
                                   else CONFIG["magnetometer_update_interval_ms"])
        self.filter: Optional[HeadingFilter] = None
        self.error: Optional[SensorUnavailable] = None
        self.subscription: Optional[SensorSubscription] = None
        self.on_heading: Optional[Callable[[float], None]] = None

    @property
    def heading(self) -> float:
        return self.filter.heading if self.filter else 0.0

    @property
    def is_running(self) -> bool:
        return self.subscription is not None and self.subscription.active

    def start(self, on_heading: Optional[Callable[[float], None]] = None) -> bool:
        """Begin streaming headings. Returns False if the sensor is unavailable."""
        self.stop()
        self.error = None
        self.on_heading = on_heading

        try:
            if not self.sensor.is_available():
                self._fail(SensorUnavailable("Compass not available on this device"))
                return False
            self.sensor.set_update_interval(self.update_interval_ms)
            self.filter = HeadingFilter(smoothing=self.smoothing)
            self.subscription = self.sensor.add_listener(self._on_sample, self._on_error)
        except (SensorUnavailable, OSError) as e:
            self._fail(SensorUnavailable(f"Failed to access compass: {e}"))
            return False

        self.logger.log("Compass started", {"interval_ms": self.update_interval_ms})
        return True

    def stop(self):
        if self.subscription:
            self.subscription.remove()
            self.subscription = None

    def _on_sample(self, sample: HeadingSample):
        heading = self.filter.update(sample)
        if self.on_heading:
            self.on_heading(heading)

    def _on_error(self, error: Exception):
        self._fail(error if isinstance(error, SensorUnavailable) else SensorUnavailable(str(error)))
        if self.subscription:
            self.subscription.remove()

    def _fail(self, error: SensorUnavailable):
        self.error = error
        self.logger.error("Compass unavailable", error)
