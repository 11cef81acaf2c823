"""Device position sources."""

import json
import subprocess
from typing import Optional

from .config import CONFIG
from .exceptions import PermissionDenied
from .models import GeoPoint


class GPS:
    """GPS access via Termux API"""

    def __init__(self):
        self.last_location: Optional[GeoPoint] = None
        self.last_accuracy: Optional[float] = None
        self.consecutive_failures = 0

    def get_location(self, timeout: Optional[int] = None) -> Optional[GeoPoint]:
        """Get current location using termux-location"""
        try:
            result = subprocess.run(
                ["termux-location", "-p", "gps", "-r", "once"],
                capture_output=True,
                text=True,
                timeout=timeout or CONFIG["gps_timeout"]
            )
        except (subprocess.TimeoutExpired, FileNotFoundError):
            self.consecutive_failures += 1
            return None

        if result.returncode != 0:
            self.consecutive_failures += 1
            if result.stderr and "permission" in result.stderr.lower():
                raise PermissionDenied(
                    "Location permission denied. Please enable location access in settings."
                )
            return None

        if not result.stdout or not result.stdout.strip():
            self.consecutive_failures += 1
            return None

        try:
            data = json.loads(result.stdout)
            location = GeoPoint(latitude=data["latitude"], longitude=data["longitude"])
        except (json.JSONDecodeError, KeyError, TypeError):
            self.consecutive_failures += 1
            return None

        self.last_location = location
        self.last_accuracy = data.get("accuracy")
        self.consecutive_failures = 0
        return location

    def get_status(self) -> str:
        """Get GPS status string"""
        if self.consecutive_failures == 0:
            acc = f", accuracy {self.last_accuracy:.0f}m" if self.last_accuracy else ""
            return f"GPS OK{acc}"
        else:
            return f"GPS: {self.consecutive_failures} consecutive failures"


class FixedPosition:
    """Position source that always reports the same point"""

    def __init__(self, latitude: float, longitude: float):
        self.last_location = GeoPoint(latitude, longitude)

    def get_location(self, timeout: Optional[int] = None) -> Optional[GeoPoint]:
        return self.last_location

    def get_status(self) -> str:
        return "Fixed position"
