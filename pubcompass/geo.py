"""Geographic utility functions."""

import math
from decimal import Decimal, ROUND_HALF_UP

EARTH_RADIUS = 6371000  # meters


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two points in meters using Haversine formula"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (math.sin(delta_phi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS * c


distance = haversine_distance


def _wrap_degrees(angle: float) -> float:
    """Fold an angle into [0, 360)"""
    wrapped = (angle + 360) % 360
    # -1e-15 % 360 rounds up to exactly 360.0
    return 0.0 if wrapped >= 360 else wrapped


def bearing(from_lat: float, from_lon: float, to_lat: float, to_lon: float) -> float:
    """Initial great-circle bearing from point 1 to point 2 in degrees (0-360, 0=North)"""
    phi1 = math.radians(from_lat)
    phi2 = math.radians(to_lat)
    delta_lambda = math.radians(to_lon - from_lon)

    y = math.sin(delta_lambda) * math.cos(phi2)
    x = (math.cos(phi1) * math.sin(phi2) -
         math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda))

    return _wrap_degrees(math.degrees(math.atan2(y, x)))


def format_distance(meters: float) -> str:
    """Format a distance for display: "850m" below 1km, "1.2km" from there on.

    Both branches round half up, so 500.5 shows as "501m" and 2750 as "2.8km".
    """
    value = Decimal(str(meters))
    if value < 1000:
        return f"{value.quantize(Decimal('1'), rounding=ROUND_HALF_UP)}m"
    km = (value / 1000).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{km}km"


def bearing_to_compass(bearing: float) -> str:
    """Convert bearing to compass direction"""
    directions = ["north", "northeast", "east", "southeast",
                  "south", "southwest", "west", "northwest"]
    index = round(bearing / 45) % 8
    return directions[index]


def relative_direction(from_bearing: float, to_bearing: float) -> str:
    """Get relative direction (left, right, straight, etc.)"""
    diff = (to_bearing - from_bearing + 360) % 360

    if diff < 30 or diff > 330:
        return "straight ahead"
    elif diff < 60:
        return "slight right"
    elif diff < 120:
        return "right"
    elif diff < 150:
        return "sharp right"
    elif diff < 210:
        return "behind you"
    elif diff < 240:
        return "sharp left"
    elif diff < 300:
        return "left"
    else:
        return "slight left"


def arrow_rotation(target_bearing: float, heading: float, offset: float = 180) -> float:
    """Screen rotation of the pointer arrow in degrees (0-360).

    The arrow is drawn relative to the device, so the device heading is
    subtracted from the bearing to the target. `offset` is the calibration
    between the magnetometer frame and the drawn arrow.
    """
    return _wrap_degrees(target_bearing - heading + offset)


def normalize_offset(value: float) -> float:
    """Keep a calibration offset within [-180, 180]"""
    if value > 180:
        value -= 360
    if value < -180:
        value += 360
    return value


def adjust_offset(current: float, delta: float) -> float:
    return normalize_offset(current + delta)
