import math
from typing import NamedTuple, Optional, Tuple

EARTH_RADIUS_MILES = 3959.0

# slack so float rounding never drops a point sitting on the circle
_BOX_MARGIN_DEG = 1e-6


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in miles between two (lat, lon) points."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return 2 * EARTH_RADIUS_MILES * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def parse_coordinate(value, low: float, high: float) -> Optional[float]:
    """Float within [low, high], or None for anything unparseable or out of range."""
    if value is None or isinstance(value, bool):
        return None
    try:
        v = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(v) or v < low or v > high:
        return None
    return v


def parse_lat_lng(lat, lng) -> Optional[Tuple[float, float]]:
    lat_f = parse_coordinate(lat, -90.0, 90.0)
    lng_f = parse_coordinate(lng, -180.0, 180.0)
    if lat_f is None or lng_f is None:
        return None
    return lat_f, lng_f


class BoundingBox(NamedTuple):
    min_lat: float
    max_lat: float
    # None when the box wraps a pole or the antimeridian
    min_lng: Optional[float]
    max_lng: Optional[float]


def bounding_box(lat: float, lng: float, radius_miles: float) -> BoundingBox:
    """Smallest lat/lng box holding every point within ``radius_miles`` of (lat, lng)."""
    d = radius_miles / EARTH_RADIUS_MILES
    d_lat = math.degrees(d) + _BOX_MARGIN_DEG
    min_lat, max_lat = lat - d_lat, lat + d_lat

    if min_lat <= -90 or max_lat >= 90:
        return BoundingBox(max(min_lat, -90.0), min(max_lat, 90.0), None, None)

    d_lng = math.degrees(math.asin(math.sin(d) / math.cos(math.radians(lat)))) + _BOX_MARGIN_DEG
    min_lng, max_lng = lng - d_lng, lng + d_lng
    if min_lng < -180 or max_lng > 180:
        return BoundingBox(min_lat, max_lat, None, None)
    return BoundingBox(min_lat, max_lat, min_lng, max_lng)
