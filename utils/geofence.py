# app/utils/geofence.py

from math import atan2, cos, isfinite, radians, sin, sqrt
from typing import Optional

from pydantic import BaseModel

from core.errors import InvalidCoordinate

EARTH_RADIUS_KM = 6371.0
COORDINATE_PRECISION = 8


class Coordinate(BaseModel):
    latitude: float
    longitude: float


# Result of checking a reported position against the facility perimeter
class GeofenceVerdict(BaseModel):
    within_perimeter: bool
    distance_km: float
    perimeter_radius_km: float


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    φ1, φ2 = radians(lat1), radians(lat2)
    Δφ = radians(lat2 - lat1)
    Δλ = radians(lng2 - lng1)

    a = sin(Δφ / 2) ** 2 + cos(φ1) * cos(φ2) * sin(Δλ / 2) ** 2
    # Rounding error can push a just outside [0, 1] near antipodes
    a = min(1.0, max(0.0, a))
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def parse_coordinate(
    latitude: Optional[float], longitude: Optional[float]
) -> Coordinate:
    """
    Validate raw client-reported values and return a Coordinate.

    Raises InvalidCoordinate when either value is missing, not finite,
    or outside the geographic range.
    """
    if latitude is None or longitude is None:
        raise InvalidCoordinate("Latitude and longitude required")

    try:
        lat, lng = float(latitude), float(longitude)
    except (TypeError, ValueError):
        raise InvalidCoordinate("Latitude and longitude must be numbers")

    if not (isfinite(lat) and isfinite(lng)):
        raise InvalidCoordinate("Latitude and longitude must be finite numbers")
    if not -90.0 <= lat <= 90.0:
        raise InvalidCoordinate(f"Latitude {lat} is outside [-90, 90]")
    if not -180.0 <= lng <= 180.0:
        raise InvalidCoordinate(f"Longitude {lng} is outside [-180, 180]")

    return Coordinate(
        latitude=round(lat, COORDINATE_PRECISION),
        longitude=round(lng, COORDINATE_PRECISION),
    )


def evaluate(position: Coordinate, facility) -> GeofenceVerdict:
    """
    Compare a position against the facility's circular perimeter.

    The boundary is inclusive and uses the unrounded distance; only the
    reported distance_km is rounded to one decimal place.
    """
    distance = haversine_km(
        position.latitude,
        position.longitude,
        facility.center_latitude,
        facility.center_longitude,
    )
    radius = float(facility.perimeter_radius_km)

    return GeofenceVerdict(
        within_perimeter=distance <= radius,
        distance_km=round(distance, 1),
        perimeter_radius_km=radius,
    )
