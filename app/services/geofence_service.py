"""지오펜스 판정 서비스 — 숙소 좌표 기준 반경 판정.

Geofence Service — Default geofence authority. Compares an observed
coordinate with the property's stored anchor using the great-circle
distance and the configured allowed radius.
"""

import math

from app.config import settings
from app.models.property import Property
from app.services.geofence_guard import Coordinate, GeofenceVerdict

# 지구 평균 반지름(m) — Mean Earth radius in meters
EARTH_RADIUS_METERS: float = 6_371_000.0


def haversine_meters(a_lat: float, a_lng: float, b_lat: float, b_lng: float) -> float:
    """두 좌표 사이의 대원 거리(m) (Great-circle distance in meters)."""
    phi1, phi2 = math.radians(a_lat), math.radians(b_lat)
    d_phi = math.radians(b_lat - a_lat)
    d_lambda = math.radians(b_lng - a_lng)
    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(h)))


class GeofenceService:
    """반경 기반 지오펜스 판정 기관.

    Radius-based geofence authority. A property without a stored anchor
    has no geofence and every coordinate is accepted.
    """

    def __init__(self, radius_meters: float | None = None) -> None:
        self._radius_meters: float | None = radius_meters

    @property
    def radius_meters(self) -> float:
        if self._radius_meters is not None:
            return self._radius_meters
        return settings.GEOFENCE_RADIUS_METERS

    async def verify(self, property_: Property, coordinate: Coordinate) -> GeofenceVerdict:
        """좌표가 허용 반경 안인지 판정합니다 (Decide whether the coordinate is in range)."""
        allowed: float = self.radius_meters
        if property_.latitude is None or property_.longitude is None:
            return GeofenceVerdict(within_range=True, distance_meters=None, allowed_meters=allowed)

        distance: float = haversine_meters(
            property_.latitude, property_.longitude, coordinate.latitude, coordinate.longitude
        )
        return GeofenceVerdict(within_range=distance <= allowed, distance_meters=distance, allowed_meters=allowed)


# 싱글턴 인스턴스 — Singleton instance
geofence_service: GeofenceService = GeofenceService()
