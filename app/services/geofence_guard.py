"""지오펜스 시작 가드 — 체크리스트 시작 전 위치 확인 절차.

Geofence Start Guard — Sequences the location precondition of the start
transition. It acquires a single location fix, then hands it to an external
geofence authority and surfaces the authority's verdict. The guard never
measures distance itself.

Flow:
    1. 위치 측정 요청 (Request one location fix; timeout → LocationUnavailable)
    2. 위치 없음 → 즉시 실패, 지오펜스 판정 요청 안 함
       (No fix → fail fast without contacting the authority)
    3. 지오펜스 판정 → 범위 밖이면 거리/허용 반경을 그대로 담아 OutOfRange
       (Out of range → OutOfRange carrying distance/allowed verbatim)
"""

import asyncio
from typing import Protocol

from pydantic import BaseModel, Field

from app.config import settings
from app.models.property import Property
from app.utils.exceptions import LocationUnavailable, OutOfRange


class Coordinate(BaseModel):
    """위도/경도 좌표 (Latitude/longitude reading in decimal degrees)."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class GeofenceVerdict(BaseModel):
    """지오펜스 판정 결과 — 범위 내 여부와 진단 정보.

    Geofence authority verdict: whether the coordinate is within range plus
    the measured distance and allowed radius, when known.
    """

    within_range: bool
    distance_meters: float | None = None
    allowed_meters: float | None = None


class LocationProvider(Protocol):
    """위치 측정 제공자 — 단일 위치 값을 반환하거나 실패합니다.

    Supplies a single location reading. Returns None (or raises
    LocationUnavailable) when no fix can be obtained.
    """

    async def get_fix(self) -> Coordinate | None: ...


class GeofenceAuthority(Protocol):
    """지오펜스 판정 기관 — 숙소 기준 좌표와 허용 반경으로 판정합니다.

    Decides whether an observed coordinate is close enough to a property.
    """

    async def verify(self, property_: Property, coordinate: Coordinate) -> GeofenceVerdict: ...


class RequestLocationProvider:
    """요청 본문에 포함된 위치를 제공합니다 (Location fix taken from the request payload)."""

    def __init__(self, coordinate: Coordinate | None) -> None:
        self._coordinate: Coordinate | None = coordinate

    async def get_fix(self) -> Coordinate | None:
        if self._coordinate is None:
            raise LocationUnavailable("Location permission is required to start this checklist.")
        return self._coordinate


class GeofenceStartGuard:
    """지오펜스 시작 가드.

    Geofence start guard wrapping the start transition with a location
    precondition.

    Attributes:
        authority: 지오펜스 판정 기관 (Geofence authority collaborator)
        timeout_seconds: 위치 측정 대기 시간 (Location fix timeout)
    """

    def __init__(self, authority: GeofenceAuthority, timeout_seconds: float | None = None) -> None:
        self.authority: GeofenceAuthority = authority
        self.timeout_seconds: float = (
            timeout_seconds if timeout_seconds is not None else settings.LOCATION_FIX_TIMEOUT_SECONDS
        )

    async def acquire_fix(self, provider: LocationProvider) -> Coordinate:
        """위치를 1회 측정합니다.

        Acquire one location fix.

        Raises:
            LocationUnavailable: 측정 실패, 시간 초과, 위치 없음 (Failure, timeout or no fix)
        """
        try:
            fix: Coordinate | None = await asyncio.wait_for(provider.get_fix(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            raise LocationUnavailable("Timed out while waiting for your location. Please try again.")

        if fix is None:
            raise LocationUnavailable()
        return fix

    async def check(self, property_: Property, provider: LocationProvider) -> GeofenceVerdict:
        """시작 사전 조건을 검증합니다.

        Run the start precondition: acquire a fix, then ask the authority.

        Args:
            property_: 대상 숙소 (Property being visited)
            provider: 위치 측정 제공자 (Location provider)

        Returns:
            GeofenceVerdict: 범위 내 판정 결과 (Within-range verdict)

        Raises:
            LocationUnavailable: 위치를 얻지 못함 (No fix obtained)
            OutOfRange: 범위 밖 (Outside the allowed radius)
        """
        fix: Coordinate = await self.acquire_fix(provider)

        verdict: GeofenceVerdict = await self.authority.verify(property_, fix)
        if not verdict.within_range:
            raise OutOfRange(
                distance_meters=verdict.distance_meters if verdict.distance_meters is not None else 0.0,
                allowed_meters=verdict.allowed_meters if verdict.allowed_meters is not None else 0.0,
            )
        return verdict
