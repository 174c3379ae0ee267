"""지오펜스 가드/판정 테스트.

Geofence tests — start guard sequencing (fix → authority → verdict) with
fake collaborators, and the radius-based authority.
"""

import asyncio

import pytest

from app.models.property import Property
from app.services.geofence_guard import (
    Coordinate,
    GeofenceStartGuard,
    GeofenceVerdict,
    RequestLocationProvider,
)
from app.services.geofence_service import GeofenceService, haversine_meters
from app.utils.exceptions import LocationUnavailable, OutOfRange
from tests.conftest import ANCHOR_LAT, ANCHOR_LNG, north_of_anchor


class FakeProvider:
    def __init__(self, fix: Coordinate | None = None, delay: float = 0.0) -> None:
        self.fix = fix
        self.delay = delay
        self.calls = 0

    async def get_fix(self) -> Coordinate | None:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.fix


class FakeAuthority:
    def __init__(self, verdict: GeofenceVerdict) -> None:
        self.verdict = verdict
        self.calls: list[Coordinate] = []

    async def verify(self, property_: Property, coordinate: Coordinate) -> GeofenceVerdict:
        self.calls.append(coordinate)
        return self.verdict


HERE = Coordinate(latitude=ANCHOR_LAT, longitude=ANCHOR_LNG)


class TestGeofenceStartGuard:
    """시작 가드."""

    async def test_within_range_passes(self):
        authority = FakeAuthority(GeofenceVerdict(within_range=True, distance_meters=10, allowed_meters=50))
        guard = GeofenceStartGuard(authority, timeout_seconds=1)

        verdict = await guard.check(Property(name="p"), FakeProvider(HERE))

        assert verdict.within_range is True
        assert authority.calls == [HERE]

    async def test_out_of_range_carries_numbers(self):
        """범위 밖: 120m / 허용 50m 그대로 전달."""
        authority = FakeAuthority(GeofenceVerdict(within_range=False, distance_meters=120, allowed_meters=50))
        guard = GeofenceStartGuard(authority, timeout_seconds=1)

        with pytest.raises(OutOfRange) as exc:
            await guard.check(Property(name="p"), FakeProvider(HERE))

        assert exc.value.distance_meters == 120
        assert exc.value.allowed_meters == 50
        assert exc.value.detail["code"] == "out_of_range"
        assert exc.value.detail["message"] == "You are ~120m away; allowed 50m"

    async def test_no_fix_never_contacts_authority(self):
        authority = FakeAuthority(GeofenceVerdict(within_range=True))
        guard = GeofenceStartGuard(authority, timeout_seconds=1)

        with pytest.raises(LocationUnavailable):
            await guard.check(Property(name="p"), FakeProvider(None))
        assert authority.calls == []

    async def test_fix_timeout(self):
        authority = FakeAuthority(GeofenceVerdict(within_range=True))
        guard = GeofenceStartGuard(authority, timeout_seconds=0.01)
        provider = FakeProvider(HERE, delay=1.0)

        with pytest.raises(LocationUnavailable):
            await guard.check(Property(name="p"), provider)
        assert provider.calls == 1
        assert authority.calls == []

    async def test_request_provider_without_coordinates(self):
        authority = FakeAuthority(GeofenceVerdict(within_range=True))
        guard = GeofenceStartGuard(authority, timeout_seconds=1)

        with pytest.raises(LocationUnavailable) as exc:
            await guard.check(Property(name="p"), RequestLocationProvider(None))
        assert exc.value.detail["code"] == "location_unavailable"


class TestGeofenceService:
    """반경 기반 판정."""

    def test_haversine_one_degree_latitude(self):
        assert haversine_meters(0, 0, 1, 0) == pytest.approx(111_194.93, rel=1e-4)

    async def test_inside_radius(self):
        service = GeofenceService(radius_meters=150)
        prop = Property(name="p", latitude=ANCHOR_LAT, longitude=ANCHOR_LNG)

        verdict = await service.verify(prop, Coordinate(**north_of_anchor(100)))

        assert verdict.within_range is True
        assert verdict.distance_meters == pytest.approx(100, abs=0.5)
        assert verdict.allowed_meters == 150

    async def test_outside_radius(self):
        service = GeofenceService(radius_meters=50)
        prop = Property(name="p", latitude=ANCHOR_LAT, longitude=ANCHOR_LNG)

        verdict = await service.verify(prop, Coordinate(**north_of_anchor(120)))

        assert verdict.within_range is False
        assert verdict.distance_meters == pytest.approx(120, abs=0.5)

    async def test_property_without_anchor_accepts_any_location(self):
        service = GeofenceService(radius_meters=50)
        verdict = await service.verify(Property(name="p"), HERE)

        assert verdict.within_range is True
        assert verdict.distance_meters is None

    async def test_default_radius_from_settings(self, isolated_settings, monkeypatch):
        monkeypatch.setattr(isolated_settings, "GEOFENCE_RADIUS_METERS", 75.0)
        assert GeofenceService().radius_meters == 75.0
