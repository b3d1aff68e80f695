"""
Pytest Configuration and Fixtures

Shared fixtures for the referral engine, facility directory and API tests.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest

from juan_heart.models.care import FacilityType
from juan_heart.models.referral import GeoPoint, HealthcareFacility, PatientSnapshot
from juan_heart.services.facility_directory import StaticFacilityDirectory
from juan_heart.services.recommendation_engine import CareRecommendationEngine
from juan_heart.services.referral_builder import ReferralSummaryBuilder

# Quezon City / Manila boundary
ORIGIN = GeoPoint(latitude=14.6, longitude=121.0)

# One degree of latitude is ~111.195 km on a 6371 km sphere
KM_PER_DEG_LAT = 111.195


def north_of(origin: GeoPoint, km: float) -> Dict[str, float]:
    """Coordinates ``km`` kilometres due north of ``origin``."""
    return {"latitude": origin.latitude + km / KM_PER_DEG_LAT, "longitude": origin.longitude}


def make_facility(
    facility_id: str,
    km: float,
    facility_type: FacilityType = FacilityType.HOSPITAL,
    is_24_hours: bool = False,
    name: Optional[str] = None,
    **extra: Any,
) -> HealthcareFacility:
    return HealthcareFacility(
        id=facility_id,
        name=name or f"Facility {facility_id}",
        type=facility_type,
        is_24_hours=is_24_hours,
        **north_of(ORIGIN, km),
        **extra,
    )


class FakeCursor:
    """Minimal async cursor over in-memory documents."""

    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs

    def sort(self, key: str, direction: int):
        self._docs.sort(key=lambda d: d[key], reverse=direction < 0)
        return self

    def skip(self, n: int):
        self._docs = self._docs[n:]
        return self

    def limit(self, n: int):
        self._docs = self._docs[:n]
        return self

    def __aiter__(self):
        self._iter = iter(self._docs)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    """In-memory stand-in for a motor collection."""

    def __init__(self):
        self.docs: List[Dict[str, Any]] = []
        self.indexes: List[Any] = []

    @staticmethod
    def _matches(doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
        return all(doc.get(k) == v for k, v in query.items())

    async def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))
        return str(keys)

    async def insert_one(self, doc: Dict[str, Any]):
        self.docs.append({"_id": len(self.docs) + 1, **doc})

    async def find_one(self, query: Dict[str, Any]):
        for doc in self.docs:
            if self._matches(doc, query):
                return dict(doc)
        return None

    async def count_documents(self, query: Dict[str, Any]) -> int:
        return sum(1 for doc in self.docs if self._matches(doc, query))

    def find(self, query: Dict[str, Any]) -> FakeCursor:
        return FakeCursor([dict(d) for d in self.docs if self._matches(d, query)])


@pytest.fixture
def origin() -> GeoPoint:
    return ORIGIN


@pytest.fixture
def engine() -> CareRecommendationEngine:
    return CareRecommendationEngine()


@pytest.fixture
def builder() -> ReferralSummaryBuilder:
    return ReferralSummaryBuilder()


@pytest.fixture
def static_directory() -> StaticFacilityDirectory:
    return StaticFacilityDirectory()


@pytest.fixture
def patient() -> PatientSnapshot:
    return PatientSnapshot(name="Juan dela Cruz", age=58, sex="Male")


@pytest.fixture
def captured_at() -> datetime:
    return datetime(2026, 3, 14, 9, 30)


@pytest.fixture
def selected_facility() -> HealthcareFacility:
    return HealthcareFacility(
        id="qcgh-001",
        name="Quezon City General Hospital",
        type=FacilityType.EMERGENCY_FACILITY,
        address="Seminary Road, Bahay Toro, Project 8, Quezon City",
        latitude=14.6869,
        longitude=121.0525,
        contact_number="(02) 8426-1314",
        emergency_number="(02) 8426-1315",
        is_24_hours=True,
        distance_km=10.2,
    )


@pytest.fixture
def referrals_collection(monkeypatch) -> FakeCollection:
    """Route the referral store to an in-memory collection."""
    collection = FakeCollection()

    async def _get_collection():
        return collection

    monkeypatch.setattr(
        "juan_heart.services.referral_store.get_referrals_collection", _get_collection
    )
    return collection


@pytest.fixture
def facility_factory():
    """Build facilities placed a given distance due north of ORIGIN."""
    return make_facility
