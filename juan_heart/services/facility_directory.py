"""Healthcare facility directory.

The directory is the source of truth for facility records (address,
coordinates, contact numbers, hours). Two backends are available:

- ``StaticFacilityDirectory``: a bundled list of Metro Manila facilities,
  used in development and tests.
- ``HttpFacilityDirectory``: fetches records from the Juan Heart backend
  with ``httpx``.

Both rank the records locally with the facility ranker so distance,
filtering and ordering rules are the same whichever backend is active.
Transport errors from the HTTP backend propagate unchanged, and a body that
is not JSON (or not a list of records) is raised as ``httpx.DecodingError``
so callers see every directory failure as ``httpx.HTTPError``. There is no
retry here.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Sequence
import httpx
from pydantic import ValidationError
from juan_heart.config.settings import settings
from juan_heart.models.care import FacilityType
from juan_heart.models.referral import GeoPoint, HealthcareFacility
from juan_heart.services import facility_ranker
from juan_heart.utils.exceptions import LocationUnavailableError
import logging

logger = logging.getLogger(__name__)


class FacilityDirectory(ABC):
    """Async source of healthcare facilities."""

    @abstractmethod
    async def list_facilities(self, origin: GeoPoint, max_distance_km: float) -> List[HealthcareFacility]:
        """Return candidate facilities around ``origin`` (unranked)."""

    @abstractmethod
    async def get_facility_by_id(self, facility_id: str) -> Optional[HealthcareFacility]:
        """Return a single facility or None if it does not exist."""

    async def get_nearby_facilities(
        self,
        origin: Optional[GeoPoint],
        types: Optional[Sequence[FacilityType]] = None,
        max_distance_km: Optional[float] = None,
        max_results: Optional[int] = None,
    ) -> List[HealthcareFacility]:
        """
        Get nearby healthcare facilities.

        Args:
            origin: Patient location
            types: Only return these facility types (optional)
            max_distance_km: Search radius (default from settings)
            max_results: Maximum number of results (default from settings)

        Returns:
            Facilities nearest first, each with ``distance_km`` set

        Raises:
            LocationUnavailableError: If origin is None
            httpx.HTTPError: If the directory request fails
        """
        if origin is None:
            raise LocationUnavailableError()
        if max_distance_km is None:
            max_distance_km = settings.facility_search_max_distance_km
        if max_results is None:
            max_results = settings.facility_search_max_results

        candidates = await self.list_facilities(origin, max_distance_km)
        return facility_ranker.rank(
            origin,
            candidates,
            filter_types=types,
            max_distance_km=max_distance_km,
            max_results=max_results,
        )

    async def get_emergency_facilities(
        self,
        origin: Optional[GeoPoint],
        max_distance_km: Optional[float] = None,
    ) -> List[HealthcareFacility]:
        """Get the nearest emergency facilities only."""
        if origin is None:
            raise LocationUnavailableError()
        if max_distance_km is None:
            max_distance_km = settings.facility_search_max_distance_km

        candidates = await self.list_facilities(origin, max_distance_km)
        return facility_ranker.rank(
            origin,
            candidates,
            max_distance_km=max_distance_km,
            max_results=settings.emergency_search_max_results,
            emergency=True,
        )


class StaticFacilityDirectory(FacilityDirectory):
    """Directory backed by an in-memory list of facilities."""

    def __init__(self, facilities: Optional[Iterable[HealthcareFacility]] = None):
        self._facilities = list(facilities) if facilities is not None else metro_manila_facilities()

    async def list_facilities(self, origin: GeoPoint, max_distance_km: float) -> List[HealthcareFacility]:
        return list(self._facilities)

    async def get_facility_by_id(self, facility_id: str) -> Optional[HealthcareFacility]:
        for facility in self._facilities:
            if facility.id == facility_id:
                return facility
        return None


class HttpFacilityDirectory(FacilityDirectory):
    """Directory backed by the Juan Heart facilities API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.facility_directory_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.facility_directory_api_key
        self.timeout = timeout if timeout is not None else settings.facility_directory_timeout_s
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=self._headers(),
            transport=self._transport,
        ) as client:
            return await client.get(path, params=params)

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            # A 200 with an HTML or truncated body is still a directory failure
            raise httpx.DecodingError(
                f"Facility directory returned a non-JSON body: {e}", request=resp.request
            ) from e

    @staticmethod
    def _decode(record: Any) -> Optional[HealthcareFacility]:
        if not isinstance(record, dict):
            logger.warning(f"Skipping facility record of type {type(record).__name__}")
            return None
        try:
            # distanceKm from the server is relative to its own query point
            return HealthcareFacility.model_validate({**record, "distanceKm": None})
        except ValidationError as e:
            logger.warning(f"Skipping malformed facility record {record.get('id')!r}: {e.error_count()} errors")
            return None

    async def list_facilities(self, origin: GeoPoint, max_distance_km: float) -> List[HealthcareFacility]:
        resp = await self._get(
            "/facilities",
            params={
                "latitude": origin.latitude,
                "longitude": origin.longitude,
                "radiusKm": max_distance_km,
            },
        )
        resp.raise_for_status()
        data = self._json(resp)

        records = data.get("facilities", []) if isinstance(data, dict) else data
        if not isinstance(records, list):
            raise httpx.DecodingError(
                f"Facility directory returned {type(records).__name__}, expected a list",
                request=resp.request,
            )

        facilities = []
        for record in records:
            facility = self._decode(record)
            if facility is not None:
                facilities.append(facility)

        logger.info(f"Fetched {len(facilities)} facilities from {self.base_url}")
        return facilities

    async def get_facility_by_id(self, facility_id: str) -> Optional[HealthcareFacility]:
        resp = await self._get(f"/facilities/{facility_id}")
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return self._decode(self._json(resp))


def metro_manila_facilities() -> List[HealthcareFacility]:
    """Bundled facility list for the Metro Manila area."""
    return [
        HealthcareFacility(
            id="phc-001",
            name="Philippine Heart Center",
            type=FacilityType.HOSPITAL,
            address="East Avenue, Diliman, Quezon City, 1100 Metro Manila",
            latitude=14.6490,
            longitude=121.0479,
            contact_number="(02) 8925-2401",
            emergency_number="(02) 8925-2401",
            is_24_hours=True,
            services=["Cardiology", "Emergency Care", "ICU", "Cardiac Surgery"],
            description="National tertiary cardiovascular center providing specialized heart care",
        ),
        HealthcareFacility(
            id="ncmh-001",
            name="National Center for Mental Health",
            type=FacilityType.HOSPITAL,
            address="Nueve de Febrero Street, Mauway, Mandaluyong, Metro Manila",
            latitude=14.5728,
            longitude=121.0288,
            contact_number="(02) 8531-9001",
            is_24_hours=True,
            services=["Emergency Care", "General Medicine", "Mental Health"],
            description="National government hospital providing comprehensive health services",
        ),
        HealthcareFacility(
            id="qcgh-001",
            name="Quezon City General Hospital",
            type=FacilityType.EMERGENCY_FACILITY,
            address="Seminary Road, Bahay Toro, Project 8, Quezon City",
            latitude=14.6869,
            longitude=121.0525,
            contact_number="(02) 8426-1314",
            emergency_number="(02) 8426-1314",
            is_24_hours=True,
            services=["Emergency Care", "General Medicine", "Surgery", "Cardiology"],
            description="City-run hospital with 24/7 emergency services",
        ),
        HealthcareFacility(
            id="mdh-001",
            name="Manila Doctors Hospital",
            type=FacilityType.HOSPITAL,
            address="667 United Nations Avenue, Ermita, Manila",
            latitude=14.5831,
            longitude=120.9831,
            contact_number="(02) 8558-0888",
            emergency_number="(02) 8524-3011",
            is_24_hours=True,
            services=["Emergency Care", "Cardiology", "ICU", "General Medicine"],
            description="Private tertiary hospital with comprehensive cardiac services",
        ),
        HealthcareFacility(
            id="slmc-qc-001",
            name="St. Luke's Medical Center - Quezon City",
            type=FacilityType.HOSPITAL,
            address="279 E Rodriguez Sr. Avenue, Cathedral Heights, Quezon City",
            latitude=14.6231,
            longitude=121.0344,
            contact_number="(02) 8723-0101",
            emergency_number="(02) 8723-0301",
            is_24_hours=True,
            services=["Emergency Care", "Cardiology", "Cardiac Surgery", "ICU"],
            description="Premier tertiary hospital with world-class cardiac care",
        ),
        HealthcareFacility(
            id="bhc-batasan-001",
            name="Batasan Hills Barangay Health Center",
            type=FacilityType.BARANGAY_HEALTH_CENTER,
            address="Batasan Hills, Quezon City",
            latitude=14.6833,
            longitude=121.1098,
            contact_number="(02) 8937-5432",
            is_24_hours=False,
            services=["Primary Care", "Consultation", "Blood Pressure Monitoring"],
            description="Community health center providing basic medical services",
        ),
        HealthcareFacility(
            id="mmc-001",
            name="Makati Medical Center",
            type=FacilityType.HOSPITAL,
            address="2 Amorsolo Street, Legaspi Village, Makati City",
            latitude=14.5623,
            longitude=121.0166,
            contact_number="(02) 8888-8999",
            emergency_number="(02) 8815-9911",
            is_24_hours=True,
            services=["Emergency Care", "Cardiology", "ICU", "Cardiac Surgery"],
            description="Leading private hospital with comprehensive heart care",
        ),
        HealthcareFacility(
            id="pcc-cubao-001",
            name="Cubao Medical Clinic",
            type=FacilityType.PRIMARY_CARE_CLINIC,
            address="P. Tuazon Boulevard, Cubao, Quezon City",
            latitude=14.6189,
            longitude=121.0512,
            contact_number="(02) 8912-3456",
            is_24_hours=False,
            services=["General Consultation", "ECG", "Blood Pressure Monitoring"],
            description="Walk-in clinic for routine medical consultations",
        ),
        HealthcareFacility(
            id="vmmc-001",
            name="Veterans Memorial Medical Center",
            type=FacilityType.HOSPITAL,
            address="North Avenue, Diliman, Quezon City",
            latitude=14.6518,
            longitude=121.0425,
            contact_number="(02) 8927-0181",
            emergency_number="(02) 8927-0181",
            is_24_hours=True,
            services=["Emergency Care", "General Medicine", "Surgery", "Cardiology"],
            description="Government tertiary hospital providing affordable healthcare",
        ),
        HealthcareFacility(
            id="bhc-commonwealth-001",
            name="Commonwealth Barangay Health Center",
            type=FacilityType.BARANGAY_HEALTH_CENTER,
            address="Commonwealth Avenue, Quezon City",
            latitude=14.7079,
            longitude=121.0889,
            contact_number="(02) 8953-7890",
            is_24_hours=False,
            services=["Primary Care", "Health Monitoring", "Referrals"],
            description="Community health center for basic healthcare needs",
        ),
    ]


# Global directory instance
_facility_directory: Optional[FacilityDirectory] = None


def get_facility_directory() -> FacilityDirectory:
    """Get or create the configured FacilityDirectory instance."""
    global _facility_directory
    if _facility_directory is None:
        if settings.facility_directory_backend == "http":
            _facility_directory = HttpFacilityDirectory()
        else:
            _facility_directory = StaticFacilityDirectory()
        logger.info(f"Using {type(_facility_directory).__name__} facility directory")
    return _facility_directory
