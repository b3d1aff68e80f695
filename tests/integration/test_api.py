"""
Integration Tests for the Referral API

Drives the FastAPI app through httpx's ASGI transport. The facility
directory is the bundled static one and referral storage is the in-memory
collection from conftest, so no MongoDB or network is needed.
"""
import httpx
import pytest

from juan_heart.services.facility_directory import (
    FacilityDirectory,
    HttpFacilityDirectory,
    StaticFacilityDirectory,
    get_facility_directory,
)
from juan_heart.services.referral_service import ReferralService, get_referral_service
from main import app

ORIGIN = {"latitude": 14.6, "longitude": 121.0}


def html_directory():
    """HTTP directory whose upstream answers with an HTML error page."""
    return HttpFacilityDirectory(
        base_url="http://directory.test",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>gateway</html>")),
    )


class BrokenDirectory(FacilityDirectory):
    """Directory whose backend is unreachable."""

    async def list_facilities(self, origin, max_distance_km):
        raise httpx.ConnectError("connection refused")

    async def get_facility_by_id(self, facility_id):
        raise httpx.ConnectError("connection refused")


@pytest.fixture
def directory():
    return StaticFacilityDirectory()


@pytest.fixture
async def async_client(directory, referrals_collection):
    """Create async test client with an in-memory directory and store."""
    app.dependency_overrides[get_facility_directory] = lambda: directory
    app.dependency_overrides[get_referral_service] = lambda: ReferralService(directory=directory)
    try:
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://test"
        ) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


async def _recommend(client, score, category="Test", **params):
    response = await client.post(
        "/api/v1/referral/recommendation",
        json={"riskScore": score, "riskCategory": category},
        params=params,
    )
    assert response.status_code == 200
    return response.json()["recommendation"]


async def _facility(client, facility_id):
    response = await client.get(f"/api/v1/referral/facilities/{facility_id}")
    assert response.status_code == 200
    return response.json()


@pytest.mark.asyncio
class TestServiceEndpoints:
    """Tests for root and health endpoints."""

    async def test_root(self, async_client):
        response = await async_client.get("/")
        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"

    async def test_health_without_database(self, async_client):
        response = await async_client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "ok"
        assert data["dependencies"]["mongodb"].startswith("error")
        assert data["dependencies"]["facility_directory"] == "static"


@pytest.mark.asyncio
class TestRecommendationEndpoint:
    """Tests for POST /recommendation."""

    async def test_emergency(self, async_client):
        response = await async_client.post(
            "/api/v1/referral/recommendation",
            json={"riskScore": 20, "riskCategory": "Critical"},
        )
        assert response.status_code == 200

        data = response.json()
        assert data["recommendation"]["urgency"] == "emergency"
        assert data["recommendation"]["isEmergency"] is True
        assert data["recommendation"]["recommendedFacilities"] == ["emergencyFacility", "hospital"]
        assert data["shouldOfferBooking"] is True
        assert data["actionButtonText"] == "Find Emergency Room"

    async def test_out_of_range_score_is_not_an_error(self, async_client):
        rec = await _recommend(async_client, 40)
        assert rec["urgency"] == "none"
        assert rec["riskScore"] == 25

    async def test_locale_from_body(self, async_client):
        response = await async_client.post(
            "/api/v1/referral/recommendation",
            json={"riskScore": 3, "riskCategory": "Low", "locale": "fil"},
        )
        assert response.json()["recommendation"]["actionTitle"] == "Bantayan ang Iyong Kalusugan"

    async def test_locale_from_accept_language(self, async_client):
        response = await async_client.post(
            "/api/v1/referral/recommendation",
            json={"riskScore": 3, "riskCategory": "Low"},
            headers={"Accept-Language": "fil-PH,fil;q=0.9,en;q=0.8"},
        )
        assert response.json()["actionButtonText"] == "Maghanap ng Health Center"

    async def test_missing_score_rejected(self, async_client):
        response = await async_client.post(
            "/api/v1/referral/recommendation", json={"riskCategory": "Low"}
        )
        assert response.status_code == 422


@pytest.mark.asyncio
class TestFacilitySearchEndpoint:
    """Tests for POST /facilities."""

    async def test_emergency_search(self, async_client):
        rec = await _recommend(async_client, 22, "Critical")

        response = await async_client.post(
            "/api/v1/referral/facilities",
            json={"location": ORIGIN, "recommendation": rec},
        )
        assert response.status_code == 200

        data = response.json()
        assert data["total"] == 1
        item = data["facilities"][0]
        assert item["facility"]["id"] == "qcgh-001"
        assert item["facility"]["distanceKm"] == pytest.approx(11.2, abs=0.2)
        assert item["distanceText"].endswith("km away")
        assert item["badge"] == "emergencyReady"
        assert item["badgeLabel"] == "Emergency Ready"

    async def test_without_recommendation_lists_everything(self, async_client):
        response = await async_client.post(
            "/api/v1/referral/facilities", json={"location": ORIGIN}
        )

        data = response.json()
        assert data["total"] == 10
        assert data["filter"] == "all"
        assert all(item["badge"] is None for item in data["facilities"])

    async def test_filter_chip(self, async_client):
        response = await async_client.post(
            "/api/v1/referral/facilities",
            json={"location": ORIGIN, "filter": "nearest"},
        )

        data = response.json()
        assert data["total"] == 5
        assert data["totalUnfiltered"] == 10

    async def test_radius(self, async_client):
        response = await async_client.post(
            "/api/v1/referral/facilities",
            json={"location": ORIGIN, "maxDistanceKm": 5},
        )
        assert all(item["facility"]["distanceKm"] <= 5 for item in response.json()["facilities"])

    async def test_missing_location(self, async_client):
        rec = await _recommend(async_client, 12, "High")

        response = await async_client.post(
            "/api/v1/referral/facilities", json={"recommendation": rec}
        )
        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "LOCATION_UNAVAILABLE"

    async def test_invalid_location(self, async_client):
        response = await async_client.post(
            "/api/v1/referral/facilities",
            json={"location": {"latitude": 120, "longitude": 121.0}},
        )
        assert response.status_code == 422

    async def test_directory_unavailable(self, async_client):
        broken = BrokenDirectory()
        app.dependency_overrides[get_referral_service] = lambda: ReferralService(directory=broken)

        response = await async_client.post(
            "/api/v1/referral/facilities", json={"location": ORIGIN}
        )
        assert response.status_code == 502
        assert response.json()["detail"]["error"] == "DIRECTORY_UNAVAILABLE"

    async def test_directory_returns_html(self, async_client):
        directory = html_directory()
        app.dependency_overrides[get_referral_service] = lambda: ReferralService(directory=directory)

        response = await async_client.post(
            "/api/v1/referral/facilities", json={"location": ORIGIN}
        )
        assert response.status_code == 502
        assert response.json()["detail"]["error"] == "DIRECTORY_UNAVAILABLE"


@pytest.mark.asyncio
class TestFacilityEndpoint:
    """Tests for GET /facilities/{facility_id}."""

    async def test_found(self, async_client):
        data = await _facility(async_client, "phc-001")

        assert data["name"] == "Philippine Heart Center"
        assert data["typeName"] == "Hospital"
        assert data["primaryContact"] == "(02) 8925-2401"
        assert data["mapsUrl"].startswith("https://www.google.com/maps/dir/?api=1&destination=")

    async def test_not_found(self, async_client):
        response = await async_client.get("/api/v1/referral/facilities/unknown")
        assert response.status_code == 404

    async def test_directory_unavailable(self, async_client):
        app.dependency_overrides[get_facility_directory] = lambda: BrokenDirectory()

        response = await async_client.get("/api/v1/referral/facilities/phc-001")
        assert response.status_code == 502

    async def test_directory_returns_html(self, async_client):
        app.dependency_overrides[get_facility_directory] = html_directory

        response = await async_client.get("/api/v1/referral/facilities/phc-001")
        assert response.status_code == 502


@pytest.mark.asyncio
class TestSummaryEndpoints:
    """Tests for creating, reading and sharing referral summaries."""

    async def test_create_and_get(self, async_client):
        rec = await _recommend(async_client, 20, "Critical")
        facility = await _facility(async_client, "qcgh-001")

        response = await async_client.post(
            "/api/v1/referral/summaries",
            json={
                "recommendation": rec,
                "facility": facility,
                "patient": {"name": "Juan dela Cruz", "age": 58, "sex": "Male"},
            },
        )
        assert response.status_code == 201

        created = response.json()
        assert created["isDraft"] is False
        assert created["patientName"] == "Juan dela Cruz"
        assert created["qrPayload"].startswith("Quezon City General Hospital|https://www.google.com/maps/")

        response = await async_client.get(f"/api/v1/referral/summaries/{created['referralId']}")
        assert response.status_code == 200
        assert response.json() == created

    async def test_default_patient_snapshot(self, async_client):
        rec = await _recommend(async_client, 8, "Mild")

        response = await async_client.post(
            "/api/v1/referral/summaries", json={"recommendation": rec}
        )

        data = response.json()
        assert data["isDraft"] is True
        assert data["patientName"] == "User"
        assert data["patientAge"] == 0
        assert data["patientSex"] == "N/A"

    async def test_recommendation_required(self, async_client):
        response = await async_client.post("/api/v1/referral/summaries", json={})
        assert response.status_code == 422

    async def test_get_missing(self, async_client):
        response = await async_client.get("/api/v1/referral/summaries/missing")
        assert response.status_code == 404

    async def test_share(self, async_client):
        rec = await _recommend(async_client, 14, "High")
        facility = await _facility(async_client, "pcc-cubao-001")
        created = (
            await async_client.post(
                "/api/v1/referral/summaries",
                json={"recommendation": rec, "facility": facility},
            )
        ).json()

        response = await async_client.get(
            f"/api/v1/referral/summaries/{created['referralId']}/share"
        )
        assert response.status_code == 200

        data = response.json()
        assert data["referralId"] == created["referralId"]
        assert data["subject"] == "Juan Heart Assessment Results"
        assert "Going to: Cubao Medical Clinic" in data["message"]
        assert "I need to go within 6-24 hours." in data["message"]
        assert data["qrPayload"] == created["qrPayload"]

    async def test_share_in_filipino(self, async_client):
        rec = await _recommend(async_client, 14, "High")
        facility = await _facility(async_client, "pcc-cubao-001")
        created = (
            await async_client.post(
                "/api/v1/referral/summaries",
                json={"recommendation": rec, "facility": facility},
            )
        ).json()

        response = await async_client.get(
            f"/api/v1/referral/summaries/{created['referralId']}/share",
            params={"locale": "fil"},
        )
        assert "Pupuntahan ko: Cubao Medical Clinic" in response.json()["message"]

    async def test_share_draft_conflicts(self, async_client):
        rec = await _recommend(async_client, 8, "Mild")
        created = (
            await async_client.post("/api/v1/referral/summaries", json={"recommendation": rec})
        ).json()

        response = await async_client.get(
            f"/api/v1/referral/summaries/{created['referralId']}/share"
        )
        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "DRAFT_REFERRAL"

    async def test_history(self, async_client):
        rec = await _recommend(async_client, 8, "Mild")
        for name in ("Maria Santos", "Maria Santos", "Jose Rizal"):
            await async_client.post(
                "/api/v1/referral/summaries",
                json={"recommendation": rec, "patient": {"name": name, "age": 40, "sex": "Female"}},
            )

        response = await async_client.get(
            "/api/v1/referral/summaries", params={"patientName": "Maria Santos", "limit": 1}
        )
        assert response.status_code == 200

        data = response.json()
        assert data["total"] == 2
        assert data["limit"] == 1
        assert len(data["referrals"]) == 1
        assert data["referrals"][0]["patientName"] == "Maria Santos"

    async def test_history_requires_patient_name(self, async_client):
        response = await async_client.get("/api/v1/referral/summaries")
        assert response.status_code == 422


@pytest.mark.asyncio
class TestDisclaimersEndpoint:
    """Tests for GET /disclaimers."""

    async def test_english(self, async_client):
        data = (await async_client.get("/api/v1/referral/disclaimers")).json()
        assert "call 911" in data["emergency"]
        assert data["medical"].startswith("This app does not provide medical diagnosis")

    async def test_filipino(self, async_client):
        data = (
            await async_client.get("/api/v1/referral/disclaimers", params={"locale": "fil"})
        ).json()
        assert data["medical"].startswith("Ang app na ito")
