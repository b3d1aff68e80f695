"""Referral & care navigation data models.

JSON interchange keeps the camelCase field names used by the mobile app
(``riskScore``, ``recommendedFacilities``, ``distanceKm`` ...). Python code
works with the snake_case attributes; both spellings are accepted on input.
"""

from pydantic import BaseModel, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Tuple
from datetime import datetime
from juan_heart.models.care import CareUrgency, FacilityType
import uuid


class GeoPoint(BaseModel):
    """A WGS84 coordinate."""

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)

    class Config:
        frozen = True


class CareRecommendation(BaseModel):
    """Care recommendation derived from a single risk assessment.

    Regenerated from every assessment, never mutated in place.
    """

    risk_category: str
    # Clamped to the nearest bound when the assessment score was out of range
    risk_score: int = Field(..., ge=1, le=25)
    urgency: CareUrgency
    action_title: str
    action_message: str
    detailed_guidance: str
    timeframe: str
    recommended_facilities: Tuple[FacilityType, ...] = Field(..., min_length=1)

    # Presentation metadata, looked up by urgency
    indicator_color: str
    urgency_icon: str

    class Config:
        frozen = True
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("recommended_facilities")
    @classmethod
    def _dedupe_facilities(cls, value: Tuple[FacilityType, ...]):
        return tuple(dict.fromkeys(value))

    @computed_field(alias="isEmergency")
    @property
    def is_emergency(self) -> bool:
        return self.urgency == CareUrgency.EMERGENCY

    @computed_field(alias="isUrgent")
    @property
    def is_urgent(self) -> bool:
        return self.urgency in (CareUrgency.URGENT, CareUrgency.EMERGENCY)


class HealthcareFacility(BaseModel):
    """Healthcare facility record from the facility directory.

    ``distance_km`` is relative to a query point. It is only set on the
    copies returned by the ranker and is never ground truth.
    """

    id: str
    name: str
    type: FacilityType
    address: str = ""
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    contact_number: Optional[str] = None
    emergency_number: Optional[str] = None
    is_24_hours: bool = Field(default=False, alias="is24Hours")
    services: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    distance_km: Optional[float] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @property
    def location(self) -> GeoPoint:
        return GeoPoint(latitude=self.latitude, longitude=self.longitude)

    @computed_field(alias="primaryContact")
    @property
    def primary_contact(self) -> Optional[str]:
        """Emergency number if available, otherwise the regular contact."""
        return self.emergency_number or self.contact_number

    @computed_field(alias="typeName")
    @property
    def type_name(self) -> str:
        return self.type.display_name

    @computed_field(alias="mapsUrl")
    @property
    def maps_url(self) -> str:
        return (
            "https://www.google.com/maps/dir/?api=1"
            f"&destination={self.latitude},{self.longitude}"
        )

    @property
    def distance_text(self) -> str:
        if self.distance_km is None:
            return "Distance unknown"
        if self.distance_km < 1:
            return f"{round(self.distance_km * 1000)} meters away"
        return f"{self.distance_km:.1f} km away"


class SelectedFacility(HealthcareFacility):
    """Read-only facility record as captured on a referral summary."""

    services: Tuple[str, ...] = ()

    class Config:
        frozen = True


class PatientSnapshot(BaseModel):
    """Patient demographics captured when the referral is generated."""

    name: str = "User"
    age: int = Field(default=0, ge=0, le=150)
    sex: str = "N/A"

    class Config:
        frozen = True


class ReferralSummary(BaseModel):
    """Exportable referral record, created once at the end of a referral flow."""

    referral_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    recommendation: CareRecommendation
    selected_facility: Optional[SelectedFacility] = None
    assessment_date: datetime
    patient_name: str
    patient_age: int = Field(..., ge=0, le=150)
    patient_sex: str
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        frozen = True
        alias_generator = to_camel
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "referralId": "123e4567-e89b-12d3-a456-426614174000",
                "recommendation": {
                    "riskCategory": "High Risk",
                    "riskScore": 20,
                    "urgency": "emergency",
                },
                "selectedFacility": {"id": "qcgh-001", "type": "emergencyFacility"},
                "patientName": "Juan dela Cruz",
                "patientAge": 58,
                "patientSex": "Male",
            }
        }

    @field_validator("selected_facility", mode="before")
    @classmethod
    def _freeze_facility(cls, value):
        # A caller's mutable record is re-validated into a detached frozen copy
        if isinstance(value, HealthcareFacility) and not isinstance(value, SelectedFacility):
            return value.model_dump()
        return value

    @computed_field(alias="isDraft")
    @property
    def is_draft(self) -> bool:
        return self.selected_facility is None

    @computed_field(alias="qrPayload")
    @property
    def qr_payload(self) -> Optional[str]:
        """Text encoded in the facility navigation QR code."""
        facility = self.selected_facility
        if facility is None:
            return None
        return f"{facility.name}|{facility.maps_url}|{facility.primary_contact or ''}"

    def same_content(self, other: "ReferralSummary") -> bool:
        """Compare two summaries ignoring their identity and capture time."""
        ignored = {"referral_id", "created_at"}
        return self.model_dump(exclude=ignored) == other.model_dump(exclude=ignored)
