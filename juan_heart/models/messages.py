"""API request and response models."""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime
from juan_heart.models.care import FacilityBadge, FacilityFilter
from juan_heart.models.referral import (
    CareRecommendation,
    GeoPoint,
    HealthcareFacility,
    PatientSnapshot,
    ReferralSummary,
)


class ApiModel(BaseModel):
    """Base for API payloads: camelCase on the wire, snake_case in Python."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class RecommendationRequest(ApiModel):
    """Assessment result to turn into a care recommendation."""

    risk_score: int = Field(..., description="Risk score, 1-25 (likelihood x impact)")
    risk_category: str = Field(..., max_length=100, description="Risk category label")
    locale: Optional[str] = Field(None, description="Locale tag, 'en' or 'fil'")


class RecommendationResponse(ApiModel):
    """Care recommendation plus follow-up hints for the client."""

    recommendation: CareRecommendation
    should_offer_booking: bool
    action_button_text: str


class FacilitySearchRequest(ApiModel):
    """Request to find facilities for a recommendation."""

    location: Optional[GeoPoint] = Field(
        None, description="User GPS location; required for ranking by distance"
    )
    recommendation: Optional[CareRecommendation] = None
    max_distance_km: Optional[float] = Field(None, gt=0, le=500)
    filter: FacilityFilter = FacilityFilter.ALL
    locale: Optional[str] = None


class RankedFacility(ApiModel):
    """A facility in the result list with its contextual badge."""

    facility: HealthcareFacility
    distance_text: str
    badge: Optional[FacilityBadge] = None
    badge_label: Optional[str] = None


class FacilitySearchResponse(ApiModel):
    """Ranked facility list after applying the filter chip."""

    filter: FacilityFilter
    total: int
    total_unfiltered: int
    facilities: List[RankedFacility]


class CreateSummaryRequest(ApiModel):
    """Request to generate and store a referral summary."""

    recommendation: CareRecommendation
    facility: Optional[HealthcareFacility] = None
    patient: PatientSnapshot = Field(default_factory=PatientSnapshot)
    assessment_date: Optional[datetime] = None


class ShareResponse(ApiModel):
    """Share payloads for a referral summary."""

    referral_id: str
    subject: str
    message: str
    qr_payload: str


class ReferralHistoryResponse(ApiModel):
    """Response containing a patient's referral history."""

    total: int
    limit: int
    offset: int
    referrals: List[ReferralSummary]


class DisclaimersResponse(ApiModel):
    """Disclaimers shown alongside recommendations."""

    emergency: str
    medical: str
