"""Care recommendation engine.

Maps an assessment's risk score (likelihood 1-5 x impact 1-5, so 1-25) to a
care urgency, the facility types that fit it, and the patient-facing text.

Risk score buckets (upper bound inclusive):
- 1-5:   monitor    (check-up within 1-2 weeks)
- 6-10:  routine    (clinic within 24-48 hours)
- 11-17: urgent     (hospital within 6-24 hours)
- 18-25: emergency  (ER immediately)

Scores outside 1-25 are not an assessment result; they fall back to ``none``
with a generic message instead of failing.
"""

from typing import Dict, Optional, Tuple
from juan_heart.config.settings import settings
from juan_heart.models.care import CareUrgency, FacilityType
from juan_heart.models.referral import CareRecommendation
from juan_heart.services.message_catalog import MessageCatalog, get_message_catalog
import logging

logger = logging.getLogger(__name__)

MIN_RISK_SCORE = 1
MAX_RISK_SCORE = 25

# (inclusive upper bound, urgency), ascending
URGENCY_THRESHOLDS: Tuple[Tuple[int, CareUrgency], ...] = (
    (5, CareUrgency.MONITOR),
    (10, CareUrgency.ROUTINE),
    (17, CareUrgency.URGENT),
    (25, CareUrgency.EMERGENCY),
)

RECOMMENDED_FACILITIES: Dict[CareUrgency, Tuple[FacilityType, ...]] = {
    CareUrgency.EMERGENCY: (FacilityType.EMERGENCY_FACILITY, FacilityType.HOSPITAL),
    CareUrgency.URGENT: (FacilityType.HOSPITAL, FacilityType.PRIMARY_CARE_CLINIC),
    CareUrgency.ROUTINE: (FacilityType.PRIMARY_CARE_CLINIC, FacilityType.BARANGAY_HEALTH_CENTER),
    CareUrgency.MONITOR: (FacilityType.PRIMARY_CARE_CLINIC, FacilityType.BARANGAY_HEALTH_CENTER),
    CareUrgency.NONE: (FacilityType.BARANGAY_HEALTH_CENTER,),
}

# Presentation metadata only; never consulted by the decision logic
URGENCY_PRESENTATION: Dict[CareUrgency, Dict[str, str]] = {
    CareUrgency.NONE: {"color": "#0DB1AD", "icon": "check_circle_outline"},
    CareUrgency.MONITOR: {"color": "#1353CF", "icon": "info_outline"},
    CareUrgency.ROUTINE: {"color": "#FBDC8E", "icon": "warning_amber_outlined"},
    CareUrgency.URGENT: {"color": "#FC6565", "icon": "error_outline"},
    CareUrgency.EMERGENCY: {"color": "#F44336", "icon": "local_hospital"},
}


def is_valid_risk_score(risk_score: int) -> bool:
    return MIN_RISK_SCORE <= risk_score <= MAX_RISK_SCORE


def urgency_for_score(risk_score: int) -> CareUrgency:
    """Map a risk score to its urgency bucket.

    Non-decreasing in ``risk_score``; anything outside 1-25 is ``none``.
    """
    if not is_valid_risk_score(risk_score):
        return CareUrgency.NONE
    for upper_bound, urgency in URGENCY_THRESHOLDS:
        if risk_score <= upper_bound:
            return urgency
    return CareUrgency.NONE


class CareRecommendationEngine:
    """Builds CareRecommendation values from assessment results."""

    def __init__(self, catalog: Optional[MessageCatalog] = None):
        self.catalog = catalog or get_message_catalog()

    def recommend(
        self,
        risk_score: int,
        risk_category: str,
        locale: Optional[str] = None,
    ) -> CareRecommendation:
        """
        Generate a care recommendation for a risk assessment result.

        Args:
            risk_score: Assessment score, 1-25
            risk_category: Category label from the assessment (e.g. "High Risk")
            locale: Locale tag for the patient-facing text ("en", "fil")

        Returns:
            CareRecommendation. Out-of-range scores yield the ``none`` fallback.
        """
        urgency = urgency_for_score(risk_score)
        carried_score = risk_score

        if not is_valid_risk_score(risk_score):
            logger.warning(
                f"Risk score {risk_score} outside {MIN_RISK_SCORE}-{MAX_RISK_SCORE}; "
                "falling back to generic recommendation"
            )
            carried_score = min(max(risk_score, MIN_RISK_SCORE), MAX_RISK_SCORE)

        text = self.catalog.urgency_text(urgency, locale)
        presentation = URGENCY_PRESENTATION[urgency]

        return CareRecommendation(
            risk_category=risk_category,
            risk_score=carried_score,
            urgency=urgency,
            action_title=text["title"],
            action_message=text["message"],
            detailed_guidance=text["guidance"],
            timeframe=text["timeframe"],
            recommended_facilities=RECOMMENDED_FACILITIES[urgency],
            indicator_color=presentation["color"],
            urgency_icon=presentation["icon"],
        )

    def should_offer_booking(self, recommendation: CareRecommendation) -> bool:
        """Whether the patient should be prompted to book an appointment."""
        if recommendation.urgency == CareUrgency.NONE:
            return False
        return recommendation.risk_score >= settings.booking_offer_min_score


# Global engine instance
_recommendation_engine: Optional[CareRecommendationEngine] = None


def get_recommendation_engine() -> CareRecommendationEngine:
    """Get or create CareRecommendationEngine instance."""
    global _recommendation_engine
    if _recommendation_engine is None:
        _recommendation_engine = CareRecommendationEngine()
    return _recommendation_engine
