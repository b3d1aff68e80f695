"""Referral summary construction and share payloads."""

from typing import Optional
from datetime import datetime
from juan_heart.models.referral import (
    CareRecommendation,
    HealthcareFacility,
    PatientSnapshot,
    ReferralSummary,
)
from juan_heart.services.message_catalog import MessageCatalog, get_message_catalog
from juan_heart.utils.exceptions import DraftReferralError, MissingRecommendationError
import uuid
import logging

logger = logging.getLogger(__name__)


class ReferralSummaryBuilder:
    """Composes the exportable referral record at the end of a referral flow."""

    def __init__(self, catalog: Optional[MessageCatalog] = None):
        self.catalog = catalog or get_message_catalog()

    def build(
        self,
        recommendation: Optional[CareRecommendation],
        snapshot: PatientSnapshot,
        facility: Optional[HealthcareFacility] = None,
        assessment_date: Optional[datetime] = None,
        captured_at: Optional[datetime] = None,
        referral_id: Optional[str] = None,
    ) -> ReferralSummary:
        """
        Build a referral summary.

        A summary without a facility is a draft; exporting it is refused by
        ``share_message``.

        Args:
            recommendation: Care recommendation for the assessment (required)
            snapshot: Patient demographics at generation time
            facility: Facility the patient selected, if any (stored as a frozen copy)
            assessment_date: When the assessment was taken (defaults to capture time)
            captured_at: Capture timestamp (defaults to now, UTC)
            referral_id: Fixed id (defaults to a new uuid4)

        Returns:
            Immutable ReferralSummary

        Raises:
            MissingRecommendationError: If recommendation is None
        """
        if recommendation is None:
            raise MissingRecommendationError()

        captured_at = captured_at or datetime.utcnow()

        summary = ReferralSummary(
            referral_id=referral_id or str(uuid.uuid4()),
            recommendation=recommendation,
            selected_facility=facility,
            assessment_date=assessment_date or captured_at,
            patient_name=snapshot.name,
            patient_age=snapshot.age,
            patient_sex=snapshot.sex,
            created_at=captured_at,
        )

        logger.debug(
            f"Built referral {summary.referral_id} "
            f"(urgency={recommendation.urgency.value}, draft={summary.is_draft})"
        )
        return summary

    def share_message(self, summary: ReferralSummary, locale: Optional[str] = None) -> str:
        """Plain-text message for sharing the referral with family."""
        facility = summary.selected_facility
        if facility is None:
            raise DraftReferralError(summary.referral_id)

        def t(key: str) -> str:
            return self.catalog.text(key, locale)

        recommendation = summary.recommendation

        lines = [
            t("share.intro"),
            "",
            f"{t('share.result')}: {recommendation.risk_category}",
            f"{t('share.going_to')}: {facility.name}",
            f"{t('share.address')}: {facility.address}",
        ]
        if facility.primary_contact:
            lines.append(f"{t('share.contact')}: {facility.primary_contact}")
        if recommendation.is_urgent:
            timeframe = self.catalog.urgency_text(recommendation.urgency, locale)["timeframe"]
            lines += ["", t("share.urgent").format(timeframe=timeframe.lower())]
        lines += ["", t("share.footer")]

        return "\n".join(lines)

    def share_subject(self, locale: Optional[str] = None) -> str:
        return self.catalog.text("share.subject", locale)


# Global builder instance
_referral_builder: Optional[ReferralSummaryBuilder] = None


def get_referral_builder() -> ReferralSummaryBuilder:
    """Get or create ReferralSummaryBuilder instance."""
    global _referral_builder
    if _referral_builder is None:
        _referral_builder = ReferralSummaryBuilder()
    return _referral_builder
