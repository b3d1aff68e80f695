"""Referral flow service.

Chooses which facilities to show for a care recommendation:
- emergency recommendation: emergency facilities only
- any other recommendation: the recommended facility types
- no recommendation: every facility type
"""

from typing import List, Optional
from juan_heart.config.settings import settings
from juan_heart.models.referral import CareRecommendation, GeoPoint, HealthcareFacility
from juan_heart.services.facility_directory import FacilityDirectory, get_facility_directory
from juan_heart.utils.exceptions import LocationUnavailableError
import logging

logger = logging.getLogger(__name__)


class ReferralService:
    """Service for the facility search step of a referral."""

    def __init__(self, directory: Optional[FacilityDirectory] = None):
        self.directory = directory or get_facility_directory()

    async def find_facilities(
        self,
        location: Optional[GeoPoint],
        recommendation: Optional[CareRecommendation] = None,
        max_distance_km: Optional[float] = None,
    ) -> List[HealthcareFacility]:
        """
        Find facilities for the patient's recommendation.

        Args:
            location: Patient location, None when it could not be obtained
            recommendation: Care recommendation from the assessment (optional)
            max_distance_km: Search radius (default from settings)

        Returns:
            Ranked facilities; may be empty

        Raises:
            LocationUnavailableError: If location is None
            httpx.HTTPError: If the facility directory request fails
        """
        if location is None:
            logger.info("Facility search requested without a location")
            raise LocationUnavailableError()

        if max_distance_km is None:
            max_distance_km = settings.facility_search_max_distance_km

        if recommendation is not None and recommendation.is_emergency:
            facilities = await self.directory.get_emergency_facilities(
                location, max_distance_km=max_distance_km
            )
        elif recommendation is not None:
            facilities = await self.directory.get_nearby_facilities(
                location,
                types=recommendation.recommended_facilities,
                max_distance_km=max_distance_km,
                max_results=settings.facility_search_max_results,
            )
        else:
            facilities = await self.directory.get_nearby_facilities(
                location,
                max_distance_km=max_distance_km,
                max_results=settings.facility_search_max_results,
            )

        if not facilities:
            logger.info(f"No facilities found within {max_distance_km} km")
        return facilities


# Global service instance
_referral_service: Optional[ReferralService] = None


def get_referral_service() -> ReferralService:
    """Get or create ReferralService instance."""
    global _referral_service
    if _referral_service is None:
        _referral_service = ReferralService()
    return _referral_service
