"""Facility ranking and list filters.

``rank`` orders candidate facilities by great-circle distance from the
patient. ``apply_filter`` is a view over an already ranked list and never
re-queries or re-sorts.
"""

from typing import Iterable, List, Optional, Sequence
from juan_heart.config.settings import settings
from juan_heart.models.care import FacilityBadge, FacilityFilter, FacilityType
from juan_heart.models.referral import CareRecommendation, GeoPoint, HealthcareFacility
from juan_heart.utils.exceptions import LocationUnavailableError
from juan_heart.utils.geo import distance_between
import logging

logger = logging.getLogger(__name__)

NEAR_AND_FAST_KM = 2.0


def _sort_key(facility: HealthcareFacility):
    # Nearest first, then 24/7 facilities, then id for a stable order
    return (facility.distance_km, not facility.is_24_hours, facility.id)


def rank(
    origin: Optional[GeoPoint],
    candidates: Iterable[HealthcareFacility],
    filter_types: Optional[Iterable[FacilityType]] = None,
    max_distance_km: Optional[float] = None,
    max_results: Optional[int] = None,
    emergency: bool = False,
) -> List[HealthcareFacility]:
    """
    Rank facilities by distance from the patient.

    Args:
        origin: Patient location; None means the location could not be read
        candidates: Facilities to rank (left untouched)
        filter_types: Keep only these facility types (ignored when emergency)
        max_distance_km: Exclude facilities farther than this (default from settings)
        max_results: Truncate after sorting
        emergency: Restrict to emergency facilities only

    Returns:
        Copies of the matching facilities with ``distance_km`` set, nearest first

    Raises:
        LocationUnavailableError: If origin is None
    """
    if origin is None:
        raise LocationUnavailableError()

    if max_distance_km is None:
        max_distance_km = settings.facility_search_max_distance_km

    if emergency:
        allowed = {FacilityType.EMERGENCY_FACILITY}
    elif filter_types:
        allowed = set(filter_types)
    else:
        allowed = None

    ranked: List[HealthcareFacility] = []
    for facility in candidates:
        if allowed is not None and facility.type not in allowed:
            continue

        distance_km = distance_between(origin, facility.location)
        if distance_km > max_distance_km:
            continue

        ranked.append(facility.model_copy(update={"distance_km": distance_km}))

    ranked.sort(key=_sort_key)

    if max_results is not None:
        ranked = ranked[:max(max_results, 0)]

    logger.debug(
        f"Ranked {len(ranked)} facilities within {max_distance_km} km "
        f"(emergency={emergency}, types={sorted(t.value for t in allowed) if allowed else 'all'})"
    )
    return ranked


def _is_public(facility: HealthcareFacility, keywords: Sequence[str]) -> bool:
    # Name heuristic, not an authoritative ownership classification
    if facility.type == FacilityType.BARANGAY_HEALTH_CENTER:
        return True
    name = facility.name.lower()
    return any(keyword in name for keyword in keywords)


def apply_filter(
    ranked: Sequence[HealthcareFacility],
    chip: FacilityFilter,
    nearest_count: Optional[int] = None,
    public_keywords: Optional[Sequence[str]] = None,
) -> List[HealthcareFacility]:
    """Apply a filter chip to an already ranked list, keeping its order."""
    if chip == FacilityFilter.NEAREST:
        count = settings.nearest_filter_count if nearest_count is None else nearest_count
        return list(ranked[:count])

    if chip == FacilityFilter.EMERGENCY:
        return [
            f for f in ranked
            if f.type == FacilityType.EMERGENCY_FACILITY
            or (f.type == FacilityType.HOSPITAL and f.is_24_hours)
        ]

    if chip == FacilityFilter.TWENTY_FOUR_SEVEN:
        return [f for f in ranked if f.is_24_hours]

    if chip == FacilityFilter.PUBLIC:
        keywords = settings.public_keywords if public_keywords is None else public_keywords
        return [f for f in ranked if _is_public(f, keywords)]

    return list(ranked)


def facility_badge(
    facility: HealthcareFacility,
    recommendation: Optional[CareRecommendation],
) -> Optional[FacilityBadge]:
    """Contextual badge for a facility given the patient's recommendation."""
    if recommendation is None:
        return None

    if recommendation.is_emergency and facility.is_24_hours:
        return FacilityBadge.EMERGENCY_READY
    if (
        recommendation.is_urgent
        and facility.distance_km is not None
        and facility.distance_km < NEAR_AND_FAST_KM
    ):
        return FacilityBadge.NEAR_AND_FAST
    if facility.type == FacilityType.BARANGAY_HEALTH_CENTER:
        return FacilityBadge.COMMUNITY_PARTNER
    return None
