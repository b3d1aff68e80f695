"""Referral & care navigation API endpoints.

Flow:
1. POST /recommendation  - assessment result -> care recommendation
2. POST /facilities      - location + recommendation -> ranked facilities
3. POST /summaries       - recommendation + selected facility -> stored referral
4. GET  /summaries/{id}/share - share text and QR payload for a referral
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from juan_heart.api.dependencies import get_locale
from juan_heart.models.messages import (
    CreateSummaryRequest,
    DisclaimersResponse,
    FacilitySearchRequest,
    FacilitySearchResponse,
    RankedFacility,
    RecommendationRequest,
    RecommendationResponse,
    ReferralHistoryResponse,
    ShareResponse,
)
from juan_heart.models.referral import HealthcareFacility, ReferralSummary
from juan_heart.services import facility_ranker
from juan_heart.services.facility_directory import FacilityDirectory, get_facility_directory
from juan_heart.services.message_catalog import MessageCatalog, get_message_catalog
from juan_heart.services.recommendation_engine import (
    CareRecommendationEngine,
    get_recommendation_engine,
)
from juan_heart.services.referral_builder import ReferralSummaryBuilder, get_referral_builder
from juan_heart.services.referral_service import ReferralService, get_referral_service
from juan_heart.services.referral_store import ReferralStore, get_referral_store
from juan_heart.utils.exceptions import (
    DraftReferralError,
    DuplicateReferralError,
    LocationUnavailableError,
)
import httpx
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/referral", tags=["Referral"])


@router.post("/recommendation", response_model=RecommendationResponse)
async def create_recommendation(
    request: RecommendationRequest,
    locale: str = Depends(get_locale),
    engine: CareRecommendationEngine = Depends(get_recommendation_engine),
    catalog: MessageCatalog = Depends(get_message_catalog),
):
    """
    Turn an assessment result into a care recommendation.

    Scores outside 1-25 return the generic ``none`` recommendation rather
    than an error.
    """
    lang = catalog.resolve_locale(request.locale) if request.locale else locale
    recommendation = engine.recommend(request.risk_score, request.risk_category, lang)

    return RecommendationResponse(
        recommendation=recommendation,
        should_offer_booking=engine.should_offer_booking(recommendation),
        action_button_text=catalog.action_button_text(recommendation.urgency, lang),
    )


@router.post("/facilities", response_model=FacilitySearchResponse)
async def search_facilities(
    request: FacilitySearchRequest,
    locale: str = Depends(get_locale),
    referral_service: ReferralService = Depends(get_referral_service),
    catalog: MessageCatalog = Depends(get_message_catalog),
):
    """
    Find facilities near the user for their recommendation.

    Returns 422 with error ``LOCATION_UNAVAILABLE`` when no location was
    sent, and 502 when the facility directory cannot be reached. An empty
    list is a normal response.
    """
    lang = catalog.resolve_locale(request.locale) if request.locale else locale

    try:
        ranked = await referral_service.find_facilities(
            request.location,
            recommendation=request.recommendation,
            max_distance_km=request.max_distance_km,
        )
    except LocationUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.to_dict(),
        )
    except httpx.HTTPError as e:
        logger.error(f"Facility directory request failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "DIRECTORY_UNAVAILABLE", "message": str(e)},
        )

    visible = facility_ranker.apply_filter(ranked, request.filter)

    items = []
    for facility in visible:
        badge = facility_ranker.facility_badge(facility, request.recommendation)
        items.append(
            RankedFacility(
                facility=facility,
                distance_text=facility.distance_text,
                badge=badge,
                badge_label=catalog.badge_label(badge, lang) if badge else None,
            )
        )

    return FacilitySearchResponse(
        filter=request.filter,
        total=len(items),
        total_unfiltered=len(ranked),
        facilities=items,
    )


@router.get("/facilities/{facility_id}", response_model=HealthcareFacility)
async def get_facility(
    facility_id: str,
    directory: FacilityDirectory = Depends(get_facility_directory),
):
    """Get a single facility from the directory."""
    try:
        facility = await directory.get_facility_by_id(facility_id)
    except httpx.HTTPError as e:
        logger.error(f"Facility directory request failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "DIRECTORY_UNAVAILABLE", "message": str(e)},
        )

    if facility is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Facility {facility_id} not found",
        )
    return facility


@router.post(
    "/summaries",
    response_model=ReferralSummary,
    status_code=status.HTTP_201_CREATED,
)
async def create_summary(
    request: CreateSummaryRequest,
    builder: ReferralSummaryBuilder = Depends(get_referral_builder),
    store: ReferralStore = Depends(get_referral_store),
):
    """
    Generate and store a referral summary.

    A summary without a facility is stored as a draft.
    """
    summary = builder.build(
        request.recommendation,
        request.patient,
        facility=request.facility,
        assessment_date=request.assessment_date,
    )

    try:
        await store.create_summary(summary)
    except DuplicateReferralError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.to_dict())

    return summary


@router.get("/summaries", response_model=ReferralHistoryResponse)
async def list_summaries(
    patient_name: str = Query(..., alias="patientName"),
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    store: ReferralStore = Depends(get_referral_store),
):
    """Get a patient's referral history, newest first."""
    summaries, total = await store.list_summaries(patient_name, limit=limit, offset=offset)
    return ReferralHistoryResponse(
        total=total, limit=limit, offset=offset, referrals=summaries
    )


@router.get("/summaries/{referral_id}", response_model=ReferralSummary)
async def get_summary(
    referral_id: str,
    store: ReferralStore = Depends(get_referral_store),
):
    """Get a stored referral summary."""
    summary = await store.get_summary(referral_id)
    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Referral {referral_id} not found",
        )
    return summary


@router.get("/summaries/{referral_id}/share", response_model=ShareResponse)
async def share_summary(
    referral_id: str,
    locale: str = Depends(get_locale),
    store: ReferralStore = Depends(get_referral_store),
    builder: ReferralSummaryBuilder = Depends(get_referral_builder),
):
    """Share text and QR payload for a referral with a selected facility."""
    summary = await store.get_summary(referral_id)
    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Referral {referral_id} not found",
        )

    try:
        message = builder.share_message(summary, locale)
    except DraftReferralError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.to_dict())

    return ShareResponse(
        referral_id=summary.referral_id,
        subject=builder.share_subject(locale),
        message=message,
        qr_payload=summary.qr_payload,
    )


@router.get("/disclaimers", response_model=DisclaimersResponse)
async def get_disclaimers(
    locale: str = Depends(get_locale),
    catalog: MessageCatalog = Depends(get_message_catalog),
):
    """Emergency and medical disclaimers in the requested locale."""
    return DisclaimersResponse(**catalog.disclaimers(locale))
