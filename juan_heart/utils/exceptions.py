"""
Referral Exception Hierarchy

Specific exception types for the referral flow, carrying a machine
readable code so the API layer can map them to responses.

Facility directory transport failures are not wrapped: they surface as
``httpx.HTTPError`` exactly as the directory client raised them.
"""
from typing import Optional, Dict, Any


class ReferralError(Exception):
    """Base exception for all referral flow errors."""

    def __init__(
        self,
        message: str,
        code: str = "REFERRAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class LocationUnavailableError(ReferralError):
    """The user's location could not be obtained, so nothing can be ranked."""

    def __init__(
        self,
        message: str = "Unable to access your location. Please enable location services.",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="LOCATION_UNAVAILABLE",
            details=details
        )


class MissingRecommendationError(ReferralError, ValueError):
    """A referral summary was requested without a care recommendation."""

    def __init__(self, message: str = "A care recommendation is required"):
        super().__init__(message=message, code="MISSING_RECOMMENDATION")


class DraftReferralError(ReferralError):
    """An export was requested for a summary without a selected facility."""

    def __init__(self, referral_id: str):
        super().__init__(
            message="Select a facility before sharing the referral summary",
            code="DRAFT_REFERRAL",
            details={"referral_id": referral_id}
        )


class DuplicateReferralError(ReferralError):
    """A referral summary with the same id has already been stored."""

    def __init__(self, referral_id: str):
        super().__init__(
            message=f"Referral {referral_id} already exists",
            code="DUPLICATE_REFERRAL",
            details={"referral_id": referral_id}
        )
