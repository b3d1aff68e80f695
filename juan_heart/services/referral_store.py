"""Referral summary storage and retrieval service.

Summaries are append-only: they are inserted once and never updated.
"""

from juan_heart.models.referral import ReferralSummary
from juan_heart.config.database import get_referrals_collection
from juan_heart.utils.exceptions import DuplicateReferralError
from pymongo.errors import DuplicateKeyError
from typing import Optional, List
import logging

logger = logging.getLogger(__name__)


class ReferralStore:
    """Service for persisting referral summaries."""

    async def ensure_indexes(self) -> None:
        """Create the unique referral id index and the listing index."""
        collection = await get_referrals_collection()
        await collection.create_index("referralId", unique=True)
        await collection.create_index([("patientName", 1), ("createdAt", -1)])

    async def create_summary(self, summary: ReferralSummary) -> str:
        """
        Store a new referral summary.

        Args:
            summary: ReferralSummary to store

        Returns:
            Referral ID

        Raises:
            DuplicateReferralError: If a summary with the same id exists
        """
        collection = await get_referrals_collection()

        if await collection.find_one({"referralId": summary.referral_id}):
            raise DuplicateReferralError(summary.referral_id)

        try:
            await collection.insert_one(summary.model_dump(by_alias=True))
        except DuplicateKeyError:
            raise DuplicateReferralError(summary.referral_id)

        logger.info(
            f"Stored referral {summary.referral_id} "
            f"(urgency={summary.recommendation.urgency.value}, draft={summary.is_draft})"
        )
        return summary.referral_id

    async def get_summary(self, referral_id: str) -> Optional[ReferralSummary]:
        """
        Get a referral summary by ID.

        Args:
            referral_id: Referral identifier

        Returns:
            ReferralSummary or None if not found
        """
        collection = await get_referrals_collection()
        doc = await collection.find_one({"referralId": referral_id})

        if doc:
            return ReferralSummary.model_validate(doc)
        return None

    async def list_summaries(
        self, patient_name: str, limit: int = 10, offset: int = 0
    ) -> tuple[List[ReferralSummary], int]:
        """
        Get a patient's referral summaries, newest first.

        Args:
            patient_name: Patient name recorded on the summaries
            limit: Maximum number of summaries to return
            offset: Number of summaries to skip

        Returns:
            Tuple of (summaries list, total count)
        """
        collection = await get_referrals_collection()
        query = {"patientName": patient_name}

        total = await collection.count_documents(query)

        cursor = (
            collection.find(query)
            .sort("createdAt", -1)
            .skip(offset)
            .limit(limit)
        )

        summaries = []
        async for doc in cursor:
            summaries.append(ReferralSummary.model_validate(doc))

        logger.info(
            f"Retrieved {len(summaries)} referrals for {patient_name} (total: {total})"
        )
        return summaries, total


# Global service instance
_referral_store: Optional[ReferralStore] = None


def get_referral_store() -> ReferralStore:
    """Get or create ReferralStore instance."""
    global _referral_store
    if _referral_store is None:
        _referral_store = ReferralStore()
    return _referral_store
