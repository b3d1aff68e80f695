"""FastAPI dependencies for request context.

Locale selection order: explicit ``locale`` query parameter, then the first
tag of the ``Accept-Language`` header, then the configured default.
"""

from typing import Optional

from fastapi import Header, Query
from juan_heart.services.message_catalog import get_message_catalog
import logging

logger = logging.getLogger(__name__)


async def get_locale(
    locale: Optional[str] = Query(None, description="Locale tag, 'en' or 'fil'"),
    accept_language: Optional[str] = Header(None),
) -> str:
    """Resolve the locale for patient-facing text on this request."""
    requested = locale
    if not requested and accept_language:
        requested = accept_language.split(",", 1)[0].split(";", 1)[0].strip()

    resolved = get_message_catalog().resolve_locale(requested)
    logger.debug(f"Resolved locale {requested!r} -> {resolved}")
    return resolved
