"""Request-scoped dependencies: database session and caller identity."""
from typing import Optional

import structlog
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_payments.core.errors import UnauthenticatedError
from marketplace_payments.core.queries import get_profile
from marketplace_payments.database.connection import get_db
from marketplace_payments.database.models import Profile
from marketplace_payments.monitoring.logging import bind_request_context

logger = structlog.get_logger(__name__)


async def get_current_profile(
    profile_id: Optional[str] = Header(default=None, convert_underscores=False),
    db: AsyncSession = Depends(get_db),
) -> Profile:
    """
    Resolve the ``profile_id`` header to a profile.

    Raises:
        UnauthenticatedError: If the header is missing, malformed or unknown
    """
    if profile_id is None or not profile_id.strip().isdecimal():
        raise UnauthenticatedError(profile_id=profile_id)

    profile = await get_profile(db, int(profile_id))
    if profile is None:
        logger.warning("unknown_profile", profile_id=profile_id)
        raise UnauthenticatedError(profile_id=profile_id)

    bind_request_context(profile_id=profile.id, profile_type=profile.type)
    return profile
