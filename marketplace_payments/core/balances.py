"""
Guarded balance mutations.

Each function issues a single conditional UPDATE and reports whether a row
was affected. The predicate is evaluated by the database at write time, so
a concurrent writer on the same profile either serializes behind the row
lock or makes the guard fail; there is no read-check-write window.
"""
from decimal import Decimal

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_payments.database.models import Profile

logger = structlog.get_logger(__name__)


async def decrement_if_sufficient(db: AsyncSession, profile_id: int, amount: Decimal) -> bool:
    """
    Subtract ``amount`` from a balance only while it stays non-negative.

    Returns:
        bool: False when the balance was lower than ``amount`` at write time
    """
    stmt = (
        update(Profile)
        .where(Profile.id == profile_id, Profile.balance >= amount)
        .values(balance=Profile.balance - amount)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    applied = result.rowcount == 1
    logger.debug(
        "balance_decrement",
        profile_id=profile_id,
        amount=str(amount),
        applied=applied,
    )
    return applied


async def increment_if_exists(db: AsyncSession, profile_id: int, amount: Decimal) -> bool:
    """
    Add ``amount`` to a balance.

    Returns:
        bool: False when the profile no longer exists
    """
    stmt = (
        update(Profile)
        .where(Profile.id == profile_id)
        .values(balance=Profile.balance + amount)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    applied = result.rowcount == 1
    logger.debug(
        "balance_increment",
        profile_id=profile_id,
        amount=str(amount),
        applied=applied,
    )
    return applied
