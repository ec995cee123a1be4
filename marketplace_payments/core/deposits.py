"""
Client deposits capped by outstanding obligations.

A client may add at most ``deposit_exposure_ratio`` (25% by default) of the
total price of their unpaid in-progress jobs in one deposit. With nothing
outstanding the cap is zero.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_payments.config import get_settings
from marketplace_payments.core.balances import increment_if_exists
from marketplace_payments.core.errors import (
    DepositLimitExceededError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
)
from marketplace_payments.core.queries import unpaid_exposure
from marketplace_payments.database.connection import transaction
from marketplace_payments.database.models import Profile, ProfileType

logger = structlog.get_logger(__name__)


def parse_amount(value: Any) -> Decimal:
    """
    Parse a deposit amount.

    Accepts Decimal, int or numeric strings; floats go through ``str`` so
    ``0.1`` stays ``Decimal("0.1")``.

    Raises:
        InvalidArgumentError: If the value is not a positive finite amount
            with at most two fractional digits
    """
    if value is None or isinstance(value, bool):
        raise InvalidArgumentError("amount", value, "amount is required")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidArgumentError("amount", value, "not a number")
    if not amount.is_finite():
        raise InvalidArgumentError("amount", value, "must be finite")
    if amount <= 0:
        raise InvalidArgumentError("amount", value, "must be positive")
    if amount.normalize().as_tuple().exponent < -2:
        raise InvalidArgumentError("amount", value, "at most two decimal places")
    return amount


class DepositLimiter:
    """Accepts or rejects client deposits against unpaid exposure."""

    def __init__(self, exposure_ratio: Optional[Decimal] = None):
        self.exposure_ratio = (
            exposure_ratio if exposure_ratio is not None else get_settings().deposit_exposure_ratio
        )

    def allowed_deposit(self, exposure: Decimal) -> Decimal:
        return exposure * self.exposure_ratio

    async def deposit(self, db: AsyncSession, caller: Profile, amount: Any) -> Profile:
        """
        Deposit money into the caller's balance.

        Args:
            db: Database session; the deposit commits or rolls back on it
            caller: Resolved profile of the requester
            amount: Requested amount (Decimal, int or numeric string)

        Returns:
            Profile: The caller's refreshed profile

        Raises:
            ForbiddenError: If the caller is not a client
            InvalidArgumentError: If the amount is malformed
            DepositLimitExceededError: If the amount exceeds the allowed share of exposure
        """
        if caller.role is not ProfileType.CLIENT:
            raise ForbiddenError("deposit money", caller.id, caller.type)
        value = parse_amount(amount)

        async with transaction(db):
            exposure = await unpaid_exposure(db, caller.id)
            limit = self.allowed_deposit(exposure)
            if value > limit:
                logger.warning(
                    "deposit_rejected",
                    client_id=caller.id,
                    amount=str(value),
                    exposure=str(exposure),
                    limit=str(limit),
                )
                raise DepositLimitExceededError(caller.id, value, exposure, limit)

            if not await increment_if_exists(db, caller.id, value):
                raise NotFoundError("profile", caller.id)

            profile = await db.get(Profile, caller.id, populate_existing=True)
            if profile is None:
                raise NotFoundError("profile", caller.id)

        logger.info(
            "deposit_completed",
            client_id=profile.id,
            amount=str(value),
            balance=str(profile.balance),
        )
        return profile
