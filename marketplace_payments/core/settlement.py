"""
Job settlement: a client pays a contractor for one job.

Orchestrates the settlement flow inside one transaction:
1. Check the caller is a client
2. Locate the unpaid job of the caller's in-progress contract
3. Pre-check the client's balance
4. Guarded decrement of the client's balance
5. Increment of the contractor's balance
6. Guarded paid flag on the job
7. Commit (any failure rolls back every step)
"""
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_payments.core.balances import decrement_if_sufficient, increment_if_exists
from marketplace_payments.core.errors import (
    ForbiddenError,
    InsufficientFundsError,
    NotFoundError,
    SettlementInternalError,
)
from marketplace_payments.core.queries import find_payable_job
from marketplace_payments.database.connection import transaction
from marketplace_payments.database.models import Job, Profile, ProfileType

logger = structlog.get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SettlementEngine:
    """
    Moves a job's price from the client's balance to the contractor's.

    The balance check happens twice: once on the value read at the start
    (fast rejection with a useful error) and once inside the UPDATE itself,
    which is the check that actually protects the balance when another
    settlement for the same client commits in between.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize settlement engine.

        Args:
            clock: Optional source of the payment timestamp (UTC now by default)
        """
        self.clock = clock or utc_now

    async def pay_job(self, db: AsyncSession, caller: Profile, job_id: int) -> Job:
        """
        Pay for a job on behalf of a client.

        Args:
            db: Database session; the settlement commits or rolls back on it
            caller: Resolved profile of the requester
            job_id: Job to pay

        Returns:
            Job: The job, now paid

        Raises:
            ForbiddenError: If the caller is not a client
            NotFoundError: If no unpaid job of the caller's in-progress contracts matches
            InsufficientFundsError: If the client's balance does not cover the price
            SettlementInternalError: If the contractor cannot be credited
        """
        correlation_id = uuid.uuid4()

        if caller.role is not ProfileType.CLIENT:
            logger.warning(
                "settlement_forbidden",
                correlation_id=str(correlation_id),
                profile_id=caller.id,
                role=caller.type,
            )
            raise ForbiddenError("pay for jobs", caller.id, caller.type)

        logger.info(
            "settlement_started",
            correlation_id=str(correlation_id),
            client_id=caller.id,
            job_id=job_id,
        )

        async with transaction(db):
            found = await find_payable_job(db, caller.id, job_id)
            if found is None:
                raise NotFoundError("job", job_id)
            job, contract = found
            price = job.price

            client = await db.get(Profile, contract.client_id, populate_existing=True)
            if client is None:
                raise SettlementInternalError(
                    "Client profile missing", job_id=job_id, client_id=contract.client_id
                )
            if client.balance < price:
                raise InsufficientFundsError(job_id, client.id, price, client.balance)

            if not await decrement_if_sufficient(db, client.id, price):
                # Another settlement spent the balance after it was read
                logger.warning(
                    "settlement_balance_race",
                    correlation_id=str(correlation_id),
                    client_id=client.id,
                    job_id=job_id,
                )
                raise InsufficientFundsError(job_id, client.id, price)

            if not await increment_if_exists(db, contract.contractor_id, price):
                raise SettlementInternalError(
                    "Error updating contractor",
                    job_id=job_id,
                    contractor_id=contract.contractor_id,
                )

            marked = await db.execute(
                update(Job)
                .where(Job.id == job.id, Job.paid.is_(False))
                .values(paid=True, payment_date=self.clock())
                .execution_options(synchronize_session=False)
            )
            if marked.rowcount != 1:
                # A concurrent settlement of the same job committed first
                raise NotFoundError("job", job_id)

            await db.refresh(job)

        logger.info(
            "settlement_completed",
            correlation_id=str(correlation_id),
            job_id=job.id,
            client_id=contract.client_id,
            contractor_id=contract.contractor_id,
            amount=str(price),
        )
        return job
