"""
Read queries over contracts and jobs.

The settlement and deposit operations describe what they need (a payable
job, a client's unpaid exposure); this module turns those predicates into
SQL. The listing queries back the read-only contract/job endpoints.
"""
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from marketplace_payments.core.errors import NotFoundError
from marketplace_payments.database.models import (
    MAX_ID,
    Contract,
    ContractStatus,
    Job,
    Profile,
    ProfileType,
)


def is_storable_id(value: int) -> bool:
    """Whether ``value`` fits the primary key columns; larger ids match no row."""
    return 1 <= value <= MAX_ID


def party_column(role: ProfileType) -> InstrumentedAttribute[int]:
    """Contract column that references a profile acting in ``role``."""
    if role is ProfileType.CLIENT:
        return Contract.client_id
    if role is ProfileType.CONTRACTOR:
        return Contract.contractor_id
    raise ValueError(f"Unknown profile role: {role!r}")


def _owned_by(profile: Profile) -> ColumnElement[bool]:
    return party_column(profile.role) == profile.id


def _unpaid_in_progress_for_client(client_id: int) -> list[ColumnElement[bool]]:
    return [
        Job.paid.is_(False),
        Contract.status == ContractStatus.IN_PROGRESS.value,
        Contract.client_id == client_id,
    ]


async def find_payable_job(
    db: AsyncSession, client_id: int, job_id: int, lock: bool = True
) -> Optional[tuple[Job, Contract]]:
    """
    Find an unpaid job of an in-progress contract owned by ``client_id``.

    With ``lock`` the job row is selected FOR UPDATE so a concurrent
    settlement of the same job waits on this transaction (a no-op on SQLite,
    where writers are serialized by the database lock).

    Returns:
        The job with its contract, or None when no job matches
    """
    if not is_storable_id(job_id):
        return None
    stmt = (
        select(Job, Contract)
        .join(Contract, Job.contract_id == Contract.id)
        .where(Job.id == job_id, *_unpaid_in_progress_for_client(client_id))
    )
    if lock:
        stmt = stmt.with_for_update(of=Job.__table__)
    row = (await db.execute(stmt)).first()
    if row is None:
        return None
    return row[0], row[1]


async def unpaid_exposure(db: AsyncSession, client_id: int) -> Decimal:
    """Sum of prices of the client's unpaid jobs under in-progress contracts."""
    stmt = (
        select(func.coalesce(func.sum(Job.price), 0))
        .select_from(Job)
        .join(Contract, Job.contract_id == Contract.id)
        .where(*_unpaid_in_progress_for_client(client_id))
    )
    total = (await db.execute(stmt)).scalar_one()
    return Decimal(str(total))


async def get_profile(db: AsyncSession, profile_id: int) -> Optional[Profile]:
    if not is_storable_id(profile_id):
        return None
    return await db.get(Profile, profile_id)


async def get_contract(db: AsyncSession, profile: Profile, contract_id: int) -> Contract:
    """
    Get a contract the caller is a party to.

    Raises:
        NotFoundError: If the contract does not exist or belongs to someone else
    """
    contract = None
    if is_storable_id(contract_id):
        stmt = select(Contract).where(Contract.id == contract_id, _owned_by(profile))
        contract = (await db.execute(stmt)).scalar_one_or_none()
    if contract is None:
        raise NotFoundError("contract", contract_id)
    return contract


async def list_active_contracts(db: AsyncSession, profile: Profile) -> List[Contract]:
    """Contracts of the caller that are not terminated."""
    stmt = (
        select(Contract)
        .where(
            Contract.status != ContractStatus.TERMINATED.value,
            _owned_by(profile),
        )
        .order_by(Contract.id)
    )
    return list((await db.execute(stmt)).scalars().all())


async def list_unpaid_jobs(db: AsyncSession, profile: Profile) -> List[Job]:
    """Unpaid jobs of the caller's in-progress contracts."""
    stmt = (
        select(Job)
        .join(Contract, Job.contract_id == Contract.id)
        .where(
            Job.paid.is_(False),
            Contract.status == ContractStatus.IN_PROGRESS.value,
            _owned_by(profile),
        )
        .order_by(Job.id)
    )
    return list((await db.execute(stmt)).scalars().all())
