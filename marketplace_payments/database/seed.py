"""Sample dataset for local development and demos."""
from datetime import datetime, timezone
from decimal import Decimal

import structlog
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_payments.database.models import (
    Contract,
    ContractStatus,
    Job,
    Profile,
    ProfileType,
)

logger = structlog.get_logger(__name__)


def _paid_at(day: int, hour: int) -> datetime:
    return datetime(2020, 8, day, hour, 0, tzinfo=timezone.utc)


PROFILES = [
    (1, "Harry", "Potter", "Wizard", "1150", ProfileType.CLIENT),
    (2, "Mr", "Robot", "Hacker", "231.11", ProfileType.CLIENT),
    (3, "John", "Snow", "Knows nothing", "451.3", ProfileType.CLIENT),
    (4, "Ash", "Kethcum", "Pokemon master", "1.3", ProfileType.CLIENT),
    (5, "John", "Lenon", "Musician", "64", ProfileType.CONTRACTOR),
    (6, "Linus", "Torvalds", "Programmer", "1214", ProfileType.CONTRACTOR),
    (7, "Alan", "Turing", "Programmer", "22", ProfileType.CONTRACTOR),
    (8, "Aragorn", "II Elessar Telcontarar", "Fighter", "314", ProfileType.CONTRACTOR),
]

# (id, client_id, contractor_id, status)
CONTRACTS = [
    (1, 1, 5, ContractStatus.TERMINATED),
    (2, 1, 6, ContractStatus.IN_PROGRESS),
    (3, 2, 6, ContractStatus.IN_PROGRESS),
    (4, 2, 7, ContractStatus.IN_PROGRESS),
    (5, 3, 8, ContractStatus.NEW),
    (6, 3, 7, ContractStatus.IN_PROGRESS),
    (7, 4, 7, ContractStatus.IN_PROGRESS),
    (8, 4, 6, ContractStatus.IN_PROGRESS),
    (9, 4, 8, ContractStatus.IN_PROGRESS),
]

# (id, contract_id, price, payment_date)
JOBS = [
    (1, 1, "200", None),
    (2, 2, "201", None),
    (3, 3, "202", None),
    (4, 4, "200", None),
    (5, 7, "200", None),
    (6, 7, "2020", _paid_at(15, 19)),
    (7, 7, "200", _paid_at(15, 19)),
    (8, 6, "200", _paid_at(16, 19)),
    (9, 5, "200", _paid_at(17, 19)),
    (10, 1, "200", _paid_at(14, 23)),
    (11, 2, "21", _paid_at(10, 19)),
    (12, 3, "21", _paid_at(15, 19)),
    (13, 3, "121", _paid_at(15, 19)),
    (14, 3, "121", _paid_at(14, 23)),
]


async def seed_database(db: AsyncSession) -> dict[str, int]:
    """
    Replace all marketplace data with the sample dataset.

    Returns:
        dict[str, int]: Row counts written per table
    """
    await db.execute(delete(Job))
    await db.execute(delete(Contract))
    await db.execute(delete(Profile))

    for profile_id, first, last, profession, balance, role in PROFILES:
        db.add(
            Profile(
                id=profile_id,
                first_name=first,
                last_name=last,
                profession=profession,
                balance=Decimal(balance),
                type=role.value,
            )
        )
    await db.flush()

    for contract_id, client_id, contractor_id, status in CONTRACTS:
        db.add(
            Contract(
                id=contract_id,
                terms="bla bla bla",
                status=status.value,
                client_id=client_id,
                contractor_id=contractor_id,
            )
        )
    await db.flush()

    for job_id, contract_id, price, payment_date in JOBS:
        db.add(
            Job(
                id=job_id,
                description="work",
                price=Decimal(price),
                paid=payment_date is not None,
                payment_date=payment_date,
                contract_id=contract_id,
            )
        )
    await db.commit()

    counts = {"profiles": len(PROFILES), "contracts": len(CONTRACTS), "jobs": len(JOBS)}
    logger.info("database_seeded", **counts)
    return counts
