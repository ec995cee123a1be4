"""
Earnings reports over paid jobs.

Both reports are a single grouped SELECT, so each sees one consistent
snapshot of paid jobs and takes no write locks. Date bounds are inclusive
and both optional.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, List, Optional

import structlog
from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_payments.config import get_settings
from marketplace_payments.core.errors import InvalidArgumentError, NotFoundError
from marketplace_payments.database.models import Contract, Job, Profile

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProfessionEarnings:
    """Total paid to contractors of one profession."""

    profession: str
    total_paid: Decimal


@dataclass(frozen=True)
class ClientSpending:
    """Total paid by one client."""

    client_id: int
    full_name: str
    total_paid: Decimal


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_period_bound(value: Any, name: str, end_of_day: bool = False) -> Optional[datetime]:
    """
    Parse an optional report bound.

    Accepts datetimes, dates and ISO-8601 strings. Naive values are UTC. A
    bare date used as an upper bound covers the whole day.

    Raises:
        InvalidArgumentError: If the value cannot be parsed
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.max if end_of_day else time.min, timezone.utc)
    if not isinstance(value, str):
        raise InvalidArgumentError(name, value, "expected an ISO-8601 date or datetime")

    text = value.strip()
    try:
        if len(text) == 10:
            return parse_period_bound(date.fromisoformat(text), name, end_of_day)
        return _as_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        raise InvalidArgumentError(name, value, "expected an ISO-8601 date or datetime")


def parse_limit(value: Any, default: int, maximum: int) -> int:
    """
    Validate the number of rows requested from best-clients.

    Raises:
        InvalidArgumentError: If the value is not an integer in [1, maximum]
    """
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise InvalidArgumentError("limit", value, "must be a positive integer")
    if isinstance(value, int):
        limit = value
    elif isinstance(value, str) and value.strip().isdecimal():
        limit = int(value.strip())
    else:
        raise InvalidArgumentError("limit", value, "must be a positive integer")
    if limit < 1:
        raise InvalidArgumentError("limit", value, "must be a positive integer")
    if limit > maximum:
        raise InvalidArgumentError("limit", value, f"must be at most {maximum}")
    return limit


class AggregationEngine:
    """Computes best-profession and best-clients reports."""

    def __init__(self, default_limit: Optional[int] = None, max_limit: Optional[int] = None):
        settings = get_settings()
        self.default_limit = (
            default_limit if default_limit is not None else settings.best_clients_default_limit
        )
        self.max_limit = max_limit if max_limit is not None else settings.best_clients_max_limit
        if self.default_limit < 1 or self.max_limit < self.default_limit:
            raise ValueError("best-clients limits must satisfy 1 <= default <= max")

    @staticmethod
    def _paid_in_period(start: Any, end: Any) -> list[ColumnElement[bool]]:
        start_at = parse_period_bound(start, "start")
        end_at = parse_period_bound(end, "end", end_of_day=True)
        if start_at is not None and end_at is not None and start_at > end_at:
            raise InvalidArgumentError("start", start, "start must not be after end")

        conditions = [Job.paid.is_(True)]
        if start_at is not None:
            conditions.append(Job.payment_date >= start_at)
        if end_at is not None:
            conditions.append(Job.payment_date <= end_at)
        return conditions

    async def best_profession(
        self, db: AsyncSession, start: Any = None, end: Any = None
    ) -> ProfessionEarnings:
        """
        Profession whose contractors earned the most in the period.

        Ties go to the alphabetically first profession.

        Raises:
            InvalidArgumentError: If a bound is malformed or start > end
            NotFoundError: If no paid job falls in the period
        """
        conditions = self._paid_in_period(start, end)
        total = func.sum(Job.price).label("total_paid")
        stmt = (
            select(Profile.profession, total)
            .select_from(Job)
            .join(Contract, Job.contract_id == Contract.id)
            .join(Profile, Contract.contractor_id == Profile.id)
            .where(*conditions)
            .group_by(Profile.profession)
            .order_by(total.desc(), Profile.profession.asc())
            .limit(1)
        )
        row = (await db.execute(stmt)).first()
        if row is None:
            raise NotFoundError("paid jobs", start=start, end=end)

        result = ProfessionEarnings(profession=row.profession, total_paid=Decimal(str(row.total_paid)))
        logger.info(
            "best_profession_computed",
            profession=result.profession,
            total_paid=str(result.total_paid),
        )
        return result

    async def best_clients(
        self, db: AsyncSession, start: Any = None, end: Any = None, limit: Any = None
    ) -> List[ClientSpending]:
        """
        Clients who paid the most in the period, highest first.

        Ties go to the lower client id. An empty period yields an empty list.

        Raises:
            InvalidArgumentError: If a bound or the limit is malformed
        """
        row_limit = parse_limit(limit, self.default_limit, self.max_limit)
        conditions = self._paid_in_period(start, end)
        total = func.sum(Job.price).label("total_paid")
        stmt = (
            select(Profile.id, Profile.first_name, Profile.last_name, total)
            .select_from(Job)
            .join(Contract, Job.contract_id == Contract.id)
            .join(Profile, Contract.client_id == Profile.id)
            .where(*conditions)
            .group_by(Profile.id, Profile.first_name, Profile.last_name)
            .order_by(total.desc(), Profile.id.asc())
            .limit(row_limit)
        )
        rows = (await db.execute(stmt)).all()
        result = [
            ClientSpending(
                client_id=row.id,
                full_name=f"{row.first_name} {row.last_name}",
                total_paid=Decimal(str(row.total_paid)),
            )
            for row in rows
        ]
        logger.info("best_clients_computed", limit=row_limit, rows=len(result))
        return result
