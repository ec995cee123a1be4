"""
Pytest configuration and fixtures.

Every test gets its own SQLite database file, so tests never share state
and concurrent sessions behave like separate connections.
"""
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from marketplace_payments.config import Settings
from marketplace_payments.database.connection import (
    build_engine,
    build_session_factory,
    get_db,
    init_db,
)
from marketplace_payments.database.models import (
    Contract,
    ContractStatus,
    Job,
    Profile,
    ProfileType,
)


class MarketplaceFixtures:
    """Creates and inspects rows through short-lived sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory
        self._names = 0

    async def _save(self, obj: Any) -> Any:
        async with self.session_factory() as session:
            session.add(obj)
            await session.commit()
            await session.refresh(obj)
            return obj

    async def profile(
        self,
        role: ProfileType = ProfileType.CLIENT,
        balance: str = "0",
        profession: str = "Programmer",
        first_name: Optional[str] = None,
        last_name: str = "Tester",
    ) -> Profile:
        self._names += 1
        return await self._save(
            Profile(
                first_name=first_name or f"User{self._names}",
                last_name=last_name,
                profession=profession,
                balance=Decimal(balance),
                type=role.value,
            )
        )

    async def client(self, balance: str = "0", **kwargs: Any) -> Profile:
        return await self.profile(ProfileType.CLIENT, balance, **kwargs)

    async def contractor(
        self, balance: str = "0", profession: str = "Programmer", **kwargs: Any
    ) -> Profile:
        return await self.profile(ProfileType.CONTRACTOR, balance, profession, **kwargs)

    async def contract(
        self,
        client: Profile,
        contractor: Profile,
        status: ContractStatus = ContractStatus.IN_PROGRESS,
    ) -> Contract:
        return await self._save(
            Contract(
                terms="terms",
                status=status.value,
                client_id=client.id,
                contractor_id=contractor.id,
            )
        )

    async def job(
        self,
        contract: Contract,
        price: str,
        payment_date: Optional[datetime] = None,
    ) -> Job:
        return await self._save(
            Job(
                description="work",
                price=Decimal(price),
                paid=payment_date is not None,
                payment_date=payment_date,
                contract_id=contract.id,
            )
        )

    async def balance_of(self, profile: Profile) -> Decimal:
        async with self.session_factory() as session:
            fresh = await session.get(Profile, profile.id)
            assert fresh is not None
            return fresh.balance

    async def reload_job(self, job: Job) -> Job:
        async with self.session_factory() as session:
            fresh = await session.get(Job, job.id)
            assert fresh is not None
            return fresh


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Create test settings pointing at a per-test SQLite file."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'marketplace.db'}",
        app_name="marketplace-payments-test",
        app_env="test",
        log_level="DEBUG",
        debug=True,
    )


@pytest_asyncio.fixture
async def engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine, Any]:
    """Create test engine with all tables."""
    engine = build_engine(test_settings)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def test_db(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, Any]:
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def fixtures(session_factory: async_sessionmaker[AsyncSession]) -> MarketplaceFixtures:
    return MarketplaceFixtures(session_factory)


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, Any]:
    """Create test HTTP client bound to the test database."""
    from marketplace_payments.api import routes
    from marketplace_payments.api.main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, Any]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    original_factory = routes.health_check.session_factory
    routes.health_check.session_factory = lambda: session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    routes.health_check.session_factory = original_factory
    app.dependency_overrides.clear()
