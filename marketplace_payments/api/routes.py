"""
API routes for the contractor marketplace.
"""
import time
from typing import Any, Dict, List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_payments.api.dependencies import get_current_profile
from marketplace_payments.core import queries
from marketplace_payments.core.aggregation import AggregationEngine
from marketplace_payments.core.deposits import DepositLimiter
from marketplace_payments.core.errors import MarketplaceError
from marketplace_payments.core.settlement import SettlementEngine
from marketplace_payments.database.connection import get_db
from marketplace_payments.database.models import Contract, Job, Profile
from marketplace_payments.monitoring.health import HealthCheck
from marketplace_payments.monitoring.metrics import metrics

from .schemas import (
    BestClientResponse,
    BestProfessionResponse,
    ContractResponse,
    ErrorResponse,
    HealthCheckResponse,
    JobResponse,
    ProfileResponse,
)

logger = structlog.get_logger(__name__)

# Create routers
contract_router = APIRouter(prefix="/contracts", tags=["contracts"])
job_router = APIRouter(prefix="/jobs", tags=["jobs"])
balance_router = APIRouter(prefix="/balances", tags=["balances"])
admin_router = APIRouter(prefix="/admin", tags=["admin"])
monitoring_router = APIRouter(tags=["monitoring"])

# Initialize services
settlement_engine = SettlementEngine()
deposit_limiter = DepositLimiter()
aggregation_engine = AggregationEngine()
health_check = HealthCheck()

ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
    status.HTTP_403_FORBIDDEN: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse},
}


@contract_router.get(
    "/{contract_id}",
    response_model=ContractResponse,
    responses=ERROR_RESPONSES,
    summary="Get a contract",
    description="Return a contract the caller is a party to",
)
async def get_contract(
    contract_id: int,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> Contract:
    """Get a contract by ID."""
    return await queries.get_contract(db, profile, contract_id)


@contract_router.get(
    "",
    response_model=List[ContractResponse],
    responses=ERROR_RESPONSES,
    summary="List contracts",
    description="List the caller's non-terminated contracts",
)
async def list_contracts(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> List[Contract]:
    """List active contracts."""
    return await queries.list_active_contracts(db, profile)


@job_router.get(
    "/unpaid",
    response_model=List[JobResponse],
    responses=ERROR_RESPONSES,
    summary="List unpaid jobs",
    description="List unpaid jobs of the caller's in-progress contracts",
)
async def list_unpaid_jobs(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> List[Job]:
    """List unpaid jobs."""
    return await queries.list_unpaid_jobs(db, profile)


@job_router.post(
    "/{job_id}/pay",
    response_model=JobResponse,
    responses=ERROR_RESPONSES,
    summary="Pay for a job",
    description="Move the job price from the client's balance to the contractor's",
)
async def pay_job(
    job_id: int,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> Job:
    """
    Pay for a job.

    The whole settlement is one transaction; on any error no balance moves.
    """
    start_time = time.time()

    logger.info("api_pay_job_request", job_id=job_id, profile_id=profile.id)

    try:
        job = await settlement_engine.pay_job(db, profile, job_id)

    except MarketplaceError as e:
        duration = time.time() - start_time
        metrics.record_settlement(e.error_code, duration)
        logger.warning(
            "api_pay_job_rejected",
            job_id=job_id,
            error_code=e.error_code,
            error=e.message,
        )
        raise

    duration = time.time() - start_time
    metrics.record_settlement("paid", duration, job.price)
    logger.info("api_pay_job_success", job_id=job_id, duration_seconds=duration)
    return job


@balance_router.post(
    "/deposit",
    response_model=ProfileResponse,
    responses=ERROR_RESPONSES,
    summary="Deposit money",
    description="Deposit up to 25% of the caller's unpaid in-progress jobs total",
)
async def deposit(
    amount: Optional[str] = Query(default=None, description="Amount to deposit"),
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> Profile:
    """Deposit money into the caller's balance."""
    logger.info("api_deposit_request", profile_id=profile.id, amount=amount)
    balance_before = profile.balance

    try:
        updated = await deposit_limiter.deposit(db, profile, amount)

    except MarketplaceError as e:
        metrics.record_deposit(e.error_code)
        logger.warning("api_deposit_rejected", error_code=e.error_code, error=e.message)
        raise

    metrics.record_deposit("accepted", updated.balance - balance_before)
    return updated


@admin_router.get(
    "/best-profession",
    response_model=BestProfessionResponse,
    responses=ERROR_RESPONSES,
    summary="Best profession",
    description="Profession that earned the most in the period (inclusive bounds)",
)
async def best_profession(
    start: Optional[str] = Query(default=None, description="Period start (ISO-8601)"),
    end: Optional[str] = Query(default=None, description="Period end (ISO-8601)"),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Get the best-earning profession."""
    start_time = time.time()
    try:
        return await aggregation_engine.best_profession(db, start, end)
    finally:
        metrics.record_report_query("best_profession", time.time() - start_time)


@admin_router.get(
    "/best-clients",
    response_model=List[BestClientResponse],
    responses=ERROR_RESPONSES,
    summary="Best clients",
    description="Clients who paid the most in the period, highest first",
)
async def best_clients(
    start: Optional[str] = Query(default=None, description="Period start (ISO-8601)"),
    end: Optional[str] = Query(default=None, description="Period end (ISO-8601)"),
    limit: Optional[str] = Query(default=None, description="Number of clients (default 2)"),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Get the best-paying clients."""
    start_time = time.time()
    try:
        return await aggregation_engine.best_clients(db, start, end, limit)
    finally:
        metrics.record_report_query("best_clients", time.time() - start_time)


@monitoring_router.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Health check",
    description="Check overall system health",
)
async def health() -> Dict[str, Any]:
    """Health check endpoint for monitoring."""
    try:
        result = await health_check.check_all()
        return result
    except Exception as e:
        logger.error("health_check_error", error=str(e))
        return {
            "status": "unhealthy",
            "checks": {"error": str(e)},
        }


@monitoring_router.get(
    "/health/live",
    response_model=HealthCheckResponse,
    summary="Liveness probe",
    description="Kubernetes liveness probe endpoint",
)
async def liveness() -> Dict[str, Any]:
    """Liveness probe endpoint."""
    return await health_check.liveness()


@monitoring_router.get(
    "/health/ready",
    response_model=HealthCheckResponse,
    summary="Readiness probe",
    description="Kubernetes readiness probe endpoint",
)
async def readiness() -> Dict[str, Any]:
    """Readiness probe endpoint."""
    result = await health_check.readiness()
    if result["status"] != "healthy":
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=result)
    return result


@monitoring_router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Expose Prometheus metrics",
    include_in_schema=False,  # Don't include in OpenAPI docs
)
async def prometheus_metrics() -> Response:
    """Expose Prometheus metrics."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
