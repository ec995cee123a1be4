"""
Unit tests for exposure-capped deposits.
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from marketplace_payments.core.deposits import DepositLimiter, parse_amount
from marketplace_payments.core.errors import (
    DepositLimitExceededError,
    ForbiddenError,
    InvalidArgumentError,
)
from marketplace_payments.database.models import ContractStatus


async def _client_with_exposure(fixtures, *prices, balance="10"):
    client = await fixtures.client(balance)
    contractor = await fixtures.contractor()
    contract = await fixtures.contract(client, contractor)
    for price in prices:
        await fixtures.job(contract, price)
    return client


class TestParseAmount:
    """Test suite for deposit amount parsing."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("100", Decimal("100")),
            ("100.5", Decimal("100.5")),
            (" 0.01 ", Decimal("0.01")),
            (25, Decimal("25")),
            (Decimal("12.30"), Decimal("12.30")),
            ("100.500", Decimal("100.5")),
        ],
    )
    def test_valid_amounts(self, value, expected) -> None:
        assert parse_amount(value) == expected

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value",
        [None, "", "abc", "0", "-5", "NaN", "Infinity", "1.001", True],
    )
    def test_invalid_amounts(self, value) -> None:
        with pytest.raises(InvalidArgumentError):
            parse_amount(value)


class TestDepositLimiter:
    """Test suite for DepositLimiter."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_deposit_at_quarter_of_exposure_succeeds(self, test_db, fixtures) -> None:
        """Depositing exactly exposure / 4 is allowed."""
        client = await _client_with_exposure(fixtures, "150", "250")

        profile = await DepositLimiter(Decimal("0.25")).deposit(test_db, client, "100")

        assert profile.id == client.id
        assert profile.balance == Decimal("110")
        assert await fixtures.balance_of(client) == Decimal("110")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_deposit_one_cent_over_limit_fails(self, test_db, fixtures) -> None:
        """exposure 402 allows 100.50 but not 100.51."""
        client = await _client_with_exposure(fixtures, "400", "2")
        limiter = DepositLimiter(Decimal("0.25"))

        with pytest.raises(DepositLimitExceededError) as exc_info:
            await limiter.deposit(test_db, client, "100.51")

        assert exc_info.value.context["exposure"] == Decimal("402")
        assert exc_info.value.context["limit"] == Decimal("100.50")
        assert await fixtures.balance_of(client) == Decimal("10")

        profile = await limiter.deposit(test_db, client, "100.50")
        assert profile.balance == Decimal("110.50")

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0.01", "1", "1000"])
    async def test_zero_exposure_rejects_any_deposit(self, test_db, fixtures, amount) -> None:
        """No open work means nothing may be deposited."""
        client = await fixtures.client("10")

        with pytest.raises(DepositLimitExceededError):
            await DepositLimiter(Decimal("0.25")).deposit(test_db, client, amount)

        assert await fixtures.balance_of(client) == Decimal("10")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_exposure_counts_only_unpaid_in_progress_jobs(self, test_db, fixtures) -> None:
        """Paid jobs, inactive contracts and other clients' jobs are ignored."""
        client = await fixtures.client("0")
        other = await fixtures.client("0")
        contractor = await fixtures.contractor()

        active = await fixtures.contract(client, contractor)
        await fixtures.job(active, "40")
        await fixtures.job(active, "1000", payment_date=datetime(2024, 1, 1, tzinfo=timezone.utc))
        await fixtures.job(await fixtures.contract(client, contractor, ContractStatus.NEW), "1000")
        await fixtures.job(
            await fixtures.contract(client, contractor, ContractStatus.TERMINATED), "1000"
        )
        await fixtures.job(await fixtures.contract(other, contractor), "1000")

        limiter = DepositLimiter(Decimal("0.25"))
        with pytest.raises(DepositLimitExceededError) as exc_info:
            await limiter.deposit(test_db, client, "10.01")
        assert exc_info.value.context["exposure"] == Decimal("40")

        profile = await limiter.deposit(test_db, client, "10")
        assert profile.balance == Decimal("10")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_contractor_cannot_deposit(self, test_db, fixtures) -> None:
        contractor = await fixtures.contractor("5")

        with pytest.raises(ForbiddenError, match="Only clients"):
            await DepositLimiter(Decimal("0.25")).deposit(test_db, contractor, "1")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_malformed_amount_is_rejected_before_querying(self, test_db, fixtures) -> None:
        client = await _client_with_exposure(fixtures, "400")

        with pytest.raises(InvalidArgumentError) as exc_info:
            await DepositLimiter(Decimal("0.25")).deposit(test_db, client, "-1")

        assert exc_info.value.context["argument"] == "amount"
        assert await fixtures.balance_of(client) == Decimal("10")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_configured_ratio_changes_limit(self, test_db, fixtures) -> None:
        client = await _client_with_exposure(fixtures, "100")

        profile = await DepositLimiter(Decimal("0.5")).deposit(test_db, client, "50")

        assert profile.balance == Decimal("60")

    @pytest.mark.unit
    def test_default_ratio_comes_from_settings(self) -> None:
        assert DepositLimiter().exposure_ratio == Decimal("0.25")
