"""
Unit tests for the error hierarchy.
"""
from decimal import Decimal

import pytest

from marketplace_payments.api.main import STATUS_BY_CATEGORY
from marketplace_payments.core.errors import (
    DepositLimitExceededError,
    ErrorCategory,
    ForbiddenError,
    InsufficientFundsError,
    InvalidArgumentError,
    MarketplaceError,
    NotFoundError,
    SettlementInternalError,
    UnauthenticatedError,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    "error, category, status_code",
    [
        (UnauthenticatedError(), ErrorCategory.UNAUTHENTICATED, 401),
        (ForbiddenError("pay for jobs", 1, "contractor"), ErrorCategory.FORBIDDEN, 403),
        (NotFoundError("job", 7), ErrorCategory.NOT_FOUND, 404),
        (InsufficientFundsError(7, 1, Decimal("10")), ErrorCategory.CONFLICT, 409),
        (
            DepositLimitExceededError(1, Decimal("5"), Decimal("0"), Decimal("0")),
            ErrorCategory.CONFLICT,
            409,
        ),
        (InvalidArgumentError("limit", "x", "bad"), ErrorCategory.BAD_INPUT, 400),
        (SettlementInternalError("boom"), ErrorCategory.INTERNAL, 500),
    ],
)
def test_every_error_kind_has_a_distinct_outcome(error, category, status_code) -> None:
    assert isinstance(error, MarketplaceError)
    assert error.category is category
    assert STATUS_BY_CATEGORY[error.category] == status_code


@pytest.mark.unit
def test_to_dict_renders_structured_context() -> None:
    error = DepositLimitExceededError(3, Decimal("100.51"), Decimal("402.00"), Decimal("100.50"))

    body = error.to_dict()["error"]

    assert body["code"] == "deposit_limit_exceeded"
    assert body["type"] == "DepositLimitExceededError"
    assert body["context"] == {
        "client_id": 3,
        "amount": "100.51",
        "exposure": "402.00",
        "limit": "100.50",
    }


@pytest.mark.unit
def test_not_found_message_names_entity() -> None:
    error = NotFoundError("job", 12)

    assert error.message == "Job not found"
    assert error.context == {"entity": "job", "id": 12}
