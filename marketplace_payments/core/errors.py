"""
Error kinds raised by the settlement, deposit and reporting operations.

Every error carries:
- Category (what kind of outcome the caller sees)
- Error code (stable identifier for clients)
- Structured context (ids and amounts, never free-form blobs)

The HTTP layer maps categories to status codes; nothing in core knows
about HTTP.
"""
import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional


class ErrorCategory(str, enum.Enum):
    """Outcome categories preserved end-to-end."""

    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    BAD_INPUT = "bad_input"
    INTERNAL = "internal"


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class MarketplaceError(Exception):
    """Base exception for all marketplace errors."""

    category: ErrorCategory = ErrorCategory.INTERNAL
    error_code: str = "internal_error"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for API responses"""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "type": self.__class__.__name__,
                "context": {key: _jsonable(value) for key, value in self.context.items()},
            }
        }


class UnauthenticatedError(MarketplaceError):
    """Request could not be resolved to a known profile."""

    category = ErrorCategory.UNAUTHENTICATED
    error_code = "unauthenticated"

    def __init__(self, message: str = "Unknown or missing profile", **context: Any):
        super().__init__(message, **context)


class ForbiddenError(MarketplaceError):
    """Caller's role does not allow the operation."""

    category = ErrorCategory.FORBIDDEN
    error_code = "forbidden"

    def __init__(self, operation: str, profile_id: int, role: str):
        super().__init__(
            f"Only clients can {operation}",
            operation=operation,
            profile_id=profile_id,
            role=role,
        )


class NotFoundError(MarketplaceError):
    """Referenced entity is missing or not owned by the caller."""

    category = ErrorCategory.NOT_FOUND
    error_code = "not_found"

    def __init__(self, entity: str, entity_id: Optional[Any] = None, **context: Any):
        message = f"{entity.capitalize()} not found"
        if entity_id is not None:
            context["id"] = entity_id
        super().__init__(message, entity=entity, **context)


class InsufficientFundsError(MarketplaceError):
    """Client balance does not cover the job price."""

    category = ErrorCategory.CONFLICT
    error_code = "insufficient_funds"

    def __init__(
        self, job_id: int, client_id: int, price: Decimal, balance: Optional[Decimal] = None
    ):
        super().__init__(
            "Balance is not sufficient",
            job_id=job_id,
            client_id=client_id,
            price=price,
            balance=balance,
        )


class DepositLimitExceededError(MarketplaceError):
    """Deposit is larger than the allowed share of unpaid exposure."""

    category = ErrorCategory.CONFLICT
    error_code = "deposit_limit_exceeded"

    def __init__(self, client_id: int, amount: Decimal, exposure: Decimal, limit: Decimal):
        super().__init__(
            f"Deposit of {amount} exceeds the allowed limit of {limit}",
            client_id=client_id,
            amount=amount,
            exposure=exposure,
            limit=limit,
        )


class InvalidArgumentError(MarketplaceError):
    """Malformed amount, limit or date."""

    category = ErrorCategory.BAD_INPUT
    error_code = "invalid_argument"

    def __init__(self, argument: str, value: Any, reason: str):
        super().__init__(
            f"Invalid {argument}: {reason}",
            argument=argument,
            value=value if value is None else str(value),
        )


class SettlementInternalError(MarketplaceError):
    """
    Integrity failure after validation passed.

    Not a user error: e.g. the contractor row vanished mid-transaction.
    """

    category = ErrorCategory.INTERNAL
    error_code = "settlement_internal_error"

    def __init__(self, message: str, **context: Any):
        super().__init__(message, **context)
