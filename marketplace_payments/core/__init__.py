"""Core settlement, deposit and reporting logic."""
from .aggregation import AggregationEngine, ClientSpending, ProfessionEarnings
from .deposits import DepositLimiter
from .errors import (
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
from .settlement import SettlementEngine

__all__ = [
    "AggregationEngine",
    "ClientSpending",
    "DepositLimiter",
    "DepositLimitExceededError",
    "ErrorCategory",
    "ForbiddenError",
    "InsufficientFundsError",
    "InvalidArgumentError",
    "MarketplaceError",
    "NotFoundError",
    "ProfessionEarnings",
    "SettlementEngine",
    "SettlementInternalError",
    "UnauthenticatedError",
]
