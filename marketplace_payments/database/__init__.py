"""Database package for marketplace payments."""
from .connection import get_db, init_db, transaction
from .models import (
    Base,
    Contract,
    ContractStatus,
    Job,
    Profile,
    ProfileType,
)

__all__ = [
    "Base",
    "Contract",
    "ContractStatus",
    "Job",
    "Profile",
    "ProfileType",
    "get_db",
    "init_db",
    "transaction",
]
