"""FastAPI application and routes."""
from .main import app
from .schemas import (
    BestClientResponse,
    BestProfessionResponse,
    ContractResponse,
    JobResponse,
    ProfileResponse,
)

__all__ = [
    "app",
    "BestClientResponse",
    "BestProfessionResponse",
    "ContractResponse",
    "JobResponse",
    "ProfileResponse",
]
