"""SQLAlchemy database models for the contractor marketplace."""
import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Two fractional digits, enough headroom for platform-wide sums
MONEY = Numeric(12, 2)

# Primary keys are 32-bit INTEGER columns on PostgreSQL
MAX_ID = 2**31 - 1


class ProfileType(str, enum.Enum):
    """Role a profile plays on the platform."""

    CLIENT = "client"
    CONTRACTOR = "contractor"


class ContractStatus(str, enum.Enum):
    """Lifecycle status of a contract."""

    NEW = "new"
    IN_PROGRESS = "in_progress"
    TERMINATED = "terminated"


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class Profile(Base):
    """
    Account of a client or contractor.

    The balance is the only state shared between concurrent requests and is
    mutated exclusively through guarded UPDATE statements.
    """

    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    profession: Mapped[str] = mapped_column(String(100), nullable=False)
    balance: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        CheckConstraint("balance >= 0", name="non_negative_balance"),
        CheckConstraint("type IN ('client', 'contractor')", name="valid_profile_type"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def role(self) -> ProfileType:
        return ProfileType(self.type)

    def __repr__(self) -> str:
        """String representation of Profile."""
        return f"<Profile(id={self.id}, type={self.type}, balance={self.balance})>"


class Contract(Base):
    """Agreement between exactly one client and one contractor."""

    __tablename__ = "contracts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    terms: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ContractStatus.NEW.value)
    client_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id"), nullable=False, index=True
    )
    contractor_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('new', 'in_progress', 'terminated')",
            name="valid_contract_status",
        ),
        Index("idx_contracts_client_status", "client_id", "status"),
    )

    def __repr__(self) -> str:
        """String representation of Contract."""
        return (
            f"<Contract(id={self.id}, client_id={self.client_id}, "
            f"contractor_id={self.contractor_id}, status={self.status})>"
        )


class Job(Base):
    """
    Billable unit of work under a contract.

    Transitions from unpaid to paid exactly once; price and payment_date are
    frozen afterwards.
    """

    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    payment_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    contract_id: Mapped[int] = mapped_column(
        ForeignKey("contracts.id"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        CheckConstraint("price > 0", name="positive_price"),
        Index("idx_jobs_paid_payment_date", "paid", "payment_date"),
    )

    def __repr__(self) -> str:
        """String representation of Job."""
        return f"<Job(id={self.id}, contract_id={self.contract_id}, paid={self.paid})>"
