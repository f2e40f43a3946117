"""
Contract Models

Agreements derived from applications and tracked through a fixed-order
status sequence.
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    ForeignKey,
    Integer,
    DateTime,
    func,
    Text,
    Enum as SQLEnum,
    UniqueConstraint,
)
from database.engine import Base, utc_now
from database.types import Money
from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum


# ==================== Enums ===================== #
class ContractStatus(str, PyEnum):
    """Status of a contract."""

    CREATED = "created"
    ACCEPTED = "accepted"
    DEPLOYED = "deployed"
    SIGNED = "signed"
    FUNDED = "funded"
    APPROVED = "approved"
    COMPLETED = "completed"


# ==================== Contract Model ===================== #
class Contract(Base):
    """
    Contract between the job's customer and the application's performer.
    """

    __tablename__ = "contracts"
    __table_args__ = (
        UniqueConstraint("application_id", name="uq_contracts_application"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    customer_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("persons.id"), nullable=False, index=True
    )
    performer_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("persons.id"), nullable=False, index=True
    )
    application_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("applications.id"), nullable=False
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    duration: Mapped[int | None] = mapped_column(Integer)

    status: Mapped[ContractStatus] = mapped_column(
        SQLEnum(ContractStatus, native_enum=False, length=50),
        nullable=False,
        default=ContractStatus.CREATED,
        index=True,
    )

    # Blockchain
    contract_address: Mapped[str | None] = mapped_column(String(42))
    customer_address: Mapped[str] = mapped_column(String(42), nullable=False)
    performer_address: Mapped[str] = mapped_column(String(42), nullable=False)

    created_by: Mapped[str] = mapped_column(
        String(32), ForeignKey("persons.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
    )

    def __repr__(self):
        return f"<Contract(id={self.id}, status={self.status})>"
