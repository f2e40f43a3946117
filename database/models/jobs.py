"""
Job Models

Job postings created by customers.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    ForeignKey,
    Integer,
    DateTime,
    func,
    Text,
    Index,
)
from database.engine import Base, utc_now
from database.types import Money
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.persons import Person


# ==================== Job Model ===================== #
class Job(Base):
    """
    A job posting.

    `blocked_at` is set by an administrator and hides the job everywhere.
    `suspended_at` is set by the owner and only stops new applications.
    """

    __tablename__ = "jobs"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    budget: Mapped[Decimal | None] = mapped_column(Money)
    duration: Mapped[int | None] = mapped_column(Integer)  # days
    created_by: Mapped[str] = mapped_column(
        String(32), ForeignKey("persons.id"), nullable=False, index=True
    )

    blocked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    suspended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

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

    customer: Mapped["Person"] = relationship(lazy="joined")

    __table_args__ = (
        Index("idx_jobs_created_at", "created_at"),
    )

    @property
    def is_blocked(self) -> bool:
        return self.blocked_at is not None

    @property
    def is_suspended(self) -> bool:
        return self.suspended_at is not None

    def __repr__(self):
        return f"<Job(id={self.id}, title={self.title})>"
