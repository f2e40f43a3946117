"""
Application Models

A performer's bid on a job.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    ForeignKey,
    DateTime,
    func,
    Text,
    UniqueConstraint,
)
from database.engine import Base, utc_now
from database.types import Money
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.jobs import Job
    from database.models.persons import Person


# ==================== Application Model ===================== #
class Application(Base):
    """One applicant's bid on one job."""

    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("job_id", "applicant_id", name="uq_applications_job_applicant"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    job_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("jobs.id"), nullable=False, index=True
    )
    applicant_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("persons.id"), nullable=False, index=True
    )
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False)

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

    job: Mapped["Job"] = relationship(lazy="joined")
    applicant: Mapped["Person"] = relationship(lazy="joined")

    def __repr__(self):
        return f"<Application(id={self.id}, job_id={self.job_id}, applicant_id={self.applicant_id})>"
