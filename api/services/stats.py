"""Statistics service functions."""

from collections import Counter
from decimal import Decimal
from typing import Any
import logging

from sqlalchemy import select, func

from core.utils.formatting import format_day, format_decimal
from database.engine import Database
from database.models.contracts import Contract, ContractStatus
from database.models.jobs import Job
from database.models.persons import Person

logger = logging.getLogger(__name__)

# Statuses in which the price has been paid into the contract
SETTLED_STATUSES = (
    ContractStatus.FUNDED,
    ContractStatus.APPROVED,
    ContractStatus.COMPLETED,
)


async def get_stats(db: Database) -> dict[str, Any]:
    """
    Collect platform statistics.

    Returns:
        registrations: UTC day (YYYY-MM-DD) to number of persons registered that day
        total_registrations: number of persons
        opened_jobs: jobs neither blocked nor suspended
        total_contracts: number of contracts
        total_transactions_volume: sum of prices of funded or later contracts
    """
    async with db.transaction(read_only=True) as session:
        created = await session.scalars(select(Person.created_at))
        registrations = Counter(format_day(ts) for ts in created)

        opened_jobs = await session.scalar(
            select(func.count(Job.id)).where(
                Job.blocked_at.is_(None), Job.suspended_at.is_(None)
            )
        )
        total_contracts = await session.scalar(select(func.count(Contract.id)))

        prices = await session.scalars(
            select(Contract.price).where(Contract.status.in_(SETTLED_STATUSES))
        )
        volume = sum(prices, Decimal("0"))

        return {
            "registrations": dict(sorted(registrations.items())),
            "total_registrations": sum(registrations.values()),
            "opened_jobs": opened_jobs or 0,
            "total_contracts": total_contracts or 0,
            "total_transactions_volume": format_decimal(volume),
        }
