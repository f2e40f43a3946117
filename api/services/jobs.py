"""Job service functions."""

from typing import Any, Optional
from datetime import datetime, timezone
from decimal import Decimal
import logging

from sqlalchemy import select, func

from api.schemas.jobs import JobPatch
from core.errors import insufficient_rights, not_found, validation_failed
from core.security import new_id
from core.utils.formatting import format_datetime, format_decimal
from core.utils.validators import optional_amount, optional_days, require_text
from database.engine import Database
from database.models.applications import Application
from database.models.jobs import Job
from database.models.persons import Person

logger = logging.getLogger(__name__)


def _application_count():
    return (
        select(func.count(Application.id))
        .where(Application.job_id == Job.id)
        .correlate(Job)
        .scalar_subquery()
        .label("application_count")
    )


def job_to_dict(job: Job, application_count: Optional[int] = None) -> dict[str, Any]:
    data = {
        "id": job.id,
        "title": job.title,
        "description": job.description,
        "budget": format_decimal(job.budget),
        "duration": job.duration,
        "created_by": job.created_by,
        "created_at": format_datetime(job.created_at),
        "updated_at": format_datetime(job.updated_at),
        "is_suspended": job.is_suspended,
        "customer_display_name": job.customer.display_name if job.customer else None,
        "customer_ethereum_address": job.customer.ethereum_address if job.customer else None,
    }
    if application_count is not None:
        data["application_count"] = application_count
    return data


async def load_visible_job(session, job_id: str) -> Job:
    """Load a job that is not blocked or raise not found."""
    job = await session.get(Job, job_id)
    if job is None or job.is_blocked:
        raise not_found()
    return job


async def _require_wallet(session, person_id: str) -> Person:
    customer = await session.get(Person, person_id)
    if customer is None:
        raise not_found("customer does not exist")
    if not customer.ethereum_address.strip():
        raise validation_failed("customer does not have wallet")
    return customer


async def create_job(
    db: Database,
    customer_id: str,
    title: Optional[str],
    description: Optional[str],
    budget: Optional[Decimal] = None,
    duration: Optional[int] = None,
) -> dict[str, Any]:
    """
    Create a new job posting.

    Args:
        db: Database handle
        customer_id: Person creating the job
        title: Required title
        description: Required description
        budget: Optional budget, zero is stored as "not specified"
        duration: Optional duration in days, zero is stored as "not specified"

    Returns:
        Created job
    """
    title = require_text("title", title)
    description = require_text("description", description)
    budget = optional_amount("budget", budget)
    duration = optional_days("duration", duration)

    async with db.transaction() as session:
        customer = await _require_wallet(session, customer_id)

        job = Job(
            id=new_id(),
            title=title,
            description=description,
            budget=budget,
            duration=duration,
            created_by=customer.id,
        )
        job.customer = customer
        session.add(job)
        await session.flush()

        logger.info(f"Job {job.id} created by {customer.id}")
        return job_to_dict(job, application_count=0)


async def get_job(db: Database, job_id: str) -> dict[str, Any]:
    async with db.transaction(read_only=True) as session:
        result = await session.execute(
            select(Job, _application_count())
            .where(Job.id == job_id, Job.blocked_at.is_(None))
        )
        row = result.one_or_none()
        if row is None:
            raise not_found()
        job, application_count = row
        return job_to_dict(job, application_count=application_count)


async def list_jobs(db: Database) -> list[dict[str, Any]]:
    """Jobs that are not blocked, newest first."""
    async with db.transaction(read_only=True) as session:
        result = await session.execute(
            select(Job, _application_count())
            .where(Job.blocked_at.is_(None))
            .order_by(Job.created_at.desc(), Job.id)
        )
        return [job_to_dict(job, application_count=count) for job, count in result.all()]


async def patch_job(
    db: Database,
    actor_id: str,
    job_id: str,
    patch: JobPatch,
) -> dict[str, Any]:
    """Update the fields present in `patch`. Owner only."""
    async with db.transaction() as session:
        job = await load_visible_job(session, job_id)
        if job.created_by != actor_id:
            raise insufficient_rights()

        if patch.title.present:
            job.title = require_text("title", patch.title.value)
        if patch.description.present:
            job.description = require_text("description", patch.description.value)
        if patch.budget.present:
            job.budget = optional_amount("budget", patch.budget.value)
        if patch.duration.present:
            job.duration = optional_days("duration", patch.duration.value)

        job.updated_at = datetime.now(timezone.utc)
        await session.flush()

        count = await session.scalar(
            select(func.count(Application.id)).where(Application.job_id == job.id)
        )
        return job_to_dict(job, application_count=count)


async def block_job(db: Database, job_id: str) -> None:
    """Hide a job permanently. Callers must check admin rights."""
    async with db.transaction() as session:
        job = await load_visible_job(session, job_id)
        job.blocked_at = datetime.now(timezone.utc)
        logger.info(f"Job {job_id} blocked")


async def suspend_job(db: Database, actor_id: str, job_id: str) -> None:
    async with db.transaction() as session:
        job = await load_visible_job(session, job_id)
        if job.created_by != actor_id:
            raise insufficient_rights()
        job.suspended_at = datetime.now(timezone.utc)
        logger.info(f"Job {job_id} suspended")


async def resume_job(db: Database, actor_id: str, job_id: str) -> None:
    async with db.transaction() as session:
        job = await load_visible_job(session, job_id)
        if job.created_by != actor_id:
            raise insufficient_rights()
        if not job.is_suspended:
            raise validation_failed("job is not suspended")
        job.suspended_at = None
        logger.info(f"Job {job_id} resumed")
