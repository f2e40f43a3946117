"""Application service functions."""

from typing import Any, Optional
from decimal import Decimal
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from api.services.chats import add_message, chat_to_dict, ensure_chat
from core.errors import (
    ErrorKind,
    ServiceError,
    insufficient_rights,
    not_found,
    validation_failed,
)
from core.security import new_id
from core.utils.formatting import format_datetime, format_decimal
from core.utils.validators import require_positive_amount, require_text
from api.services.jobs import load_visible_job
from database.engine import Database
from database.models.applications import Application
from database.models.chats import application_topic
from database.models.contracts import Contract
from database.models.jobs import Job
from database.models.persons import Person

logger = logging.getLogger(__name__)


def application_already_exists(application_id: Optional[str] = None) -> ServiceError:
    return ServiceError(ErrorKind.APPLICATION_ALREADY_EXISTS, tech_info=application_id)


def application_to_dict(application: Application) -> dict[str, Any]:
    applicant = application.applicant
    return {
        "id": application.id,
        "job_id": application.job_id,
        "applicant_id": application.applicant_id,
        "applicant_display_name": applicant.display_name if applicant else None,
        "applicant_ethereum_address": applicant.ethereum_address if applicant else None,
        "comment": application.comment,
        "price": format_decimal(application.price),
        "created_at": format_datetime(application.created_at),
        "updated_at": format_datetime(application.updated_at),
    }


def can_view(application: Application, person_id: str) -> bool:
    return person_id in (application.applicant_id, application.job.created_by)


async def create_application(
    db: Database,
    applicant_id: str,
    job_id: str,
    comment: Optional[str],
    price: Optional[Decimal],
) -> dict[str, Any]:
    """
    File an application and open its chat in one transaction.

    The chat is keyed by the application topic, enrolls the applicant and the
    job creator, and starts with the comment authored by the applicant.

    Args:
        db: Database handle
        applicant_id: Person applying
        job_id: Target job
        comment: Required cover text
        price: Proposed price, must be positive

    Returns:
        Created application
    """
    comment = require_text("comment", comment)
    price = require_positive_amount("price", price)

    async with db.transaction() as session:
        job = await load_visible_job(session, job_id)
        if job.is_suspended:
            raise validation_failed("job does not accept new applications")

        if job.created_by == applicant_id:
            raise insufficient_rights()

        applicant = await session.get(Person, applicant_id)
        if applicant is None:
            raise not_found("applicant does not exist")
        if not applicant.ethereum_address.strip():
            raise validation_failed("applicant does not have wallet")

        existing = await session.scalar(
            select(Application.id).where(
                Application.job_id == job.id,
                Application.applicant_id == applicant.id,
            )
        )
        if existing is not None:
            raise application_already_exists(existing)

        application = Application(
            id=new_id(),
            job_id=job.id,
            applicant_id=applicant.id,
            comment=comment,
            price=price,
        )
        application.job = job
        application.applicant = applicant
        session.add(application)
        try:
            await session.flush()
        except IntegrityError:
            raise application_already_exists()

        chat = await ensure_chat(
            session, application_topic(application.id), [applicant, job.customer]
        )
        await add_message(session, chat, applicant, comment)

        logger.info(f"Application {application.id} filed for job {job.id}")
        return application_to_dict(application)


async def get_application(db: Database, actor_id: str, application_id: str) -> dict[str, Any]:
    """Visible to the applicant and the job creator only."""
    async with db.transaction(read_only=True) as session:
        application = await session.get(Application, application_id)
        if application is None or not can_view(application, actor_id):
            raise not_found()
        return application_to_dict(application)


async def list_by_job(db: Database, actor_id: str, job_id: str) -> list[dict[str, Any]]:
    """
    Applications for a job.

    The job creator sees all of them, an applicant sees their own and
    anybody else gets an empty list.
    """
    async with db.transaction(read_only=True) as session:
        job = await load_visible_job(session, job_id)

        stmt = select(Application).where(Application.job_id == job.id)
        if job.created_by != actor_id:
            stmt = stmt.where(Application.applicant_id == actor_id)

        result = await session.execute(stmt.order_by(Application.created_at.desc()))
        return [application_to_dict(a) for a in result.scalars().all()]


async def list_by_applicant(db: Database, actor_id: str) -> list[dict[str, Any]]:
    """The actor's own applications with job summary and contract details."""
    async with db.transaction(read_only=True) as session:
        result = await session.execute(
            select(Application, Contract)
            .join(Job, Job.id == Application.job_id)
            .outerjoin(Contract, Contract.application_id == Application.id)
            .where(Application.applicant_id == actor_id, Job.blocked_at.is_(None))
            .order_by(Application.created_at.desc())
        )

        items = []
        for application, contract in result.all():
            item = application_to_dict(application)
            item.update(
                job_title=application.job.title,
                job_description=application.job.description,
                job_budget=format_decimal(application.job.budget),
                contract_id=contract.id if contract else None,
                contract_status=contract.status.value if contract else None,
                contract_price=format_decimal(contract.price) if contract else None,
            )
            items.append(item)
        return items


async def get_for_job(db: Database, actor_id: str, job_id: str) -> dict[str, Any]:
    """The actor's application for a job, or {} when there is none."""
    async with db.transaction(read_only=True) as session:
        job = await load_visible_job(session, job_id)
        result = await session.execute(
            select(Application).where(
                Application.job_id == job.id,
                Application.applicant_id == actor_id,
            )
        )
        application = result.scalar_one_or_none()
        if application is None:
            return {}
        return application_to_dict(application)


async def get_application_chat(db: Database, actor_id: str, application_id: str) -> dict[str, Any]:
    """
    Chat of an application, opened on first request if it is missing.

    Repeated calls return the same chat.
    """
    async with db.transaction() as session:
        application = await session.get(Application, application_id)
        if application is None or not can_view(application, actor_id):
            raise not_found()

        chat = await ensure_chat(
            session,
            application_topic(application.id),
            [application.applicant, application.job.customer],
        )
        return await chat_to_dict(session, chat)
