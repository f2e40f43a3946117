"""Contract service functions.

Contracts are created from an application by the job's creator and then move
through the workflow in core.contract_workflow. Each move is a conditional
UPDATE on the expected status, so two concurrent attempts from the same
status cannot both succeed.
"""

from typing import Any, Optional
from datetime import datetime, timezone
from decimal import Decimal
import logging

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError

from api.services.chats import add_message, ensure_chat
from core.contract_workflow import ContractAction, ContractRole, plan_transition
from core.errors import (
    ErrorKind,
    ServiceError,
    duplication,
    field_invalid_format,
    inappropriate_action,
    insufficient_rights,
    not_found,
    validation_failed,
)
from core.integrations.blockchain import BalanceOracle
from core.security import is_ethereum_address, new_id, normalize_address
from core.utils.formatting import format_datetime, format_decimal
from core.utils.validators import (
    optional_days,
    require_positive_amount,
    require_text,
    validate_address,
)
from database.engine import Database
from database.models.applications import Application
from database.models.chats import application_topic
from database.models.contracts import Contract, ContractStatus
from database.models.persons import Person

logger = logging.getLogger(__name__)


def insufficient_funds(address: str) -> ServiceError:
    return ServiceError(ErrorKind.INSUFFICIENT_FUNDS, tech_info=address)


def status_message(status: ContractStatus) -> str:
    return f"Contract has been {status.value}"


def contract_to_dict(
    contract: Contract,
    customer: Optional[Person] = None,
    performer: Optional[Person] = None,
) -> dict[str, Any]:
    return {
        "id": contract.id,
        "application_id": contract.application_id,
        "customer_id": contract.customer_id,
        "performer_id": contract.performer_id,
        "customer_display_name": customer.display_name if customer else None,
        "performer_display_name": performer.display_name if performer else None,
        "title": contract.title,
        "description": contract.description,
        "price": format_decimal(contract.price),
        "duration": contract.duration,
        "status": contract.status.value,
        "contract_address": contract.contract_address,
        "customer_address": contract.customer_address,
        "performer_address": contract.performer_address,
        "created_by": contract.created_by,
        "created_at": format_datetime(contract.created_at),
        "updated_at": format_datetime(contract.updated_at),
    }


async def _serialize(session, contract: Contract) -> dict[str, Any]:
    customer = await session.get(Person, contract.customer_id)
    performer = await session.get(Person, contract.performer_id)
    return contract_to_dict(contract, customer, performer)


def role_of(contract: Contract, person_id: str) -> Optional[ContractRole]:
    if person_id == contract.customer_id:
        return ContractRole.CUSTOMER
    if person_id == contract.performer_id:
        return ContractRole.PERFORMER
    return None


async def _load_for_party(session, contract_id: str, person_id: str) -> Contract:
    """Contract visible to one of its parties, not found for anybody else."""
    result = await session.execute(
        select(Contract).where(
            Contract.id == contract_id,
            or_(Contract.customer_id == person_id, Contract.performer_id == person_id),
        )
    )
    contract = result.scalar_one_or_none()
    if contract is None:
        raise not_found()
    return contract


async def _announce(session, contract: Contract, author: Person) -> None:
    """Post the status change into the application chat."""
    customer = await session.get(Person, contract.customer_id)
    performer = await session.get(Person, contract.performer_id)
    chat = await ensure_chat(
        session, application_topic(contract.application_id), [performer, customer]
    )
    await add_message(session, chat, author, status_message(contract.status))


# ==================== Creation ===================== #

async def create_contract(
    db: Database,
    customer_id: str,
    application_id: Optional[str],
    title: Optional[str],
    description: Optional[str],
    price: Optional[Decimal],
    duration: Optional[int] = None,
    performer_id: Optional[str] = None,
) -> dict[str, Any]:
    """
    Create a contract from an application.

    Args:
        db: Database handle
        customer_id: Caller, must be the creator of the application's job
        application_id: Source application
        title: Required title
        description: Required description
        price: Positive price
        duration: Optional duration in days
        performer_id: Optional, must equal the applicant when given

    Returns:
        Created contract in status "created"
    """
    application_id = require_text("application_id", application_id)
    title = require_text("title", title)
    description = require_text("description", description)
    price = require_positive_amount("price", price)
    duration = optional_days("duration", duration)

    async with db.transaction() as session:
        application = await session.get(Application, application_id)
        if application is None:
            raise not_found()

        customer = await session.get(Person, customer_id)
        if customer is None:
            raise not_found()
        if customer.id != application.job.created_by:
            raise insufficient_rights()

        customer_address = normalize_address(customer.ethereum_address)
        if not customer_address:
            raise validation_failed("customer does not have wallet")

        performer = application.applicant
        if performer_id and performer_id.strip() != performer.id:
            raise field_invalid_format("performer_id")
        if customer.id == performer.id:
            raise inappropriate_action()

        performer_address = normalize_address(performer.ethereum_address)
        if not performer_address:
            raise validation_failed("performer does not have wallet")
        if performer_address == customer_address:
            raise validation_failed("customer and performer addresses cannot be the same")

        existing = await session.scalar(
            select(Contract.id).where(Contract.application_id == application.id)
        )
        if existing is not None:
            raise duplication("contract already exists", tech_info=existing)

        contract = Contract(
            id=new_id(),
            customer_id=customer.id,
            performer_id=performer.id,
            application_id=application.id,
            title=title,
            description=description,
            price=price,
            duration=duration,
            status=ContractStatus.CREATED,
            customer_address=customer_address,
            performer_address=performer_address,
            created_by=customer.id,
        )
        session.add(contract)
        try:
            await session.flush()
        except IntegrityError:
            raise duplication("contract already exists", tech_info=application.id)

        await _announce(session, contract, customer)

        logger.info(f"Contract {contract.id} created for application {application.id}")
        return contract_to_dict(contract, customer, performer)


# ==================== Reading ===================== #

async def get_contract(db: Database, actor_id: str, contract_id: str) -> dict[str, Any]:
    async with db.transaction(read_only=True) as session:
        contract = await _load_for_party(session, contract_id, actor_id)
        return await _serialize(session, contract)


async def list_contracts(db: Database, actor_id: str) -> list[dict[str, Any]]:
    """Contracts where the actor is the customer or the performer, newest first."""
    async with db.transaction(read_only=True) as session:
        result = await session.execute(
            select(Contract)
            .where(or_(Contract.customer_id == actor_id, Contract.performer_id == actor_id))
            .order_by(Contract.created_at.desc())
        )
        return [await _serialize(session, c) for c in result.scalars().all()]


# ==================== Workflow ===================== #

async def transition(
    db: Database,
    oracle: BalanceOracle,
    actor_id: str,
    contract_id: str,
    action: ContractAction,
    contract_address: Optional[str] = None,
) -> dict[str, Any]:
    """
    Move a contract one step along the workflow.

    Args:
        db: Database handle
        oracle: Balance source consulted before funding
        actor_id: Person performing the action
        contract_id: Contract to move
        action: Requested action
        contract_address: Deployed contract address, required for deploy

    Returns:
        Contract after the move

    Raises:
        ServiceError: not found for strangers, insufficient rights for the
            wrong party, inappropriate action for the wrong status,
            insufficient funds when funding an under-funded address
    """
    if action == ContractAction.DEPLOY:
        contract_address = validate_address("contract_address", contract_address)

    async with db.transaction() as session:
        contract = await _load_for_party(session, contract_id, actor_id)
        step = plan_transition(contract.status, action, role_of(contract, actor_id))

        values: dict[str, Any] = {
            "status": step.target,
            "updated_at": datetime.now(timezone.utc),
        }
        if action == ContractAction.DEPLOY:
            values["contract_address"] = contract_address
        elif step.needs_address and not is_ethereum_address(contract.contract_address):
            raise field_invalid_format("contract_address")

        if action == ContractAction.FUND:
            balance = await oracle.balance(contract.contract_address)
            if balance < contract.price:
                logger.info(
                    f"Contract {contract.id} balance {balance} is below price {contract.price}"
                )
                raise insufficient_funds(contract.contract_address)

        result = await session.execute(
            update(Contract)
            .where(Contract.id == contract.id, Contract.status == step.source)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            # somebody else moved it first
            raise inappropriate_action()

        await session.refresh(contract)
        author = await session.get(Person, actor_id)
        await _announce(session, contract, author)

        logger.info(f"Contract {contract.id} moved {step.source.value} -> {step.target.value}")
        return await _serialize(session, contract)
