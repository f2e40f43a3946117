"""
Contract endpoints.

Every action answers with the contract after the move. Status changes are
pushed to the notification channel in the background.
"""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Path, Response, status

from api.dependencies import BalanceOracleDep, CurrentPerson, DatabaseDep, NotifierDep
from api.schemas.contracts import CreateContractRequest, DeployContractRequest
from api.services import contracts as contract_service
from core.contract_workflow import ContractAction
from core.integrations.notifications import push_quietly

router = APIRouter(prefix="/contracts")


def _notify(background_tasks: BackgroundTasks, notifier, contract: dict) -> None:
    text = f"Contract {contract['id']} '{contract['title']}' is {contract['status']}"
    background_tasks.add_task(push_quietly, notifier, text)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create Contract",
    description="Create a contract from an application. Only the job creator may do this.",
)
async def create_contract(
    request: CreateContractRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    current_person: CurrentPerson,
    db: DatabaseDep,
    notifier: NotifierDep,
):
    contract = await contract_service.create_contract(
        db,
        customer_id=current_person.id,
        application_id=request.application_id,
        title=request.title,
        description=request.description,
        price=request.price,
        duration=request.duration,
        performer_id=request.performer_id,
    )
    response.headers["Location"] = f"/contracts/{contract['id']}"
    _notify(background_tasks, notifier, contract)
    return contract


@router.get("", summary="List Contracts")
async def list_contracts(current_person: CurrentPerson, db: DatabaseDep):
    """Contracts where the caller is the customer or the performer."""
    return await contract_service.list_contracts(db, current_person.id)


@router.get("/{contract_id}", summary="Get Contract")
async def get_contract(
    current_person: CurrentPerson,
    db: DatabaseDep,
    contract_id: str = Path(..., description="Contract ID"),
):
    return await contract_service.get_contract(db, current_person.id, contract_id)


async def _act(
    action: ContractAction,
    contract_id: str,
    current_person,
    db,
    oracle,
    notifier,
    background_tasks: BackgroundTasks,
    contract_address: Optional[str] = None,
) -> dict:
    contract = await contract_service.transition(
        db,
        oracle,
        actor_id=current_person.id,
        contract_id=contract_id,
        action=action,
        contract_address=contract_address,
    )
    _notify(background_tasks, notifier, contract)
    return contract


@router.post("/{contract_id}/accept", summary="Accept Contract", description="Performer only.")
async def accept_contract(
    background_tasks: BackgroundTasks,
    current_person: CurrentPerson,
    db: DatabaseDep,
    oracle: BalanceOracleDep,
    notifier: NotifierDep,
    contract_id: str = Path(..., description="Contract ID"),
):
    return await _act(
        ContractAction.ACCEPT, contract_id, current_person, db, oracle, notifier, background_tasks
    )


@router.post(
    "/{contract_id}/deploy",
    summary="Deploy Contract",
    description="Record the deployed contract address. Customer only.",
)
async def deploy_contract(
    background_tasks: BackgroundTasks,
    current_person: CurrentPerson,
    db: DatabaseDep,
    oracle: BalanceOracleDep,
    notifier: NotifierDep,
    contract_id: str = Path(..., description="Contract ID"),
    request: Optional[DeployContractRequest] = None,
):
    return await _act(
        ContractAction.DEPLOY,
        contract_id,
        current_person,
        db,
        oracle,
        notifier,
        background_tasks,
        contract_address=request.contract_address if request else None,
    )


@router.post("/{contract_id}/sign", summary="Sign Contract", description="Performer only.")
async def sign_contract(
    background_tasks: BackgroundTasks,
    current_person: CurrentPerson,
    db: DatabaseDep,
    oracle: BalanceOracleDep,
    notifier: NotifierDep,
    contract_id: str = Path(..., description="Contract ID"),
):
    return await _act(
        ContractAction.SIGN, contract_id, current_person, db, oracle, notifier, background_tasks
    )


@router.post(
    "/{contract_id}/fund",
    summary="Fund Contract",
    description="Customer only. The contract address must hold at least the price.",
)
async def fund_contract(
    background_tasks: BackgroundTasks,
    current_person: CurrentPerson,
    db: DatabaseDep,
    oracle: BalanceOracleDep,
    notifier: NotifierDep,
    contract_id: str = Path(..., description="Contract ID"),
):
    return await _act(
        ContractAction.FUND, contract_id, current_person, db, oracle, notifier, background_tasks
    )


@router.post("/{contract_id}/approve", summary="Approve Contract", description="Customer only.")
async def approve_contract(
    background_tasks: BackgroundTasks,
    current_person: CurrentPerson,
    db: DatabaseDep,
    oracle: BalanceOracleDep,
    notifier: NotifierDep,
    contract_id: str = Path(..., description="Contract ID"),
):
    return await _act(
        ContractAction.APPROVE, contract_id, current_person, db, oracle, notifier, background_tasks
    )


@router.post("/{contract_id}/complete", summary="Complete Contract", description="Performer only.")
async def complete_contract(
    background_tasks: BackgroundTasks,
    current_person: CurrentPerson,
    db: DatabaseDep,
    oracle: BalanceOracleDep,
    notifier: NotifierDep,
    contract_id: str = Path(..., description="Contract ID"),
):
    return await _act(
        ContractAction.COMPLETE, contract_id, current_person, db, oracle, notifier, background_tasks
    )
