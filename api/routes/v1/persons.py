"""
Person management endpoints.

Listing and creating persons is reserved for administrators; a person may
only change their own profile.
"""

from typing import Any

from fastapi import APIRouter, Body, Path, Response, status

from api.dependencies import AdminPerson, CurrentPerson, DatabaseDep
from api.schemas.persons import PersonCreateRequest, PersonPatchRequest
from api.services import persons as person_service

router = APIRouter(prefix="/persons")


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create Person",
    description="Create a person. Admin only.",
)
async def create_person(
    request: PersonCreateRequest,
    response: Response,
    admin: AdminPerson,
    db: DatabaseDep,
):
    person = await person_service.add_person(
        db,
        login=request.login,
        password=request.password or "",
        display_name=request.display_name,
        email=request.email,
        ethereum_address=request.ethereum_address,
        is_admin=request.is_admin,
    )
    response.headers["Location"] = f"/persons/{person['id']}"
    return person


@router.get("", summary="List Persons", description="All persons. Admin only.")
async def list_persons(admin: AdminPerson, db: DatabaseDep):
    return await person_service.list_persons(db)


@router.get("/{person_id}", summary="Get Person")
async def get_person(
    current_person: CurrentPerson,
    db: DatabaseDep,
    person_id: str = Path(..., description="Person ID"),
):
    return await person_service.get_person(db, person_id)


@router.put(
    "/{person_id}",
    summary="Update Person",
    description="Change fields of the caller's own profile. Omitted fields stay untouched.",
)
async def update_person(
    request: PersonPatchRequest,
    current_person: CurrentPerson,
    db: DatabaseDep,
    person_id: str = Path(..., description="Person ID"),
):
    return await person_service.patch_person(
        db, current_person.id, person_id, request.to_patch()
    )


@router.put("/{person_id}/resources", summary="Set Person Resources")
async def set_resources(
    current_person: CurrentPerson,
    db: DatabaseDep,
    person_id: str = Path(..., description="Person ID"),
    resources: dict[str, Any] = Body(...),
):
    """Replace the caller's free-form resources document."""
    return await person_service.set_resources(db, current_person.id, person_id, resources)
