"""
Job management endpoints.

Listing and viewing jobs is public. Blocked jobs are never returned.
"""

from fastapi import APIRouter, Path, Response, status

from api.dependencies import AdminPerson, CurrentPerson, DatabaseDep
from api.schemas.jobs import CreateJobRequest, UpdateJobRequest
from api.services import jobs as job_service

router = APIRouter(prefix="/jobs")


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create Job",
    description="Post a new job. The customer must have a wallet address.",
)
async def create_job(
    request: CreateJobRequest,
    response: Response,
    current_person: CurrentPerson,
    db: DatabaseDep,
):
    job = await job_service.create_job(
        db,
        customer_id=current_person.id,
        title=request.title,
        description=request.description,
        budget=request.budget,
        duration=request.duration,
    )
    response.headers["Location"] = f"/jobs/{job['id']}"
    return job


@router.get("", summary="List Jobs", description="Jobs that are not blocked, newest first.")
async def list_jobs(db: DatabaseDep):
    return await job_service.list_jobs(db)


@router.get("/{job_id}", summary="Get Job")
async def get_job(db: DatabaseDep, job_id: str = Path(..., description="Job ID")):
    return await job_service.get_job(db, job_id)


@router.put(
    "/{job_id}",
    summary="Update Job",
    description="Change fields of a job. Owner only; omitted fields stay untouched.",
)
async def update_job(
    request: UpdateJobRequest,
    current_person: CurrentPerson,
    db: DatabaseDep,
    job_id: str = Path(..., description="Job ID"),
):
    return await job_service.patch_job(db, current_person.id, job_id, request.to_patch())


@router.post(
    "/{job_id}/block",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Block Job",
    description="Hide a job permanently. Admin only.",
)
async def block_job(
    admin: AdminPerson,
    db: DatabaseDep,
    job_id: str = Path(..., description="Job ID"),
):
    await job_service.block_job(db, job_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{job_id}/suspend",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Suspend Job",
    description="Stop accepting applications. Owner only.",
)
async def suspend_job(
    current_person: CurrentPerson,
    db: DatabaseDep,
    job_id: str = Path(..., description="Job ID"),
):
    await job_service.suspend_job(db, current_person.id, job_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{job_id}/resume",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Resume Job",
    description="Accept applications again. Owner only.",
)
async def resume_job(
    current_person: CurrentPerson,
    db: DatabaseDep,
    job_id: str = Path(..., description="Job ID"),
):
    await job_service.resume_job(db, current_person.id, job_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
