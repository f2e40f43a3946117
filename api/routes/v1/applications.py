"""
Application endpoints.

Applying to a job also opens the chat between the applicant and the job
creator.
"""

from fastapi import APIRouter, Path, Response, status

from api.dependencies import CurrentPerson, DatabaseDep
from api.schemas.applications import CreateApplicationRequest
from api.services import applications as application_service

router = APIRouter()


@router.post(
    "/jobs/{job_id}/applications",
    status_code=status.HTTP_201_CREATED,
    summary="Apply To Job",
    description="File an application. One application per job and applicant.",
)
async def create_application(
    request: CreateApplicationRequest,
    response: Response,
    current_person: CurrentPerson,
    db: DatabaseDep,
    job_id: str = Path(..., description="Job ID"),
):
    application = await application_service.create_application(
        db,
        applicant_id=current_person.id,
        job_id=job_id,
        comment=request.comment,
        price=request.price,
    )
    response.headers["Location"] = f"/applications/{application['id']}"
    return application


@router.get(
    "/jobs/{job_id}/applications",
    summary="List Job Applications",
    description="All applications for the job creator, the caller's own for anybody else.",
)
async def list_job_applications(
    current_person: CurrentPerson,
    db: DatabaseDep,
    job_id: str = Path(..., description="Job ID"),
):
    return await application_service.list_by_job(db, current_person.id, job_id)


@router.get(
    "/jobs/{job_id}/application",
    summary="My Application For Job",
    description="The caller's application for the job, or an empty object.",
)
async def get_job_application(
    current_person: CurrentPerson,
    db: DatabaseDep,
    job_id: str = Path(..., description="Job ID"),
):
    return await application_service.get_for_job(db, current_person.id, job_id)


@router.get("/applications", summary="List My Applications")
async def list_applications(current_person: CurrentPerson, db: DatabaseDep):
    return await application_service.list_by_applicant(db, current_person.id)


@router.get(
    "/applications/my",
    summary="List My Applications",
    description="The caller's applications with job summary and contract details.",
)
async def list_my_applications(current_person: CurrentPerson, db: DatabaseDep):
    return await application_service.list_by_applicant(db, current_person.id)


@router.get("/applications/{application_id}", summary="Get Application")
async def get_application(
    current_person: CurrentPerson,
    db: DatabaseDep,
    application_id: str = Path(..., description="Application ID"),
):
    return await application_service.get_application(db, current_person.id, application_id)


@router.get("/applications/{application_id}/chat", summary="Get Application Chat")
async def get_application_chat(
    current_person: CurrentPerson,
    db: DatabaseDep,
    application_id: str = Path(..., description="Application ID"),
):
    return await application_service.get_application_chat(db, current_person.id, application_id)
