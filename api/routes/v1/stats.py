"""Platform statistics."""

from fastapi import APIRouter

from api.dependencies import DatabaseDep
from api.services import stats as stats_service

router = APIRouter()


@router.get(
    "/stats",
    summary="Platform Statistics",
    description="Registrations per day, open jobs, contract count and settled volume.",
)
async def get_stats(db: DatabaseDep):
    return await stats_service.get_stats(db)
