from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.core.auth import get_admin_or_supervisor
from feedback360.database import get_db
from feedback360.models.profile import Profile
from feedback360.schemas.assessment import TeamResult
from feedback360.schemas.common import DataResponse
from feedback360.schemas.user import ProfileResponse
from feedback360.services import assessment as assessment_service
from feedback360.services import results as results_service

router = APIRouter(prefix="/supervisor", tags=["supervisor"])


@router.get("/assessable-users", response_model=DataResponse[List[ProfileResponse]])
async def assessable_users(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    return {"data": await assessment_service.get_assessable_users(db, current_user.id)}


@router.get("/assessed", response_model=DataResponse[List[str]])
async def assessed_users(
    period_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    return {"data": await assessment_service.get_assessed_user_ids(db, current_user.id, period_id)}


@router.get("/team-results", response_model=DataResponse[List[TeamResult]])
async def team_results(
    period_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    return {"data": await results_service.get_team_results(db, period_id)}
