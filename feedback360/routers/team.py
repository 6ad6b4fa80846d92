# feedback360/routers/team.py
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.core.auth import get_current_user, get_current_role, get_admin_or_supervisor
from feedback360.database import get_db
from feedback360.models.profile import Profile
from feedback360.schemas.common import DataResponse
from feedback360.schemas.team import AssignmentStats, MemberPerformance, UserComment, UserPerformance
from feedback360.schemas.user import ProfileResponse
from feedback360.services import team as team_service
from feedback360.services.users import list_team_members

router = APIRouter(prefix="/team", tags=["team"])


@router.get("", response_model=DataResponse[List[ProfileResponse]])
async def team_members(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await list_team_members(db)}


@router.get("/performance", response_model=DataResponse[List[MemberPerformance]])
async def team_performance(
    period_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    return {"data": await team_service.get_team_performance(db, period_id)}


@router.get("/assignment-stats", response_model=DataResponse[AssignmentStats])
async def assignment_stats(
    period_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    return {"data": await team_service.get_assignment_stats(db, period_id)}


@router.get("/user/{user_id}", response_model=DataResponse[ProfileResponse])
async def team_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
    role: str = Depends(get_current_role),
):
    return {"data": await team_service.get_visible_profile(db, current_user, role, user_id)}


@router.get("/user/{user_id}/performance", response_model=DataResponse[Optional[UserPerformance]])
async def team_user_performance(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
    role: str = Depends(get_current_role),
):
    profile = await team_service.get_visible_profile(db, current_user, role, user_id)
    return {"data": await team_service.get_user_performance(db, profile.id)}


@router.get("/user/{user_id}/comments", response_model=DataResponse[List[UserComment]])
async def team_user_comments(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
    role: str = Depends(get_current_role),
):
    profile = await team_service.get_visible_profile(db, current_user, role, user_id)
    return {"data": await team_service.get_user_comments(db, profile.id)}
