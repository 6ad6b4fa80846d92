from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.core.auth import get_current_user, get_current_role
from feedback360.core.errors import ForbiddenError
from feedback360.database import get_db
from feedback360.models.profile import Profile, ROLE_USER
from feedback360.schemas.assessment import DetailedResultsResponse, WeightedResultResponse
from feedback360.schemas.common import DataResponse
from feedback360.services import results as results_service

router = APIRouter(prefix="/results", tags=["results"])


async def _target_user(db: AsyncSession, current_user: Profile, role: str, user_id: Optional[str]) -> str:
    if not user_id or user_id == current_user.id:
        return current_user.id
    if role != ROLE_USER:
        return user_id
    # regular users may only see colleagues who opted in
    target = await db.get(Profile, user_id)
    if target is None or not target.allow_public_view:
        raise ForbiddenError("Results are not public")
    return user_id


@router.get("/weighted", response_model=DataResponse[WeightedResultResponse])
async def weighted_results(
    user_id: Optional[str] = None,
    period_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
    role: str = Depends(get_current_role),
):
    target = await _target_user(db, current_user, role, user_id)
    return {"data": await results_service.get_weighted_results(db, target, period_id)}


@router.get("/detailed", response_model=DataResponse[DetailedResultsResponse])
async def detailed_results(
    user_id: Optional[str] = None,
    period_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
    role: str = Depends(get_current_role),
):
    target = await _target_user(db, current_user, role, user_id)
    return {"data": await results_service.get_detailed_results(db, target, period_id)}
