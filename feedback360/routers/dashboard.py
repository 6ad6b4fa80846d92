# feedback360/routers/dashboard.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.core.auth import get_current_user
from feedback360.database import get_db
from feedback360.models.profile import Profile
from feedback360.schemas.common import DataResponse
from feedback360.schemas.dashboard import DashboardStats
from feedback360.services.dashboard import get_dashboard_stats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DataResponse[DashboardStats])
async def dashboard_stats(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await get_dashboard_stats(db, current_user)}
