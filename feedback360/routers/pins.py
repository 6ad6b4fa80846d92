# feedback360/routers/pins.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.core.auth import get_current_user
from feedback360.database import get_db
from feedback360.models.profile import Profile
from feedback360.schemas.common import DataResponse
from feedback360.schemas.pin import (
    AllowanceResponse,
    CancelPinRequest,
    GivePinRequest,
    GivePinResponse,
    PinHistoryItem,
    PinPeriodResponse,
    PinRanking,
    PinStats,
)
from feedback360.schemas.user import ProfileResponse
from feedback360.services import pins as pin_service
from feedback360.services.pin_periods import get_active_pin_period

router = APIRouter(prefix="/pins", tags=["pins"])


@router.post("/give", response_model=GivePinResponse)
async def give_pin(
    payload: GivePinRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    result = await pin_service.give_pin(db, current_user.id, payload.receiver_id)
    return GivePinResponse(**result)


@router.post("/cancel", response_model=DataResponse[AllowanceResponse])
async def cancel_pin(
    payload: CancelPinRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await pin_service.cancel_pin(db, payload.pin_id, current_user.id)}


@router.get("/allowance", response_model=DataResponse[AllowanceResponse])
async def allowance(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await pin_service.get_allowance(db, current_user.id)}


@router.get("/history", response_model=DataResponse[List[PinHistoryItem]])
async def history(
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await pin_service.get_pin_history(db, current_user.id, limit)}


@router.get("/rankings", response_model=DataResponse[List[PinRanking]])
async def rankings(
    limit: int = Query(10, ge=1, le=100),
    period: str = Query("all", description="week, all or YYYY-MM"),
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await pin_service.get_pin_rankings(db, limit, period)}


@router.get("/stats", response_model=DataResponse[PinStats])
async def stats(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await pin_service.get_pin_statistics(db)}


@router.get("/participants", response_model=DataResponse[List[ProfileResponse]])
async def participants(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await pin_service.get_participants(db, exclude_id=current_user.id)}


# Public, like the running triwulan: the pin page shows the window before login.
@router.get("/period/active", response_model=DataResponse[PinPeriodResponse])
async def active_pin_period(db: AsyncSession = Depends(get_db)):
    return {"data": await get_active_pin_period(db)}
