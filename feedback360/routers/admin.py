# feedback360/routers/admin.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.core.auth import get_admin_or_supervisor, get_current_admin
from feedback360.database import get_db
from feedback360.models.profile import Profile
from feedback360.schemas.assessment import (
    GenerateAssignmentsRequest,
    GenerateAssignmentsResponse,
    PeriodCreate,
    PeriodResponse,
    PeriodWithCounts,
)
from feedback360.schemas.common import DataResponse, SuccessResponse
from feedback360.schemas.pin import (
    PinPeriodCreate,
    PinPeriodResponse,
    PinPeriodUpdate,
    ResetPinPeriodRequest,
    ResetPinPeriodResponse,
)
from feedback360.schemas.user import AdminStats, ProfileResponse, RoleUpdate, UserCreate, UserUpdate, UserWithRole
from feedback360.services import assessment as assessment_service
from feedback360.services import periods as period_service
from feedback360.services import pin_periods as pin_period_service
from feedback360.services import results as results_service
from feedback360.services import users as user_service
from feedback360.services.roles import set_user_role

router = APIRouter(prefix="/admin", tags=["admin"])


# Periods

@router.get("/periods", response_model=DataResponse[List[PeriodWithCounts]])
async def list_periods(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    return {"data": await period_service.list_periods(db)}


@router.post("/periods", response_model=DataResponse[PeriodResponse])
async def create_period(
    payload: PeriodCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    period = await period_service.create_period(
        db, payload.month, payload.year, payload.start_date, payload.end_date
    )
    return {"data": period}


@router.post("/periods/{period_id}/activate", response_model=DataResponse[PeriodResponse])
async def activate_period(
    period_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    return {"data": await period_service.activate_period(db, period_id)}


@router.post("/periods/{period_id}/complete", response_model=DataResponse[PeriodResponse])
async def complete_period(
    period_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    return {"data": await period_service.complete_period(db, period_id)}


@router.post("/periods/{period_id}/history", response_model=SuccessResponse)
async def record_history(
    period_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    recorded = await results_service.record_history(db, period_id)
    return SuccessResponse(message=f"Recorded {recorded} results")


# Assignments and stats

@router.post("/generate-assignments", response_model=GenerateAssignmentsResponse)
async def generate_assignments(
    payload: GenerateAssignmentsRequest,
    db: AsyncSession = Depends(get_db),
    current_admin: Profile = Depends(get_current_admin),
):
    result = await assessment_service.generate_assignments(db, payload.period_id)
    return GenerateAssignmentsResponse(**result)


@router.get("/stats", response_model=DataResponse[AdminStats])
async def admin_stats(
    db: AsyncSession = Depends(get_db),
    current_admin: Profile = Depends(get_current_admin),
):
    return {"data": await user_service.get_admin_stats(db)}


# Users

@router.get("/users", response_model=DataResponse[List[UserWithRole]])
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_admin: Profile = Depends(get_current_admin),
):
    return {"data": await user_service.list_users(db)}


@router.post("/users", response_model=DataResponse[ProfileResponse])
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_admin: Profile = Depends(get_current_admin),
):
    data = payload.model_dump()
    user = await user_service.create_user(
        db,
        email=data.pop("email"),
        full_name=data.pop("full_name"),
        password=data.pop("password"),
        role=data.pop("role"),
        **data,
    )
    return {"data": user}


@router.patch("/users/{user_id}", response_model=DataResponse[ProfileResponse])
async def update_user(
    user_id: str,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin: Profile = Depends(get_current_admin),
):
    return {"data": await user_service.update_user(db, user_id, payload.model_dump(exclude_unset=True))}


@router.delete("/users/{user_id}", response_model=SuccessResponse)
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_admin: Profile = Depends(get_current_admin),
):
    await user_service.delete_user(db, user_id, acting_user_id=current_admin.id)
    return SuccessResponse(message="User deleted")


@router.put("/users/{user_id}/role", response_model=SuccessResponse)
async def update_role(
    user_id: str,
    payload: RoleUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin: Profile = Depends(get_current_admin),
):
    await set_user_role(db, user_id, payload.role)
    return SuccessResponse(message=f"Role set to {payload.role}")


# Pin periods

@router.get("/pin-periods", response_model=DataResponse[List[PinPeriodResponse]])
async def list_pin_periods(
    active: int = Query(0),
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    return {"data": await pin_period_service.list_pin_periods(db, active_only=bool(active))}


@router.post("/pin-periods", response_model=DataResponse[PinPeriodResponse])
async def create_pin_period(
    payload: PinPeriodCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    period = await pin_period_service.create_pin_period(
        db, payload.start_date, payload.end_date, month=payload.month, year=payload.year
    )
    return {"data": period}


@router.patch("/pin-periods", response_model=DataResponse[PinPeriodResponse])
async def update_pin_period(
    payload: PinPeriodUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    updates = payload.model_dump(exclude_unset=True)
    period_id = updates.pop("id")
    return {"data": await pin_period_service.update_pin_period(db, period_id, updates)}


@router.delete("/pin-periods", response_model=SuccessResponse)
async def delete_pin_period(
    id: str = Query(...),
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    await pin_period_service.delete_pin_period(db, id)
    return SuccessResponse(message="Pin period deleted")


@router.post("/reset-pin-period", response_model=ResetPinPeriodResponse)
async def reset_pin_period(
    payload: ResetPinPeriodRequest,
    db: AsyncSession = Depends(get_db),
    current_admin: Profile = Depends(get_current_admin),
):
    return ResetPinPeriodResponse(**await pin_period_service.reset_pin_period(db, payload.id))
