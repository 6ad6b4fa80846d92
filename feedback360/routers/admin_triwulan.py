from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.core.auth import get_admin_or_supervisor
from feedback360.database import get_db
from feedback360.models.profile import Profile
from feedback360.schemas.common import DataResponse, SuccessResponse
from feedback360.schemas.triwulan import (
    DeficiencyResponse,
    DeficiencyUpsert,
    QuarterCreate,
    QuarterResponse,
    QuarterUpdate,
)
from feedback360.services import periods as period_service
from feedback360.services import triwulan as triwulan_service
from feedback360.services.periods import QuarterKey

router = APIRouter(prefix="/admin/triwulan", tags=["triwulan-admin"])


# Public: the landing page shows the running triwulan without a login.
@router.get("", response_model=DataResponse[List[QuarterResponse]])
async def list_quarters(
    active: int = Query(0),
    db: AsyncSession = Depends(get_db),
):
    return {"data": await period_service.list_quarters(db, active_only=bool(active))}


@router.post("", response_model=DataResponse[QuarterResponse])
async def create_quarter(
    payload: QuarterCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    quarter = await period_service.create_quarter(
        db, payload.year, payload.quarter, payload.start_date, payload.end_date
    )
    return {"data": quarter}


@router.patch("", response_model=DataResponse[QuarterResponse])
async def update_quarter(
    payload: QuarterUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    quarter = await period_service.update_quarter(
        db,
        QuarterKey.parse(payload.id),
        year=payload.year,
        quarter=payload.quarter,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    return {"data": quarter}


@router.delete("", response_model=SuccessResponse)
async def delete_quarter(
    id: str = Query(..., description="Triwulan id, e.g. 2025-Q3"),
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    key = QuarterKey.parse(id)
    deleted = await period_service.delete_quarter(db, key)
    return SuccessResponse(message=f"Deleted {deleted} monthly periods of {key}")


@router.get("/deficiencies", response_model=DataResponse[List[DeficiencyResponse]])
async def list_deficiencies(
    period_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    return {"data": await triwulan_service.list_deficiencies(db, period_id)}


@router.post("/deficiencies", response_model=SuccessResponse)
async def save_deficiencies(
    payload: DeficiencyUpsert,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    saved = await triwulan_service.upsert_deficiencies(
        db, payload.period_id, [row.model_dump() for row in payload.rows], filled_by=current_user.id
    )
    return SuccessResponse(message=f"Saved {saved} rows")
