from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.core.auth import get_current_user
from feedback360.data.aspects import ASSESSMENT_ASPECTS
from feedback360.database import get_db
from feedback360.models.profile import Profile
from feedback360.schemas.assessment import (
    AspectResponse,
    AssignmentResponse,
    PeriodResponse,
    SavedResponse,
    SubmitAssessmentRequest,
    SubmitAssessmentResponse,
)
from feedback360.schemas.common import DataResponse
from feedback360.services import assessment as assessment_service
from feedback360.services.periods import get_active_period

router = APIRouter(prefix="/assessment", tags=["assessment"])


@router.get("/aspects", response_model=DataResponse[List[AspectResponse]])
async def list_aspects(current_user: Profile = Depends(get_current_user)):
    return {"data": ASSESSMENT_ASPECTS}


@router.get("/current-period", response_model=DataResponse[Optional[PeriodResponse]])
async def current_period(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await get_active_period(db)}


@router.get("/my-assignments", response_model=DataResponse[List[AssignmentResponse]])
async def my_assignments(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await assessment_service.list_my_assignments(db, current_user)}


@router.post("/submit", response_model=SubmitAssessmentResponse)
async def submit(
    payload: SubmitAssessmentRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    assignment = await assessment_service.submit_assessment(
        db,
        current_user,
        [item.model_dump() for item in payload.responses],
        assignment_id=payload.assignment_id,
        assessee_id=payload.assessee_id,
    )
    return SubmitAssessmentResponse(assignment_id=assignment.id)


@router.get("/responses", response_model=DataResponse[List[SavedResponse]])
async def saved_responses(
    assignment_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await assessment_service.get_assignment_responses(db, current_user, assignment_id)}
