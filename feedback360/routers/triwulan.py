from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.core.auth import get_admin_or_supervisor, get_current_user
from feedback360.database import get_db
from feedback360.models.profile import Profile
from feedback360.schemas.common import DataResponse, SuccessResponse
from feedback360.schemas.triwulan import (
    CandidateRequest,
    CandidateResponse,
    CandidateScore,
    CompletionStatus,
    Criterion,
    MyVotes,
    PeriodRequest,
    RatingRequest,
    RatingResponse,
    TopCandidate,
    UserRatings,
    VoteRequest,
    WinnerRequest,
    WinnerResponse,
)
from feedback360.services import triwulan as triwulan_service

router = APIRouter(prefix="/triwulan", tags=["triwulan"])


@router.get("/criteria", response_model=DataResponse[List[Criterion]])
async def criteria(current_user: Profile = Depends(get_current_user)):
    return {"data": triwulan_service.criteria()}


# Candidates

@router.get("/candidates", response_model=DataResponse[List[CandidateResponse]])
async def list_candidates(
    period_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await triwulan_service.list_candidates(db, period_id)}


@router.post("/candidates", response_model=SuccessResponse)
async def add_candidate(
    payload: CandidateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    await triwulan_service.add_candidate(db, payload.period_id, payload.user_id)
    return SuccessResponse()


@router.delete("/candidates", response_model=SuccessResponse)
async def remove_candidate(
    period_id: str,
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    await triwulan_service.remove_candidate(db, period_id, user_id)
    return SuccessResponse()


@router.post("/candidates/sync", response_model=DataResponse[List[str]])
async def sync_candidates(
    payload: PeriodRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    return {"data": await triwulan_service.sync_candidates_from_deficiencies(db, payload.period_id)}


# Votes

@router.get("/votes", response_model=DataResponse[MyVotes])
async def my_votes(
    period_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": {
        "votes": await triwulan_service.get_user_votes(db, period_id, current_user.id),
        "completed": await triwulan_service.has_completed_vote(db, period_id, current_user.id),
    }}


@router.post("/votes", response_model=DataResponse[List[str]])
async def submit_votes(
    payload: VoteRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    votes = await triwulan_service.submit_votes(db, payload.period_id, current_user.id, payload.candidate_ids)
    return {"data": votes}


@router.post("/votes/complete", response_model=SuccessResponse)
async def complete_votes(
    payload: PeriodRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    await triwulan_service.mark_vote_completed(db, payload.period_id, current_user.id)
    return SuccessResponse()


@router.get("/votes/status", response_model=DataResponse[CompletionStatus])
async def voting_status(
    period_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await triwulan_service.get_voting_status(db, period_id)}


@router.get("/votes/top", response_model=DataResponse[List[TopCandidate]])
async def top_candidates(
    period_id: str,
    limit: int = Query(5, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await triwulan_service.get_top_candidates(db, period_id, limit)}


# Ratings

@router.get("/ratings", response_model=DataResponse[UserRatings])
async def my_ratings(
    period_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": {"ratings": await triwulan_service.get_user_ratings(db, period_id, current_user.id)}}


@router.post("/ratings", response_model=DataResponse[RatingResponse])
async def submit_rating(
    payload: RatingRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    rating = await triwulan_service.submit_rating(
        db, payload.period_id, current_user.id, payload.candidate_id, payload.scores
    )
    return {"data": {"candidate_id": rating.candidate_id, "scores": rating.scores}}


@router.get("/ratings/status", response_model=DataResponse[CompletionStatus])
async def rating_status(
    period_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await triwulan_service.get_rating_status(db, period_id)}


@router.get("/ratings/scores", response_model=DataResponse[List[CandidateScore]])
async def rating_scores(
    period_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await triwulan_service.get_scores(db, period_id)}


# Winner

@router.get("/winner", response_model=DataResponse[Optional[WinnerResponse]])
async def get_winner(
    period_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await triwulan_service.get_winner(db, period_id)}


@router.post("/winner", response_model=DataResponse[WinnerResponse])
async def set_winner(
    payload: WinnerRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_admin_or_supervisor),
):
    winner = await triwulan_service.set_winner(db, payload.period_id, payload.winner_id, payload.total_score)
    return {"data": winner}
