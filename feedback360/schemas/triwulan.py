from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import date


class QuarterResponse(BaseModel):
    id: str  # "2025-Q3"
    year: int
    quarter: int
    start_date: date
    end_date: date
    is_active: bool

    model_config = {"from_attributes": True}


class QuarterCreate(BaseModel):
    year: int = Field(..., ge=2000, le=2100)
    quarter: int = Field(..., ge=1, le=4)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class QuarterUpdate(BaseModel):
    id: str
    year: Optional[int] = Field(None, ge=2000, le=2100)
    quarter: Optional[int] = Field(None, ge=1, le=4)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class DeficiencyItem(BaseModel):
    user_id: str
    year: Optional[int] = None
    month: int = Field(..., ge=1, le=12)
    deficiency_hours: float = Field(0, ge=0)


class DeficiencyUpsert(BaseModel):
    period_id: str
    rows: List[DeficiencyItem]


class DeficiencyResponse(BaseModel):
    period_id: str
    user_id: str
    year: int
    month: int
    deficiency_hours: float
    filled_by: Optional[str] = None

    model_config = {"from_attributes": True}


class CandidateResponse(BaseModel):
    user_id: str
    full_name: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    avatar_url: Optional[str] = None
    source: str


class CandidateRequest(BaseModel):
    period_id: str
    user_id: str


class VoteRequest(BaseModel):
    period_id: str
    candidate_ids: List[str]


class PeriodRequest(BaseModel):
    period_id: str


class CompletionStatus(BaseModel):
    required_count: int
    completed_count: int
    completed_user_ids: List[str]


class TopCandidate(BaseModel):
    candidate_id: str
    votes: int


class RatingRequest(BaseModel):
    period_id: str
    candidate_id: str
    scores: List[int]  # 13 values, 1-5


class RatingResponse(BaseModel):
    candidate_id: str
    scores: List[Optional[int]]


class UserRatings(BaseModel):
    ratings: Dict[str, List[Optional[int]]]


class CandidateScore(BaseModel):
    candidate_id: str
    full_name: Optional[str] = None
    total_score: float
    num_raters: int
    avg_score: float
    score_percent: float


class Criterion(BaseModel):
    key: str
    label: str


class WinnerRequest(BaseModel):
    period_id: str
    winner_id: str
    total_score: Optional[float] = None


class WinnerResponse(BaseModel):
    period_id: str
    winner_id: str
    total_score: Optional[float] = None

    model_config = {"from_attributes": True}


class MyVotes(BaseModel):
    votes: List[str]
    completed: bool
