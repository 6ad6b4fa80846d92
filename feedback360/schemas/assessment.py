from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime

from feedback360.schemas.user import ProfileResponse


class AspectResponse(BaseModel):
    id: str
    name: str
    description: str
    indicators: List[str]


class PeriodResponse(BaseModel):
    id: str
    month: int
    year: int
    start_date: date
    end_date: date
    is_active: bool
    is_completed: bool

    model_config = {"from_attributes": True}


class PeriodWithCounts(BaseModel):
    period: PeriodResponse
    assigned_count: int
    completed_count: int


class PeriodCreate(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    start_date: date
    end_date: date


class AssignmentResponse(BaseModel):
    id: str
    assessee: ProfileResponse
    period_id: Optional[str] = None
    is_completed: bool
    completed_at: Optional[datetime] = None


class FeedbackItem(BaseModel):
    aspect: str
    indicator: str
    rating: int  # 1-100, checked by the service
    comment: Optional[str] = None


class SavedResponse(BaseModel):
    id: str
    assignment_id: str
    aspect: str
    indicator: str
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SubmitAssessmentRequest(BaseModel):
    assignment_id: Optional[str] = None
    assessee_id: Optional[str] = None  # supervisors submit by assessee
    responses: List[FeedbackItem]


class SubmitAssessmentResponse(BaseModel):
    success: bool = True
    assignment_id: str


class GenerateAssignmentsRequest(BaseModel):
    period_id: Optional[str] = None


class GenerateAssignmentsResponse(BaseModel):
    success: bool = True
    created: int
    total_for_period: int


class AspectComment(BaseModel):
    comment: str
    assessor: Optional[str] = None
    rating: int

    model_config = {"from_attributes": True}


class AspectScoreResponse(BaseModel):
    aspect: str
    supervisor_average: Optional[float] = None
    peer_average: Optional[float] = None
    final_score: Optional[float] = None
    total_feedback: int
    has_supervisor_assessment: bool
    has_peer_assessment: bool
    supervisor_comments: List[AspectComment] = []
    peer_comments: List[AspectComment] = []

    model_config = {"from_attributes": True}


class WeightedResultResponse(BaseModel):
    aspect_results: List[AspectScoreResponse]
    supervisor_average: Optional[float] = None
    peer_average: Optional[float] = None
    final_score: Optional[float] = None
    overall_score: Optional[float] = None
    total_feedback: int
    supervisor_feedback_count: int
    peer_feedback_count: int
    has_supervisor_assessment: bool
    has_peer_assessment: bool

    model_config = {"from_attributes": True}


class TeamResult(BaseModel):
    user: ProfileResponse
    summary: Optional[WeightedResultResponse] = None


class IndicatorResult(BaseModel):
    indicator: str
    rating: Optional[float] = None
    responses: int
    comments: List[str]


class DetailedAspectResult(BaseModel):
    aspect: str
    aspect_id: str
    rating: Optional[float] = None
    indicators: List[IndicatorResult]
    total_responses: int


class RatingBucket(BaseModel):
    range: str
    count: int


class DetailedComment(BaseModel):
    comment: str
    aspect: str
    rating: int


class DetailedResultsResponse(BaseModel):
    aspect_results: List[DetailedAspectResult]
    overall_rating: Optional[float] = None
    total_feedback: int
    rating_distribution: List[RatingBucket]
    comments: List[DetailedComment]
