# feedback360/schemas/team.py
from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import datetime

from feedback360.schemas.user import ProfileResponse


class MemberPerformance(BaseModel):
    employee: ProfileResponse
    total_feedback: int
    average_rating: float
    aspect_averages: Dict[str, Optional[float]]


class AssignmentStats(BaseModel):
    total: int
    completed: int
    pending: int
    completion_rate: int


class RecentScore(BaseModel):
    period: str
    score: Optional[float] = None


class UserPerformance(BaseModel):
    period_id: str
    average_rating: Optional[float] = None
    total_feedback: int
    total_employees: int
    max_assignments: int
    completed_assessments: int
    pending_assessments: int
    period_progress: int
    recent_scores: List[RecentScore]


class CommentAuthor(BaseModel):
    id: str
    full_name: str
    avatar_url: Optional[str] = None


class UserComment(BaseModel):
    id: str
    aspect: str
    indicator: str
    rating: int
    comment: str
    created_at: Optional[datetime] = None
    author: Optional[CommentAuthor] = None
