# feedback360/schemas/dashboard.py
from pydantic import BaseModel
from typing import List, Optional

from feedback360.schemas.assessment import AssignmentResponse, PeriodResponse


class DashboardStats(BaseModel):
    total_employees: int
    completed_assessments: int
    pending_assessments: int
    current_period: str
    my_progress: int
    average_rating: Optional[float] = None
    my_assignments: List[AssignmentResponse]
    current_period_data: Optional[PeriodResponse] = None
    is_supervisor: bool
    max_assignments: int
