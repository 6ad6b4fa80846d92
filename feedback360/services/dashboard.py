# feedback360/services/dashboard.py
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.config import settings
from feedback360.models.assessment import AssessmentAssignment, FeedbackResponse
from feedback360.models.profile import Profile
from feedback360.services.assessment import list_my_assignments
from feedback360.services.periods import get_active_period, period_label
from feedback360.services.roles import get_role_user_ids


NO_ACTIVE_PERIOD = "Tidak ada periode aktif"


async def _average_received(db: AsyncSession, user_id: str, period_id: str) -> Optional[float]:
    mean = (
        await db.execute(
            select(func.avg(FeedbackResponse.rating))
            .join(AssessmentAssignment, FeedbackResponse.assignment_id == AssessmentAssignment.id)
            .where(AssessmentAssignment.assessee_id == user_id, AssessmentAssignment.period_id == period_id)
        )
    ).scalar_one()
    return round(float(mean), 1) if mean is not None else None


async def get_dashboard_stats(db: AsyncSession, user: Profile) -> dict:
    """Progress of ``user`` in the active period plus the team size.

    Supervisors assess every non-admin colleague, everybody else a fixed
    number of assignments.
    """
    roles = await get_role_user_ids(db)
    is_supervisor = user.id in roles.supervisor_ids

    employees = select(func.count(Profile.id)).where(Profile.id != user.id)
    if roles.admin_ids:
        employees = employees.where(Profile.id.notin_(sorted(roles.admin_ids)))
    total_employees = (await db.execute(employees)).scalar_one()
    max_assignments = total_employees if is_supervisor else settings.ASSIGNMENTS_PER_ASSESSOR

    period = await get_active_period(db)
    if period is None:
        return {
            "total_employees": total_employees,
            "completed_assessments": 0,
            "pending_assessments": max_assignments,
            "current_period": NO_ACTIVE_PERIOD,
            "my_progress": 0,
            "average_rating": None,
            "my_assignments": [],
            "current_period_data": None,
            "is_supervisor": is_supervisor,
            "max_assignments": max_assignments,
        }

    assignments = [a for a in await list_my_assignments(db, user) if a["assessee"].id not in roles.admin_ids]
    completed = sum(1 for a in assignments if a["is_completed"])
    return {
        "total_employees": total_employees,
        "completed_assessments": completed,
        "pending_assessments": max(0, max_assignments - completed),
        "current_period": period_label(period),
        "my_progress": round(completed / max_assignments * 100) if max_assignments else 0,
        "average_rating": await _average_received(db, user.id, period.id),
        "my_assignments": assignments,
        "current_period_data": period,
        "is_supervisor": is_supervisor,
        "max_assignments": max_assignments,
    }
