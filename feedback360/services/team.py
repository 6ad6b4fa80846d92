"""Team views: member performance, assignment progress, profiles and comments."""
from collections import defaultdict
from typing import Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.core.errors import ForbiddenError, NotFoundError
from feedback360.models.assessment import AssessmentAssignment, FeedbackResponse
from feedback360.models.profile import Profile, ROLE_ADMIN, ROLE_SUPERVISOR
from feedback360.services.periods import get_active_period, period_label
from feedback360.services.results import load_feedback_rows
from feedback360.services.roles import get_role_user_ids
from feedback360.services.scoring import aggregate_feedback, average


async def get_visible_profile(db: AsyncSession, viewer: Profile, role: str, user_id: str) -> Profile:
    """The profile of ``user_id`` if ``viewer`` may look at it."""
    profile = await db.get(Profile, user_id)
    if profile is None:
        raise NotFoundError("User not found")
    if profile.id == viewer.id or role in (ROLE_ADMIN, ROLE_SUPERVISOR) or profile.allow_public_view:
        return profile
    raise ForbiddenError("Profile is not public")


async def get_team_performance(db: AsyncSession, period_id: Optional[str] = None) -> List[dict]:
    roles = await get_role_user_ids(db)
    stmt = (
        select(
            AssessmentAssignment.assessee_id,
            AssessmentAssignment.assessor_id,
            FeedbackResponse.aspect,
            FeedbackResponse.rating,
        )
        .join(AssessmentAssignment, FeedbackResponse.assignment_id == AssessmentAssignment.id)
    )
    if period_id:
        stmt = stmt.where(AssessmentAssignment.period_id == period_id)

    ratings: Dict[str, List[int]] = defaultdict(list)
    assessors: Dict[str, set] = defaultdict(set)
    by_aspect: Dict[str, Dict[str, List[int]]] = defaultdict(lambda: defaultdict(list))
    for assessee_id, assessor_id, aspect, rating in (await db.execute(stmt)).all():
        if assessee_id in roles.admin_ids:
            continue
        ratings[assessee_id].append(rating)
        assessors[assessee_id].add(assessor_id)
        by_aspect[assessee_id][aspect].append(rating)

    if not ratings:
        return []
    profiles = (await db.execute(select(Profile).where(Profile.id.in_(sorted(ratings))))).scalars().all()
    team = [
        {
            "employee": profile,
            "total_feedback": len(assessors[profile.id]),
            "average_rating": average(ratings[profile.id]),
            "aspect_averages": {aspect: average(values) for aspect, values in by_aspect[profile.id].items()},
        }
        for profile in profiles
    ]
    team.sort(key=lambda item: (-item["average_rating"], item["employee"].full_name))
    return team


async def get_assignment_stats(db: AsyncSession, period_id: Optional[str] = None) -> dict:
    """Completion counts of assignments between non-admin users."""
    roles = await get_role_user_ids(db)
    stmt = select(AssessmentAssignment.is_completed, func.count(AssessmentAssignment.id))
    if period_id:
        stmt = stmt.where(AssessmentAssignment.period_id == period_id)
    if roles.admin_ids:
        admins = sorted(roles.admin_ids)
        stmt = stmt.where(
            AssessmentAssignment.assessor_id.notin_(admins),
            AssessmentAssignment.assessee_id.notin_(admins),
        )
    counts = dict((await db.execute(stmt.group_by(AssessmentAssignment.is_completed))).all())

    completed = counts.get(True, 0)
    total = completed + counts.get(False, 0)
    return {
        "total": total,
        "completed": completed,
        "pending": total - completed,
        "completion_rate": round(completed / total * 100) if total else 0,
    }


async def get_user_performance(db: AsyncSession, user_id: str) -> Optional[dict]:
    """Active-period performance of one user, or None without an active period."""
    period = await get_active_period(db)
    if period is None:
        return None

    roles = await get_role_user_ids(db)
    rows = await load_feedback_rows(db, assessee_id=user_id, period_id=period.id)
    summary = aggregate_feedback(rows, roles.supervisor_ids) if rows else None
    score = summary.final_score if summary else None

    done = (
        await db.execute(
            select(AssessmentAssignment.is_completed).where(
                AssessmentAssignment.assessor_id == user_id,
                AssessmentAssignment.period_id == period.id,
            )
        )
    ).scalars().all()
    completed = sum(1 for is_completed in done if is_completed)

    employees = select(func.count(Profile.id))
    if roles.admin_ids:
        employees = employees.where(Profile.id.notin_(sorted(roles.admin_ids)))

    return {
        "period_id": period.id,
        "average_rating": score,
        "total_feedback": summary.total_feedback if summary else 0,
        "total_employees": (await db.execute(employees)).scalar_one(),
        "max_assignments": len(done),
        "completed_assessments": completed,
        "pending_assessments": len(done) - completed,
        "period_progress": round(completed / len(done) * 100) if done else 0,
        "recent_scores": [{"period": period_label(period), "score": score}],
    }


async def get_user_comments(db: AsyncSession, user_id: str) -> List[dict]:
    """Comments left on ``user_id`` in the active period, newest first."""
    period = await get_active_period(db)
    if period is None:
        return []
    result = await db.execute(
        select(FeedbackResponse, Profile)
        .join(AssessmentAssignment, FeedbackResponse.assignment_id == AssessmentAssignment.id)
        .join(Profile, Profile.id == AssessmentAssignment.assessor_id, isouter=True)
        .where(
            AssessmentAssignment.assessee_id == user_id,
            AssessmentAssignment.period_id == period.id,
            FeedbackResponse.comment.isnot(None),
            FeedbackResponse.comment != "",
        )
        .order_by(FeedbackResponse.created_at.desc(), FeedbackResponse.id)
    )
    return [
        {
            "id": response.id,
            "aspect": response.aspect,
            "indicator": response.indicator,
            "rating": response.rating,
            "comment": response.comment,
            "created_at": response.created_at,
            "author": {
                "id": author.id,
                "full_name": author.full_name,
                "avatar_url": author.avatar_url,
            } if author else None,
        }
        for response, author in result.all()
    ]
