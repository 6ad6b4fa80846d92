import logging
import random
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.config import settings
from feedback360.core.errors import BadRequestError, ForbiddenError, NotFoundError
from feedback360.data.aspects import ASPECT_IDS
from feedback360.models.assessment import AssessmentAssignment, FeedbackResponse
from feedback360.models.profile import Profile
from feedback360.services.periods import get_active_period, require_period
from feedback360.services.roles import get_role_user_ids

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 100
SUPERVISOR_ASSIGNMENT_PREFIX = "supervisor-"


async def list_my_assignments(db: AsyncSession, user: Profile) -> List[dict]:
    period = await get_active_period(db)
    roles = await get_role_user_ids(db)

    if user.id in roles.supervisor_ids and user.id not in roles.admin_ids:
        return await _supervisor_assignments(db, user, period, roles.admin_ids)

    if period is None:
        return []
    stmt = (
        select(AssessmentAssignment, Profile)
        .join(Profile, Profile.id == AssessmentAssignment.assessee_id)
        .where(AssessmentAssignment.assessor_id == user.id, AssessmentAssignment.period_id == period.id)
        .order_by(Profile.full_name)
    )
    return [
        {
            "id": assignment.id,
            "assessee": assessee,
            "period_id": assignment.period_id,
            "is_completed": assignment.is_completed,
            "completed_at": assignment.completed_at,
        }
        for assignment, assessee in (await db.execute(stmt)).all()
    ]


async def _supervisor_assignments(db: AsyncSession, user: Profile, period, admin_ids) -> List[dict]:
    # Supervisors may assess every non-admin colleague; assignments are created on submit.
    completed = {}
    if period is not None:
        result = await db.execute(
            select(AssessmentAssignment).where(
                AssessmentAssignment.assessor_id == user.id, AssessmentAssignment.period_id == period.id
            )
        )
        completed = {a.assessee_id: a for a in result.scalars().all()}

    assessees = await get_assessable_users(db, user.id, admin_ids)
    entries = []
    for assessee in assessees:
        existing = completed.get(assessee.id)
        entries.append({
            "id": f"{SUPERVISOR_ASSIGNMENT_PREFIX}{assessee.id}",
            "assessee": assessee,
            "period_id": period.id if period else None,
            "is_completed": bool(existing and existing.is_completed),
            "completed_at": existing.completed_at if existing else None,
        })
    return entries


async def get_assessable_users(db: AsyncSession, supervisor_id: str, admin_ids=None) -> List[Profile]:
    if admin_ids is None:
        admin_ids = (await get_role_user_ids(db)).admin_ids
    excluded = set(admin_ids) | {supervisor_id}
    result = await db.execute(
        select(Profile).where(Profile.id.notin_(sorted(excluded))).order_by(Profile.full_name)
    )
    return list(result.scalars().all())


async def get_assessed_user_ids(db: AsyncSession, assessor_id: str, period_id: Optional[str] = None) -> List[str]:
    period = await get_active_period(db) if not period_id else await require_period(db, period_id)
    if period is None:
        return []
    result = await db.execute(
        select(AssessmentAssignment.assessee_id).where(
            AssessmentAssignment.assessor_id == assessor_id,
            AssessmentAssignment.period_id == period.id,
            AssessmentAssignment.is_completed.is_(True),
        )
    )
    return list(result.scalars().all())


def validate_responses(responses: List[dict]) -> List[dict]:
    cleaned = []
    for response in responses:
        aspect = response.get("aspect")
        indicator = (response.get("indicator") or "").strip()
        rating = response.get("rating")
        if aspect not in ASPECT_IDS:
            raise BadRequestError(f"Unknown aspect: {aspect}")
        if not indicator:
            raise BadRequestError("indicator required")
        if not isinstance(rating, int) or isinstance(rating, bool) or not MIN_RATING <= rating <= MAX_RATING:
            raise BadRequestError(f"rating must be between {MIN_RATING} and {MAX_RATING}")
        cleaned.append({
            "aspect": aspect,
            "indicator": indicator,
            "rating": rating,
            "comment": response.get("comment") or None,
        })
    return cleaned


async def _supervisor_assignment(db: AsyncSession, assessor_id: str, assessee_id: Optional[str]) -> AssessmentAssignment:
    period = await get_active_period(db)
    if period is None:
        raise BadRequestError("No active period found")
    if not assessee_id:
        raise BadRequestError("assessee_id required")
    if assessee_id == assessor_id:
        raise BadRequestError("Cannot assess yourself")
    if not await db.get(Profile, assessee_id):
        raise NotFoundError("Assessee not found")

    result = await db.execute(
        select(AssessmentAssignment).where(
            AssessmentAssignment.assessor_id == assessor_id,
            AssessmentAssignment.assessee_id == assessee_id,
            AssessmentAssignment.period_id == period.id,
        )
    )
    assignment = result.scalar_one_or_none()
    if assignment is None:
        assignment = AssessmentAssignment(
            assessor_id=assessor_id, assessee_id=assessee_id, period_id=period.id, is_completed=False
        )
        db.add(assignment)
        await db.flush()
    return assignment


async def submit_assessment(
    db: AsyncSession,
    assessor: Profile,
    responses: List[dict],
    assignment_id: Optional[str] = None,
    assessee_id: Optional[str] = None,
) -> AssessmentAssignment:
    """Replace the responses of an assignment and mark it completed.

    Supervisors submit by assessee; their assignment in the active period is
    created on first submit. Everyone else must own the assignment.
    """
    cleaned = validate_responses(responses)
    roles = await get_role_user_ids(db)
    is_supervisor = assessor.id in roles.supervisor_ids

    if is_supervisor and not assessee_id and assignment_id and assignment_id.startswith(SUPERVISOR_ASSIGNMENT_PREFIX):
        assessee_id = assignment_id[len(SUPERVISOR_ASSIGNMENT_PREFIX):]

    try:
        if is_supervisor:
            assignment = await _supervisor_assignment(db, assessor.id, assessee_id)
        else:
            assignment = await db.get(AssessmentAssignment, assignment_id) if assignment_id else None
            if assignment is None or assignment.assessor_id != assessor.id:
                raise ForbiddenError("Forbidden")

        await db.execute(delete(FeedbackResponse).where(FeedbackResponse.assignment_id == assignment.id))
        for response in cleaned:
            db.add(FeedbackResponse(assignment_id=assignment.id, **response))
        assignment.is_completed = True
        assignment.completed_at = datetime.now(timezone.utc)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Assessment submitted by %s for %s", assessor.id, assignment.assessee_id)
    return assignment


async def generate_assignments(db: AsyncSession, period_id: Optional[str] = None) -> dict:
    period = await require_period(db, period_id)
    roles = await get_role_user_ids(db)

    profile_ids = (await db.execute(select(Profile.id))).scalars().all()
    eligible = [pid for pid in profile_ids if pid not in roles.restricted_ids]
    if len(eligible) < 2:
        raise BadRequestError("Not enough eligible users to generate assignments")

    result = await db.execute(
        select(AssessmentAssignment.assessor_id, AssessmentAssignment.assessee_id).where(
            AssessmentAssignment.period_id == period.id
        )
    )
    existing_pairs = {(assessor_id, assessee_id) for assessor_id, assessee_id in result.all()}

    created = 0
    try:
        for assessor_id in eligible:
            pool = [pid for pid in eligible if pid != assessor_id]
            random.shuffle(pool)
            added = 0
            for assessee_id in pool:
                if added >= settings.ASSIGNMENTS_PER_ASSESSOR:
                    break
                if (assessor_id, assessee_id) in existing_pairs:
                    continue
                existing_pairs.add((assessor_id, assessee_id))
                db.add(AssessmentAssignment(
                    assessor_id=assessor_id, assessee_id=assessee_id, period_id=period.id, is_completed=False
                ))
                added += 1
            created += added
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    total = (
        await db.execute(
            select(func.count(AssessmentAssignment.id)).where(AssessmentAssignment.period_id == period.id)
        )
    ).scalar_one()
    logger.info("Generated %d assignments for period %s", created, period.id)
    return {"created": created, "total_for_period": total}


async def get_assignment_responses(db: AsyncSession, assessor: Profile, assignment_id: str) -> List[FeedbackResponse]:
    """Saved responses of one of the assessor's assignments, for re-editing."""
    if assignment_id.startswith(SUPERVISOR_ASSIGNMENT_PREFIX):
        period = await get_active_period(db)
        if period is None:
            return []
        result = await db.execute(
            select(AssessmentAssignment).where(
                AssessmentAssignment.assessor_id == assessor.id,
                AssessmentAssignment.assessee_id == assignment_id[len(SUPERVISOR_ASSIGNMENT_PREFIX):],
                AssessmentAssignment.period_id == period.id,
            )
        )
        assignment = result.scalar_one_or_none()
        if assignment is None:
            # nothing submitted yet
            return []
    else:
        assignment = await db.get(AssessmentAssignment, assignment_id)
        if assignment is None or assignment.assessor_id != assessor.id:
            raise ForbiddenError("Forbidden")

    result = await db.execute(
        select(FeedbackResponse)
        .where(FeedbackResponse.assignment_id == assignment.id)
        .order_by(FeedbackResponse.created_at, FeedbackResponse.aspect)
    )
    return list(result.scalars().all())
