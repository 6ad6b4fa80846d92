import logging
from typing import List, Optional

from sqlalchemy import select, delete, update, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.config import settings
from feedback360.core.errors import BadRequestError, ForbiddenError, NotFoundError, UnauthorizedError
from feedback360.models.assessment import (
    AssessmentAssignment,
    AssessmentHistory,
    AssessmentPeriod,
    FeedbackResponse,
    ReminderLog,
)
from feedback360.models.notification import Notification
from feedback360.models.pin import EmployeePin, WeeklyPinAllowance
from feedback360.models.profile import Profile, UserRole, ROLES, ROLE_ADMIN, ROLE_SUPERVISOR, ROLE_USER
from feedback360.models.triwulan import (
    TriwulanCandidate,
    TriwulanMonthlyDeficiency,
    TriwulanRating,
    TriwulanVote,
    TriwulanVoteCompletion,
    TriwulanWinner,
)
from feedback360.services.periods import get_active_period
from feedback360.services.roles import get_role_user_ids
from feedback360.utils.password import hash_password, verify_password

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("full_name", "username", "position", "department", "avatar_url", "allow_public_view")


async def authenticate(db: AsyncSession, email: str, password: str) -> Profile:
    result = await db.execute(select(Profile).where(func.lower(Profile.email) == email.strip().lower()))
    user = result.scalar_one_or_none()
    if not user or not verify_password(password, user.hashed_password):
        raise UnauthorizedError("Invalid credentials")
    return user


async def change_password(db: AsyncSession, user: Profile, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.hashed_password):
        raise BadRequestError("Current password is incorrect")
    user.hashed_password = hash_password(new_password)
    await db.commit()


async def list_team_members(db: AsyncSession) -> List[Profile]:
    roles = await get_role_user_ids(db)
    stmt = select(Profile).order_by(Profile.full_name)
    if roles.admin_ids:
        stmt = stmt.where(Profile.id.notin_(sorted(roles.admin_ids)))
    return list((await db.execute(stmt)).scalars().all())


async def list_users(db: AsyncSession) -> List[dict]:
    roles = await get_role_user_ids(db)
    profiles = (await db.execute(select(Profile).order_by(Profile.full_name))).scalars().all()
    return [
        {
            "profile": profile,
            "role": ROLE_ADMIN if profile.id in roles.admin_ids
            else ROLE_SUPERVISOR if profile.id in roles.supervisor_ids
            else ROLE_USER,
        }
        for profile in profiles
    ]


async def create_user(
    db: AsyncSession,
    email: str,
    full_name: str,
    password: str,
    role: str = ROLE_USER,
    **fields,
) -> Profile:
    if role not in ROLES:
        raise BadRequestError(f"Invalid role: {role}")
    email = email.strip().lower()
    existing = await db.execute(select(Profile.id).where(func.lower(Profile.email) == email))
    if existing.first() is not None:
        raise BadRequestError("Email already registered")

    profile = Profile(
        email=email,
        full_name=full_name,
        hashed_password=hash_password(password),
        **{k: v for k, v in fields.items() if k in PROFILE_FIELDS and v is not None},
    )
    db.add(profile)
    await db.flush()
    db.add(UserRole(user_id=profile.id, role=role))
    await db.commit()
    await db.refresh(profile)
    logger.info("Created user %s with role %s", profile.id, role)
    return profile


def _apply_fields(profile: Profile, updates: dict) -> None:
    for key, value in updates.items():
        if key in PROFILE_FIELDS and value is not None:
            setattr(profile, key, value)


async def update_user(db: AsyncSession, user_id: str, updates: dict) -> Profile:
    profile = await db.get(Profile, user_id)
    if not profile:
        raise NotFoundError("User not found")

    email = updates.get("email")
    if email and email.strip().lower() != profile.email:
        email = email.strip().lower()
        taken = await db.execute(select(Profile.id).where(func.lower(Profile.email) == email, Profile.id != user_id))
        if taken.first() is not None:
            raise BadRequestError("Email already registered")
        profile.email = email
    if updates.get("password"):
        profile.hashed_password = hash_password(updates["password"])
    _apply_fields(profile, updates)

    await db.commit()
    await db.refresh(profile)
    return profile


async def update_own_profile(db: AsyncSession, user: Profile, updates: dict) -> Profile:
    _apply_fields(user, updates)
    await db.commit()
    await db.refresh(user)
    return user


async def delete_user(db: AsyncSession, user_id: str, acting_user_id: Optional[str] = None) -> None:
    """Delete a profile together with everything that references it."""
    profile = await db.get(Profile, user_id)
    if not profile:
        raise NotFoundError("User not found")
    if user_id == acting_user_id:
        raise BadRequestError("Cannot delete your own account")
    roles = await get_role_user_ids(db)
    if user_id in roles.admin_ids:
        raise ForbiddenError("Cannot delete admin users")

    assignment_ids = select(AssessmentAssignment.id).where(
        or_(AssessmentAssignment.assessor_id == user_id, AssessmentAssignment.assessee_id == user_id)
    )
    try:
        await db.execute(delete(FeedbackResponse).where(FeedbackResponse.assignment_id.in_(assignment_ids)))
        await db.execute(delete(ReminderLog).where(
            or_(ReminderLog.user_id == user_id, ReminderLog.assignment_id.in_(assignment_ids))
        ))
        await db.execute(delete(AssessmentAssignment).where(
            or_(AssessmentAssignment.assessor_id == user_id, AssessmentAssignment.assessee_id == user_id)
        ))
        await db.execute(delete(AssessmentHistory).where(AssessmentHistory.user_id == user_id))
        await db.execute(delete(Notification).where(Notification.user_id == user_id))
        await db.execute(delete(EmployeePin).where(
            or_(EmployeePin.giver_id == user_id, EmployeePin.receiver_id == user_id)
        ))
        await db.execute(delete(WeeklyPinAllowance).where(WeeklyPinAllowance.user_id == user_id))
        await db.execute(delete(TriwulanVote).where(
            or_(TriwulanVote.voter_id == user_id, TriwulanVote.candidate_id == user_id)
        ))
        await db.execute(delete(TriwulanVoteCompletion).where(TriwulanVoteCompletion.voter_id == user_id))
        await db.execute(delete(TriwulanRating).where(
            or_(TriwulanRating.rater_id == user_id, TriwulanRating.candidate_id == user_id)
        ))
        await db.execute(delete(TriwulanWinner).where(TriwulanWinner.winner_id == user_id))
        await db.execute(delete(TriwulanCandidate).where(TriwulanCandidate.user_id == user_id))
        await db.execute(delete(TriwulanMonthlyDeficiency).where(TriwulanMonthlyDeficiency.user_id == user_id))
        await db.execute(
            update(TriwulanMonthlyDeficiency)
            .where(TriwulanMonthlyDeficiency.filled_by == user_id)
            .values(filled_by=None)
        )
        await db.execute(delete(UserRole).where(UserRole.user_id == user_id))
        await db.delete(profile)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info("Deleted user %s", user_id)


async def get_admin_stats(db: AsyncSession) -> dict:
    """Completion of the active period counted per eligible peer assessor."""
    roles = await get_role_user_ids(db)
    period = await get_active_period(db)

    profile_ids = (await db.execute(select(Profile.id))).scalars().all()
    eligible = [pid for pid in profile_ids if pid not in roles.restricted_ids]

    completed_by_assessor = {}
    if period is not None:
        result = await db.execute(
            select(AssessmentAssignment.assessor_id, AssessmentAssignment.assessee_id).where(
                AssessmentAssignment.period_id == period.id,
                AssessmentAssignment.is_completed.is_(True),
            )
        )
        for assessor_id, assessee_id in result.all():
            if assessor_id in roles.restricted_ids or assessee_id in roles.admin_ids:
                continue
            completed_by_assessor[assessor_id] = completed_by_assessor.get(assessor_id, 0) + 1

    done = sum(1 for pid in eligible if completed_by_assessor.get(pid, 0) >= settings.ASSIGNMENTS_PER_ASSESSOR)
    total_periods = (await db.execute(select(func.count(AssessmentPeriod.id)))).scalar_one()
    return {
        "total_users": len([pid for pid in profile_ids if pid not in roles.admin_ids]),
        "total_periods": total_periods,
        "total_assignments": len(eligible),
        "completed_assignments": done,
        "pending_assignments": max(0, len(eligible) - done),
        "completion_rate": round(done / len(eligible) * 100) if eligible else 0,
        "active_period_id": period.id if period else None,
    }
