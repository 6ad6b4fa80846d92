# feedback360/services/results.py
import logging
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.data.aspects import ASSESSMENT_ASPECTS
from feedback360.models.assessment import AssessmentAssignment, AssessmentHistory, FeedbackResponse
from feedback360.models.profile import Profile
from feedback360.services.periods import require_period
from feedback360.services.roles import get_role_user_ids
from feedback360.services.scoring import (
    FeedbackRow,
    ScoreSummary,
    aggregate_feedback,
    aggregate_team,
    average,
)

logger = logging.getLogger(__name__)


async def load_feedback_rows(
    db: AsyncSession, assessee_id: Optional[str] = None, period_id: Optional[str] = None
) -> List[FeedbackRow]:
    stmt = (
        select(
            AssessmentAssignment.assessee_id,
            AssessmentAssignment.assessor_id,
            FeedbackResponse.aspect,
            FeedbackResponse.rating,
            FeedbackResponse.comment,
            Profile.full_name,
        )
        .join(AssessmentAssignment, FeedbackResponse.assignment_id == AssessmentAssignment.id)
        .join(Profile, Profile.id == AssessmentAssignment.assessor_id, isouter=True)
    )
    if assessee_id:
        stmt = stmt.where(AssessmentAssignment.assessee_id == assessee_id)
    if period_id:
        stmt = stmt.where(AssessmentAssignment.period_id == period_id)

    result = await db.execute(stmt)
    return [
        FeedbackRow(
            assessee_id=assessee,
            assessor_id=assessor,
            aspect=aspect,
            rating=rating,
            comment=comment,
            assessor_name=name,
        )
        for assessee, assessor, aspect, rating, comment, name in result.all()
    ]


async def get_weighted_results(
    db: AsyncSession, assessee_id: str, period_id: Optional[str] = None
) -> Optional[ScoreSummary]:
    """Weighted result for one assessee, or None when nobody has assessed them."""
    rows = await load_feedback_rows(db, assessee_id=assessee_id, period_id=period_id)
    if not rows:
        return None
    roles = await get_role_user_ids(db)
    return aggregate_feedback(rows, roles.supervisor_ids)


async def get_team_results(db: AsyncSession, period_id: Optional[str] = None) -> List[dict]:
    period = await require_period(db, period_id)
    roles = await get_role_user_ids(db)

    profiles = (
        await db.execute(select(Profile).order_by(Profile.full_name))
    ).scalars().all()
    rows = await load_feedback_rows(db, period_id=period.id)
    summaries = aggregate_team(rows, roles.supervisor_ids, roles.restricted_ids)

    team = [
        {"user": profile, "summary": summaries.get(profile.id)}
        for profile in profiles
        if profile.id not in roles.restricted_ids
    ]
    # unscored members sort last
    team.sort(key=lambda item: (
        item["summary"] is None or item["summary"].final_score is None,
        -(item["summary"].final_score or 0) if item["summary"] else 0,
    ))
    return team


def _rating_distribution(ratings: List[int]) -> List[dict]:
    buckets = []
    for upper in range(10, 101, 10):
        lower = upper - 9
        buckets.append({
            "range": f"{lower}-{upper}",
            "count": sum(1 for r in ratings if lower <= r <= upper),
        })
    return buckets


def _detailed_view(rows: List[tuple]) -> dict:
    aspect_results = []
    for aspect in ASSESSMENT_ASPECTS:
        aspect_rows = [r for r in rows if r[0] == aspect["id"]]
        indicators = []
        for indicator in aspect["indicators"]:
            indicator_rows = [r for r in aspect_rows if r[1] == indicator]
            indicators.append({
                "indicator": indicator,
                "rating": average([r[2] for r in indicator_rows]),
                "responses": len(indicator_rows),
                "comments": [r[3] for r in indicator_rows if r[3]],
            })
        aspect_results.append({
            "aspect": aspect["name"],
            "aspect_id": aspect["id"],
            "rating": average([r[2] for r in aspect_rows]),
            "indicators": indicators,
            "total_responses": len(aspect_rows),
        })

    scored = [a["rating"] for a in aspect_results if a["rating"] is not None]
    return {
        "aspect_results": aspect_results,
        "overall_rating": average(scored),
        "total_feedback": len(rows),
        "rating_distribution": _rating_distribution([r[2] for r in rows]),
        "comments": [{"comment": r[3], "aspect": r[0], "rating": r[2]} for r in rows if r[3]],
    }


async def get_detailed_results(db: AsyncSession, user_id: str, period_id: Optional[str] = None) -> dict:
    roles = await get_role_user_ids(db)
    if user_id in roles.admin_ids:
        return _detailed_view([])

    stmt = (
        select(FeedbackResponse.aspect, FeedbackResponse.indicator, FeedbackResponse.rating, FeedbackResponse.comment)
        .join(AssessmentAssignment, FeedbackResponse.assignment_id == AssessmentAssignment.id)
        .where(AssessmentAssignment.assessee_id == user_id)
    )
    if period_id:
        stmt = stmt.where(AssessmentAssignment.period_id == period_id)
    rows = [tuple(row) for row in (await db.execute(stmt)).all()]
    return _detailed_view(rows)


async def record_history(db: AsyncSession, period_id: str) -> int:
    """Snapshot every scored assessee of a period into assessment_history."""
    period = await require_period(db, period_id)
    roles = await get_role_user_ids(db)
    rows = await load_feedback_rows(db, period_id=period.id)
    summaries: Dict[str, ScoreSummary] = aggregate_team(rows, roles.supervisor_ids, roles.restricted_ids)

    existing = {
        h.user_id: h
        for h in (
            await db.execute(select(AssessmentHistory).where(AssessmentHistory.period_id == period.id))
        ).scalars().all()
    }
    try:
        for user_id, summary in summaries.items():
            history = existing.get(user_id)
            if history is None:
                history = AssessmentHistory(user_id=user_id, period_id=period.id)
                db.add(history)
            history.final_score = summary.final_score
            history.supervisor_average = summary.supervisor_average
            history.peer_average = summary.peer_average
            history.total_assessors = summary.total_feedback
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Recorded history for %d assessees in period %s", len(summaries), period.id)
    return len(summaries)
