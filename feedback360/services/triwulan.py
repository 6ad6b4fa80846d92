"""Quarterly (triwulan) best-employee selection.

Candidates come from monthly deficiency records (zero hours over the quarter)
or are added by hand. When there are more than five candidates, employees first
vote to narrow the field; the nominated candidates are then rated on 13 criteria
and the admin picks a winner from the aggregated scores.
"""
import logging
from typing import Iterable, List, Optional

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.core.errors import BadRequestError, ForbiddenError, NotFoundError
from feedback360.data.criteria import TRIWULAN_CRITERIA
from feedback360.models.profile import Profile
from feedback360.models.triwulan import (
    CRITERIA_COUNT,
    MAX_CRITERION_SCORE,
    TriwulanCandidate,
    TriwulanMonthlyDeficiency,
    TriwulanRating,
    TriwulanVote,
    TriwulanVoteCompletion,
    TriwulanWinner,
    triwulan_candidate_scores,
)
from feedback360.services.periods import QuarterKey
from feedback360.services.roles import get_role_user_ids

logger = logging.getLogger(__name__)

VOTES_PER_VOTER = 5
RATINGS_REQUIRED = 5


def normalize_period(period_id: str) -> str:
    return str(QuarterKey.parse(period_id))


# Deficiencies

async def upsert_deficiencies(db: AsyncSession, period_id: str, rows: Iterable[dict], filled_by: str) -> int:
    key = QuarterKey.parse(period_id)
    count = 0
    try:
        for row in rows:
            month = int(row["month"])
            year = int(row.get("year") or key.year)
            hours = float(row.get("deficiency_hours") or 0)
            if year != key.year or month not in key.months:
                raise BadRequestError(f"{month}/{year} is outside triwulan {key}")
            if hours < 0:
                raise BadRequestError("deficiency_hours must not be negative")

            record = await db.get(
                TriwulanMonthlyDeficiency,
                {"period_id": str(key), "user_id": row["user_id"], "year": year, "month": month},
            )
            if record is None:
                record = TriwulanMonthlyDeficiency(
                    period_id=str(key), user_id=row["user_id"], year=year, month=month
                )
                db.add(record)
            record.deficiency_hours = hours
            record.filled_by = filled_by
            count += 1
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return count


async def list_deficiencies(db: AsyncSession, period_id: str) -> List[TriwulanMonthlyDeficiency]:
    result = await db.execute(
        select(TriwulanMonthlyDeficiency)
        .where(TriwulanMonthlyDeficiency.period_id == normalize_period(period_id))
        .order_by(TriwulanMonthlyDeficiency.user_id, TriwulanMonthlyDeficiency.month)
    )
    return list(result.scalars().all())


# Candidates

async def sync_candidates_from_deficiencies(db: AsyncSession, period_id: str) -> List[str]:
    """Make every user with zero summed deficiency hours a candidate.

    Candidates previously synced who no longer qualify are dropped; manual
    candidates are kept.
    """
    period_id = normalize_period(period_id)
    result = await db.execute(
        select(TriwulanMonthlyDeficiency.user_id)
        .where(TriwulanMonthlyDeficiency.period_id == period_id)
        .group_by(TriwulanMonthlyDeficiency.user_id)
        .having(func.coalesce(func.sum(TriwulanMonthlyDeficiency.deficiency_hours), 0) == 0)
    )
    qualified = set(result.scalars().all())

    existing = {
        c.user_id: c
        for c in (
            await db.execute(select(TriwulanCandidate).where(TriwulanCandidate.period_id == period_id))
        ).scalars().all()
    }
    try:
        for user_id, candidate in existing.items():
            if candidate.source == "deficiency" and user_id not in qualified:
                await db.delete(candidate)
        for user_id in qualified - set(existing):
            db.add(TriwulanCandidate(period_id=period_id, user_id=user_id, source="deficiency"))
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Synced %d deficiency candidates for %s", len(qualified), period_id)
    return sorted(qualified)


async def add_candidate(db: AsyncSession, period_id: str, user_id: str) -> TriwulanCandidate:
    period_id = normalize_period(period_id)
    if not await db.get(Profile, user_id):
        raise NotFoundError("User not found")
    candidate = await db.get(TriwulanCandidate, {"period_id": period_id, "user_id": user_id})
    if candidate is None:
        candidate = TriwulanCandidate(period_id=period_id, user_id=user_id, source="manual")
        db.add(candidate)
        await db.commit()
    return candidate


async def remove_candidate(db: AsyncSession, period_id: str, user_id: str) -> None:
    candidate = await db.get(TriwulanCandidate, {"period_id": normalize_period(period_id), "user_id": user_id})
    if candidate is None:
        raise NotFoundError("Candidate not found")
    await db.delete(candidate)
    await db.commit()


async def list_candidates(db: AsyncSession, period_id: str) -> List[dict]:
    roles = await get_role_user_ids(db)
    stmt = (
        select(TriwulanCandidate, Profile)
        .join(Profile, Profile.id == TriwulanCandidate.user_id)
        .where(TriwulanCandidate.period_id == normalize_period(period_id))
        .order_by(Profile.full_name)
    )
    return [
        {
            "user_id": candidate.user_id,
            "full_name": profile.full_name,
            "position": profile.position,
            "department": profile.department,
            "avatar_url": profile.avatar_url,
            "source": candidate.source,
        }
        for candidate, profile in (await db.execute(stmt)).all()
        if candidate.user_id not in roles.restricted_ids
    ]


async def _candidate_ids(db: AsyncSession, period_id: str) -> List[str]:
    roles = await get_role_user_ids(db)
    result = await db.execute(select(TriwulanCandidate.user_id).where(TriwulanCandidate.period_id == period_id))
    return [user_id for user_id in result.scalars().all() if user_id not in roles.restricted_ids]


async def _required_participants(db: AsyncSession) -> int:
    roles = await get_role_user_ids(db)
    stmt = select(func.count(Profile.id))
    if roles.admin_ids:
        stmt = stmt.where(Profile.id.notin_(sorted(roles.admin_ids)))
    return (await db.execute(stmt)).scalar_one()


async def _require_participant(db: AsyncSession, user_id: str) -> None:
    if user_id in (await get_role_user_ids(db)).admin_ids:
        raise ForbiddenError("Admin tidak ikut dalam pemilihan triwulan")


# Votes

async def submit_votes(db: AsyncSession, period_id: str, voter_id: str, candidate_ids: List[str]) -> List[str]:
    period_id = normalize_period(period_id)
    await _require_participant(db, voter_id)
    chosen = list(dict.fromkeys(candidate_ids or []))
    candidates = set(await _candidate_ids(db, period_id))
    required = min(VOTES_PER_VOTER, len(candidates))

    if not chosen:
        raise BadRequestError("candidate_ids required")
    unknown = [c for c in chosen if c not in candidates]
    if unknown:
        raise BadRequestError("Only nominated candidates can be voted for")
    if len(chosen) != required:
        raise BadRequestError(f"Pilih tepat {required} kandidat")

    try:
        # the voter's previous selection is replaced
        await db.execute(
            delete(TriwulanVote).where(TriwulanVote.period_id == period_id, TriwulanVote.voter_id == voter_id)
        )
        for candidate_id in chosen:
            db.add(TriwulanVote(period_id=period_id, voter_id=voter_id, candidate_id=candidate_id))
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return chosen


async def get_user_votes(db: AsyncSession, period_id: str, voter_id: str) -> List[str]:
    result = await db.execute(
        select(TriwulanVote.candidate_id).where(
            TriwulanVote.period_id == normalize_period(period_id), TriwulanVote.voter_id == voter_id
        )
    )
    return list(result.scalars().all())


async def mark_vote_completed(db: AsyncSession, period_id: str, voter_id: str) -> None:
    period_id = normalize_period(period_id)
    await _require_participant(db, voter_id)
    if await db.get(TriwulanVoteCompletion, {"period_id": period_id, "voter_id": voter_id}) is None:
        db.add(TriwulanVoteCompletion(period_id=period_id, voter_id=voter_id))
        await db.commit()


async def has_completed_vote(db: AsyncSession, period_id: str, voter_id: str) -> bool:
    completion = await db.get(
        TriwulanVoteCompletion, {"period_id": normalize_period(period_id), "voter_id": voter_id}
    )
    return completion is not None


async def get_voting_status(db: AsyncSession, period_id: str) -> dict:
    admin_ids = (await get_role_user_ids(db)).admin_ids
    result = await db.execute(
        select(TriwulanVoteCompletion.voter_id).where(
            TriwulanVoteCompletion.period_id == normalize_period(period_id)
        )
    )
    completed = [voter_id for voter_id in result.scalars().all() if voter_id not in admin_ids]
    return {
        "required_count": await _required_participants(db),
        "completed_count": len(completed),
        "completed_user_ids": completed,
    }


async def get_top_candidates(db: AsyncSession, period_id: str, limit: int = 5) -> List[dict]:
    votes = func.count().label("votes")
    result = await db.execute(
        select(TriwulanVote.candidate_id, votes)
        .where(TriwulanVote.period_id == normalize_period(period_id))
        .group_by(TriwulanVote.candidate_id)
        .order_by(votes.desc(), TriwulanVote.candidate_id)
        .limit(limit)
    )
    return [{"candidate_id": candidate_id, "votes": count} for candidate_id, count in result.all()]


# Ratings

def validate_scores(scores: List[int]) -> List[int]:
    if not isinstance(scores, list) or len(scores) != CRITERIA_COUNT:
        raise BadRequestError(f"Expected {CRITERIA_COUNT} criterion scores")
    for score in scores:
        if not isinstance(score, int) or isinstance(score, bool) or not 1 <= score <= MAX_CRITERION_SCORE:
            raise BadRequestError(f"Each score must be between 1 and {MAX_CRITERION_SCORE}")
    return scores


async def submit_rating(
    db: AsyncSession, period_id: str, rater_id: str, candidate_id: str, scores: List[int]
) -> TriwulanRating:
    period_id = normalize_period(period_id)
    await _require_participant(db, rater_id)
    validate_scores(scores)
    if candidate_id not in await _candidate_ids(db, period_id):
        raise BadRequestError("Candidate is not nominated for this triwulan")

    key = {"period_id": period_id, "rater_id": rater_id, "candidate_id": candidate_id}
    rating = await db.get(TriwulanRating, key)
    if rating is None:
        rating = TriwulanRating(**key)
        db.add(rating)
    rating.scores = scores
    await db.commit()
    return rating


async def get_user_ratings(db: AsyncSession, period_id: str, rater_id: str) -> dict:
    result = await db.execute(
        select(TriwulanRating).where(
            TriwulanRating.period_id == normalize_period(period_id), TriwulanRating.rater_id == rater_id
        )
    )
    return {rating.candidate_id: rating.scores for rating in result.scalars().all()}


async def get_rating_status(db: AsyncSession, period_id: str) -> dict:
    period_id = normalize_period(period_id)
    needed = min(RATINGS_REQUIRED, len(await _candidate_ids(db, period_id)))
    admin_ids = (await get_role_user_ids(db)).admin_ids

    complete_counts = {}
    result = await db.execute(select(TriwulanRating).where(TriwulanRating.period_id == period_id))
    for rating in result.scalars().all():
        if rating.is_complete and rating.rater_id not in admin_ids:
            complete_counts[rating.rater_id] = complete_counts.get(rating.rater_id, 0) + 1

    completed = sorted(rater for rater, count in complete_counts.items() if needed and count >= needed)
    return {
        "required_count": await _required_participants(db),
        "completed_count": len(completed),
        "completed_user_ids": completed,
    }


async def get_scores(db: AsyncSession, period_id: str) -> List[dict]:
    scores = triwulan_candidate_scores
    result = await db.execute(
        select(scores, Profile.full_name)
        .join(Profile, Profile.id == scores.c.candidate_id, isouter=True)
        .where(scores.c.period_id == normalize_period(period_id))
        .order_by(scores.c.total_score.desc(), scores.c.num_raters.desc())
    )
    rows = []
    for row in result.mappings().all():
        avg = row["avg_score"] or 0
        rows.append({
            "candidate_id": row["candidate_id"],
            "full_name": row["full_name"],
            "total_score": row["total_score"],
            "num_raters": row["num_raters"],
            "avg_score": avg,
            "score_percent": max(0.0, min(100.0, avg / MAX_CRITERION_SCORE * 100)),
        })
    return rows


def criteria() -> List[dict]:
    return [{"key": f"c{i}", "label": label} for i, label in enumerate(TRIWULAN_CRITERIA, start=1)]


# Winner

async def set_winner(
    db: AsyncSession, period_id: str, winner_id: str, total_score: Optional[float] = None
) -> TriwulanWinner:
    period_id = normalize_period(period_id)
    if await db.get(TriwulanCandidate, {"period_id": period_id, "user_id": winner_id}) is None:
        raise BadRequestError("Winner must be a candidate of this triwulan")

    if total_score is None:
        score = next((s for s in await get_scores(db, period_id) if s["candidate_id"] == winner_id), None)
        total_score = score["total_score"] if score else None

    winner = await db.get(TriwulanWinner, period_id)
    if winner is None:
        winner = TriwulanWinner(period_id=period_id)
        db.add(winner)
    winner.winner_id = winner_id
    winner.total_score = total_score
    await db.commit()
    logger.info("Triwulan %s winner set to %s", period_id, winner_id)
    return winner


async def get_winner(db: AsyncSession, period_id: str) -> Optional[TriwulanWinner]:
    return await db.get(TriwulanWinner, normalize_period(period_id))
