import pytest

from feedback360.models.assessment import AssessmentAssignment, AssessmentHistory, FeedbackResponse
from feedback360.core.errors import BadRequestError
from feedback360.services import results
from sqlalchemy import select


async def give_feedback(db_session, assessor, assessee, period, rating, aspects=("kolaboratif",)):
    assignment = AssessmentAssignment(
        assessor_id=assessor.id, assessee_id=assessee.id, period_id=period.id, is_completed=True
    )
    db_session.add(assignment)
    await db_session.flush()
    for aspect in aspects:
        for n in range(3):
            db_session.add(FeedbackResponse(
                assignment_id=assignment.id, aspect=aspect, indicator=f"Indikator {n}", rating=rating
            ))
    await db_session.commit()


async def test_weighted_result_scenario(db_session, make_user, make_period):
    period = await make_period()
    assessee = await make_user()
    for rating in (90, 80):
        await give_feedback(db_session, await make_user(role="supervisor"), assessee, period, rating)
    for rating in (70, 60, 50):
        await give_feedback(db_session, await make_user(), assessee, period, rating)

    summary = await results.get_weighted_results(db_session, assessee.id, period.id)

    assert summary.final_score == pytest.approx(75.0)
    assert summary.overall_score == pytest.approx(75.0)
    assert summary.total_feedback == 5
    assert summary.supervisor_feedback_count == 2
    assert summary.peer_feedback_count == 3


async def test_no_feedback_returns_none(db_session, make_user):
    user = await make_user()
    assert await results.get_weighted_results(db_session, user.id) is None


async def test_team_results_exclude_restricted_and_sort(db_session, make_user, make_period):
    period = await make_period()
    supervisor = await make_user(full_name="Boss", role="supervisor")
    high = await make_user(full_name="High")
    low = await make_user(full_name="Low")
    await make_user(full_name="Nobody")
    await give_feedback(db_session, supervisor, low, period, 50)
    await give_feedback(db_session, supervisor, high, period, 95)
    await give_feedback(db_session, high, supervisor, period, 80)

    team = await results.get_team_results(db_session)

    assert [item["user"].full_name for item in team] == ["High", "Low", "Nobody"]
    assert team[0]["summary"].final_score == pytest.approx(95.0)
    assert team[-1]["summary"] is None


async def test_team_results_need_active_period(db_session):
    with pytest.raises(BadRequestError):
        await results.get_team_results(db_session)


async def test_detailed_results_distribution(db_session, make_user, make_period):
    period = await make_period()
    assessee = await make_user()
    await give_feedback(db_session, await make_user(), assessee, period, 85)

    detailed = await results.get_detailed_results(db_session, assessee.id)

    buckets = {b["range"]: b["count"] for b in detailed["rating_distribution"]}
    assert buckets["81-90"] == 3
    assert detailed["total_feedback"] == 3
    kolaboratif = next(a for a in detailed["aspect_results"] if a["aspect_id"] == "kolaboratif")
    assert kolaboratif["rating"] == pytest.approx(85.0)
    adaptif = next(a for a in detailed["aspect_results"] if a["aspect_id"] == "adaptif")
    assert adaptif["rating"] is None


async def test_record_history_snapshots_scores(db_session, make_user, make_period):
    period = await make_period()
    assessee = await make_user()
    await give_feedback(db_session, await make_user(), assessee, period, 70)

    assert await results.record_history(db_session, period.id) == 1
    history = (await db_session.execute(select(AssessmentHistory))).scalars().one()
    assert history.user_id == assessee.id
    assert history.final_score == pytest.approx(70.0)
    assert history.total_assessors == 1
