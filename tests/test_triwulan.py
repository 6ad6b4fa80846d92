import pytest

from feedback360.core.errors import BadRequestError, ForbiddenError
from feedback360.services import triwulan

PERIOD = "2025-Q3"


async def nominate(db_session, make_user, count):
    ids = []
    for n in range(count):
        user = await make_user(full_name=f"Candidate {n}")
        await triwulan.add_candidate(db_session, PERIOD, user.id)
        ids.append(user.id)
    return ids


async def test_sync_candidates_from_zero_deficiency(db_session, make_user):
    admin = await make_user(role="admin")
    clean = await make_user(full_name="Clean")
    late = await make_user(full_name="Late")
    rows = [
        {"user_id": clean.id, "month": m, "deficiency_hours": 0} for m in (7, 8, 9)
    ] + [
        {"user_id": late.id, "month": 7, "deficiency_hours": 0},
        {"user_id": late.id, "month": 8, "deficiency_hours": 2.5},
    ]
    await triwulan.upsert_deficiencies(db_session, PERIOD, rows, filled_by=admin.id)

    synced = await triwulan.sync_candidates_from_deficiencies(db_session, PERIOD)

    assert synced == [clean.id]
    candidates = await triwulan.list_candidates(db_session, PERIOD)
    assert [(c["full_name"], c["source"]) for c in candidates] == [("Clean", "deficiency")]


async def test_deficiency_month_must_belong_to_quarter(db_session, make_user):
    admin_id = (await make_user(role="admin")).id
    user_id = (await make_user()).id
    with pytest.raises(BadRequestError):
        await triwulan.upsert_deficiencies(
            db_session, PERIOD, [{"user_id": user_id, "month": 10, "deficiency_hours": 0}], filled_by=admin_id
        )


async def test_candidates_exclude_supervisors(db_session, make_user):
    supervisor = await make_user(role="supervisor")
    await triwulan.add_candidate(db_session, PERIOD, supervisor.id)
    assert await triwulan.list_candidates(db_session, PERIOD) == []


async def test_votes_require_exactly_five_when_more_candidates(db_session, make_user):
    voter_id = (await make_user()).id
    candidates = await nominate(db_session, make_user, 7)

    with pytest.raises(BadRequestError):
        await triwulan.submit_votes(db_session, PERIOD, voter_id, candidates[:4])
    with pytest.raises(BadRequestError):
        await triwulan.submit_votes(db_session, PERIOD, voter_id, candidates[:4] + ["not-a-candidate"])

    await triwulan.submit_votes(db_session, PERIOD, voter_id, candidates[:5])
    await triwulan.submit_votes(db_session, PERIOD, voter_id, candidates[2:7])

    assert sorted(await triwulan.get_user_votes(db_session, PERIOD, voter_id)) == sorted(candidates[2:7])


async def test_vote_completion_and_top_candidates(db_session, make_user):
    voters = [(await make_user()).id for _ in range(2)]
    candidates = await nominate(db_session, make_user, 6)

    await triwulan.submit_votes(db_session, PERIOD, voters[0], candidates[:5])
    await triwulan.submit_votes(db_session, PERIOD, voters[1], candidates[1:6])
    await triwulan.mark_vote_completed(db_session, PERIOD, voters[0])
    await triwulan.mark_vote_completed(db_session, PERIOD, voters[0])

    assert await triwulan.has_completed_vote(db_session, PERIOD, voters[0])
    assert not await triwulan.has_completed_vote(db_session, PERIOD, voters[1])

    status = await triwulan.get_voting_status(db_session, PERIOD)
    assert status["completed_user_ids"] == [voters[0]]
    assert status["required_count"] == 8

    top = await triwulan.get_top_candidates(db_session, PERIOD, limit=4)
    assert all(entry["votes"] == 2 for entry in top)
    assert {entry["candidate_id"] for entry in top} <= set(candidates[1:5])


@pytest.mark.parametrize("scores", [[5] * 12, [5] * 12 + [6], [0] + [5] * 12])
async def test_rating_scores_validated(db_session, make_user, scores):
    rater_id = (await make_user()).id
    candidates = await nominate(db_session, make_user, 1)
    with pytest.raises(BadRequestError):
        await triwulan.submit_rating(db_session, PERIOD, rater_id, candidates[0], scores)


async def test_rating_only_for_nominated_candidates(db_session, make_user):
    rater_id = (await make_user()).id
    outsider_id = (await make_user()).id
    with pytest.raises(BadRequestError):
        await triwulan.submit_rating(db_session, PERIOD, rater_id, outsider_id, [4] * 13)


async def test_rating_status_needs_min_of_five_and_candidates(db_session, make_user):
    rater_a = (await make_user()).id
    rater_b = (await make_user()).id
    candidates = await nominate(db_session, make_user, 3)

    for candidate in candidates:
        await triwulan.submit_rating(db_session, PERIOD, rater_a, candidate, [4] * 13)
    await triwulan.submit_rating(db_session, PERIOD, rater_b, candidates[0], [4] * 13)

    status = await triwulan.get_rating_status(db_session, PERIOD)
    assert status["completed_user_ids"] == [rater_a]
    assert status["completed_count"] == 1


async def test_resubmitting_rating_updates_in_place(db_session, make_user):
    rater_id = (await make_user()).id
    candidate = (await nominate(db_session, make_user, 1))[0]

    await triwulan.submit_rating(db_session, PERIOD, rater_id, candidate, [3] * 13)
    await triwulan.submit_rating(db_session, PERIOD, rater_id, candidate, [5] * 13)

    assert await triwulan.get_user_ratings(db_session, PERIOD, rater_id) == {candidate: [5] * 13}


async def test_scores_sorted_with_percent(db_session, make_user):
    raters = [(await make_user()).id for _ in range(3)]
    first, second, third = await nominate(db_session, make_user, 3)

    for rater in raters:
        await triwulan.submit_rating(db_session, PERIOD, rater, first, [2] * 13)
    # same total as "first" from fewer raters
    for rater in raters[:2]:
        await triwulan.submit_rating(db_session, PERIOD, rater, third, [3] * 13)
    await triwulan.submit_rating(db_session, PERIOD, raters[0], second, [5] * 13)

    scores = await triwulan.get_scores(db_session, PERIOD)

    assert [s["candidate_id"] for s in scores] == [first, third, second]
    assert [s["total_score"] for s in scores] == [78, 78, 65]
    assert [s["num_raters"] for s in scores] == [3, 2, 1]
    assert scores[0]["score_percent"] == pytest.approx(40.0)
    assert scores[1]["score_percent"] == pytest.approx(60.0)
    assert scores[2]["score_percent"] == pytest.approx(100.0)


async def test_winner_must_be_candidate(db_session, make_user):
    rater_id = (await make_user()).id
    outsider_id = (await make_user()).id
    candidate = (await nominate(db_session, make_user, 1))[0]
    await triwulan.submit_rating(db_session, PERIOD, rater_id, candidate, [4] * 13)

    with pytest.raises(BadRequestError):
        await triwulan.set_winner(db_session, PERIOD, outsider_id)

    winner = await triwulan.set_winner(db_session, PERIOD, candidate)
    assert winner.total_score == pytest.approx(52.0)
    assert (await triwulan.get_winner(db_session, PERIOD)).winner_id == candidate


async def test_admins_cannot_rate_or_vote(db_session, make_user):
    admin_id = (await make_user(role="admin")).id
    rater_id = (await make_user()).id
    candidate = (await nominate(db_session, make_user, 1))[0]

    with pytest.raises(ForbiddenError):
        await triwulan.submit_rating(db_session, PERIOD, admin_id, candidate, [5] * 13)
    with pytest.raises(ForbiddenError):
        await triwulan.submit_votes(db_session, PERIOD, admin_id, [candidate])
    with pytest.raises(ForbiddenError):
        await triwulan.mark_vote_completed(db_session, PERIOD, admin_id)

    await triwulan.submit_rating(db_session, PERIOD, rater_id, candidate, [4] * 13)
    status = await triwulan.get_rating_status(db_session, PERIOD)
    assert status["completed_user_ids"] == [rater_id]
    assert status["completed_count"] <= status["required_count"]
    assert await triwulan.get_scores(db_session, PERIOD) != []
    assert (await triwulan.get_scores(db_session, PERIOD))[0]["num_raters"] == 1
