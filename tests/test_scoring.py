import pytest

from feedback360.services.scoring import (
    FeedbackRow,
    aggregate_feedback,
    aggregate_team,
    average,
    combine_scores,
)

SUP = "sup-1"


def rows_for(assessor, rating, aspects=("kolaboratif",), indicators=3, assessee="u1", comment=None):
    return [
        FeedbackRow(assessee_id=assessee, assessor_id=assessor, aspect=aspect, rating=rating, comment=comment)
        for aspect in aspects
        for _ in range(indicators)
    ]


def test_combine_scores_weights_supervisor_sixty_percent():
    assert combine_scores(80, 70) == pytest.approx(76.0)


def test_combine_scores_single_side_passes_through():
    assert combine_scores(None, 70) == 70
    assert combine_scores(80, None) == 80
    assert combine_scores(None, None) is None


def test_average_of_nothing_is_none():
    assert average([]) is None


def test_no_feedback_is_none_not_zero():
    assert aggregate_feedback([], {SUP}) is None


def test_two_supervisors_three_peers_scores_75():
    rows = (
        rows_for(SUP, 90)
        + rows_for("sup-2", 80)
        + rows_for("p1", 70)
        + rows_for("p2", 60)
        + rows_for("p3", 50)
    )
    summary = aggregate_feedback(rows, {SUP, "sup-2"})

    aspect = summary.aspect_results[0]
    assert aspect.supervisor_average == pytest.approx(85.0)
    assert aspect.peer_average == pytest.approx(60.0)
    assert aspect.final_score == pytest.approx(75.0)
    assert summary.overall_score == pytest.approx(75.0)
    assert summary.final_score == pytest.approx(75.0)


def test_counts_are_distinct_assessors_not_rows():
    rows = rows_for(SUP, 90, aspects=("kolaboratif", "adaptif")) + rows_for("p1", 70, aspects=("kolaboratif", "adaptif"))
    summary = aggregate_feedback(rows, {SUP})

    assert summary.total_feedback == 2
    assert summary.supervisor_feedback_count == 1
    assert summary.peer_feedback_count == 1
    for aspect in summary.aspect_results:
        assert aspect.total_feedback == 2


def test_peer_only_feedback_uses_peer_average():
    summary = aggregate_feedback(rows_for("p1", 70) + rows_for("p2", 80), {SUP})

    assert summary.supervisor_average is None
    assert summary.final_score == pytest.approx(75.0)
    assert not summary.has_supervisor_assessment
    assert summary.has_peer_assessment


def test_overall_is_mean_of_aspect_scores():
    rows = rows_for("p1", 60, aspects=("kolaboratif",)) + rows_for("p1", 80, aspects=("adaptif",))
    summary = aggregate_feedback(rows, set())
    assert summary.overall_score == pytest.approx(70.0)


def test_one_comment_per_assessor_per_aspect():
    rows = rows_for("p1", 70, comment="Sangat membantu tim") + rows_for(SUP, 90, comment="Bagus")
    aspect = aggregate_feedback(rows, {SUP}).aspect_results[0]

    assert [c.comment for c in aspect.peer_comments] == ["Sangat membantu tim"]
    assert [c.comment for c in aspect.supervisor_comments] == ["Bagus"]


def test_team_aggregation_skips_restricted_assessees():
    rows = rows_for("p1", 70, assessee="u1") + rows_for("p1", 90, assessee=SUP)
    team = aggregate_team(rows, {SUP}, {SUP})

    assert set(team) == {"u1"}
    assert team["u1"].final_score == pytest.approx(70.0)
