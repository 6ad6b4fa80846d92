"""Weighted 360 score aggregation.

Ratings from supervisors and peers are averaged separately per aspect and then
combined 60/40. An assessor rates an aspect once and that rating is stored on
every indicator of the aspect, so participation is always counted as distinct
assessors, never as rows.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

SUPERVISOR_WEIGHT = 0.6
PEER_WEIGHT = 0.4


@dataclass
class FeedbackRow:
    assessee_id: str
    assessor_id: str
    aspect: str
    rating: int
    comment: Optional[str] = None
    assessor_name: Optional[str] = None


@dataclass
class AspectComment:
    comment: str
    assessor: Optional[str]
    rating: int


@dataclass
class AspectScore:
    aspect: str
    supervisor_average: Optional[float]
    peer_average: Optional[float]
    final_score: Optional[float]
    total_feedback: int
    has_supervisor_assessment: bool
    has_peer_assessment: bool
    supervisor_comments: List[AspectComment] = field(default_factory=list)
    peer_comments: List[AspectComment] = field(default_factory=list)


@dataclass
class ScoreSummary:
    aspect_results: List[AspectScore]
    supervisor_average: Optional[float]
    peer_average: Optional[float]
    final_score: Optional[float]
    overall_score: Optional[float]
    total_feedback: int
    supervisor_feedback_count: int
    peer_feedback_count: int

    @property
    def has_supervisor_assessment(self) -> bool:
        return self.supervisor_feedback_count > 0

    @property
    def has_peer_assessment(self) -> bool:
        return self.peer_feedback_count > 0


def average(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def combine_scores(supervisor_avg: Optional[float], peer_avg: Optional[float]) -> Optional[float]:
    if supervisor_avg is not None and peer_avg is not None:
        return supervisor_avg * SUPERVISOR_WEIGHT + peer_avg * PEER_WEIGHT
    if supervisor_avg is not None:
        return supervisor_avg
    return peer_avg


class _AspectBucket:
    def __init__(self):
        self.supervisor_ratings: List[int] = []
        self.peer_ratings: List[int] = []
        self.assessors: Set[str] = set()
        self.supervisor_comments: Dict[str, AspectComment] = {}
        self.peer_comments: Dict[str, AspectComment] = {}

    def add(self, row: FeedbackRow, is_supervisor: bool):
        self.assessors.add(row.assessor_id)
        ratings = self.supervisor_ratings if is_supervisor else self.peer_ratings
        comments = self.supervisor_comments if is_supervisor else self.peer_comments
        ratings.append(row.rating)
        # one comment per assessor per aspect; indicators repeat the same text
        if row.comment and row.assessor_id not in comments:
            comments[row.assessor_id] = AspectComment(
                comment=row.comment, assessor=row.assessor_name, rating=row.rating
            )

    def to_score(self, aspect: str) -> AspectScore:
        sup = average(self.supervisor_ratings)
        peer = average(self.peer_ratings)
        return AspectScore(
            aspect=aspect,
            supervisor_average=sup,
            peer_average=peer,
            final_score=combine_scores(sup, peer),
            total_feedback=len(self.assessors),
            has_supervisor_assessment=bool(self.supervisor_ratings),
            has_peer_assessment=bool(self.peer_ratings),
            supervisor_comments=list(self.supervisor_comments.values()),
            peer_comments=list(self.peer_comments.values()),
        )


def aggregate_feedback(rows: Iterable[FeedbackRow], supervisor_ids: Set[str]) -> Optional[ScoreSummary]:
    """Aggregate one assessee's feedback rows. Returns None when there is none."""
    rows = list(rows)
    if not rows:
        return None

    buckets: Dict[str, _AspectBucket] = {}
    supervisor_ratings: List[int] = []
    peer_ratings: List[int] = []
    supervisor_assessors: Set[str] = set()
    peer_assessors: Set[str] = set()

    for row in rows:
        is_supervisor = row.assessor_id in supervisor_ids
        buckets.setdefault(row.aspect, _AspectBucket()).add(row, is_supervisor)
        if is_supervisor:
            supervisor_ratings.append(row.rating)
            supervisor_assessors.add(row.assessor_id)
        else:
            peer_ratings.append(row.rating)
            peer_assessors.add(row.assessor_id)

    aspect_results = [bucket.to_score(aspect) for aspect, bucket in buckets.items()]
    scored = [a.final_score for a in aspect_results if a.final_score is not None]

    supervisor_avg = average(supervisor_ratings)
    peer_avg = average(peer_ratings)
    return ScoreSummary(
        aspect_results=aspect_results,
        supervisor_average=supervisor_avg,
        peer_average=peer_avg,
        final_score=combine_scores(supervisor_avg, peer_avg),
        overall_score=average(scored),
        total_feedback=len(supervisor_assessors | peer_assessors),
        supervisor_feedback_count=len(supervisor_assessors),
        peer_feedback_count=len(peer_assessors),
    )


def aggregate_team(
    rows: Iterable[FeedbackRow], supervisor_ids: Set[str], restricted_ids: Set[str]
) -> Dict[str, ScoreSummary]:
    """Aggregate feedback for every assessee, skipping restricted assessees."""
    by_assessee: Dict[str, List[FeedbackRow]] = {}
    for row in rows:
        if row.assessee_id in restricted_ids:
            continue
        by_assessee.setdefault(row.assessee_id, []).append(row)

    return {
        assessee_id: aggregate_feedback(assessee_rows, supervisor_ids)
        for assessee_id, assessee_rows in by_assessee.items()
    }
