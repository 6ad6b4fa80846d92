import operator
from functools import reduce

from sqlalchemy import Column, Integer, Float, String, DateTime, ForeignKey, PrimaryKeyConstraint, func, select, cast
from feedback360.database import Base

# Triwulan tables are keyed by the quarter id ("2025-Q3"), not by a stored period row.
CRITERIA_COUNT = 13
MAX_CRITERION_SCORE = 5


class TriwulanMonthlyDeficiency(Base):
    __tablename__ = "triwulan_monthly_deficiencies"

    period_id = Column(String, nullable=False)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    deficiency_hours = Column(Float, nullable=False, default=0)
    filled_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        PrimaryKeyConstraint("period_id", "user_id", "year", "month", name="triwulan_monthly_deficiencies_pkey"),
    )


class TriwulanCandidate(Base):
    __tablename__ = "triwulan_candidates"

    period_id = Column(String, nullable=False)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    source = Column(String, nullable=False, default="manual")  # deficiency, manual
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        PrimaryKeyConstraint("period_id", "user_id", name="triwulan_candidates_pkey"),
    )


class TriwulanVote(Base):
    __tablename__ = "triwulan_votes"

    period_id = Column(String, nullable=False)
    voter_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    candidate_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        PrimaryKeyConstraint("period_id", "voter_id", "candidate_id", name="triwulan_votes_pkey"),
    )


class TriwulanVoteCompletion(Base):
    __tablename__ = "triwulan_vote_completion"

    period_id = Column(String, nullable=False)
    voter_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    completed_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        PrimaryKeyConstraint("period_id", "voter_id", name="triwulan_vote_completion_pkey"),
    )


class TriwulanRating(Base):
    __tablename__ = "triwulan_ratings"

    period_id = Column(String, nullable=False)
    rater_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    candidate_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)

    # One column per criterion, each 1-5
    c1 = Column(Integer, nullable=True)
    c2 = Column(Integer, nullable=True)
    c3 = Column(Integer, nullable=True)
    c4 = Column(Integer, nullable=True)
    c5 = Column(Integer, nullable=True)
    c6 = Column(Integer, nullable=True)
    c7 = Column(Integer, nullable=True)
    c8 = Column(Integer, nullable=True)
    c9 = Column(Integer, nullable=True)
    c10 = Column(Integer, nullable=True)
    c11 = Column(Integer, nullable=True)
    c12 = Column(Integer, nullable=True)
    c13 = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        PrimaryKeyConstraint("period_id", "rater_id", "candidate_id", name="triwulan_ratings_pkey"),
    )

    @classmethod
    def criteria_columns(cls):
        return [getattr(cls, f"c{i}") for i in range(1, CRITERIA_COUNT + 1)]

    @property
    def scores(self):
        return [getattr(self, f"c{i}") for i in range(1, CRITERIA_COUNT + 1)]

    @scores.setter
    def scores(self, values):
        for i, value in enumerate(values, start=1):
            setattr(self, f"c{i}", value)

    @property
    def is_complete(self) -> bool:
        return all(self.scores)


class TriwulanWinner(Base):
    __tablename__ = "triwulan_winners"

    period_id = Column(String, primary_key=True)
    winner_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    total_score = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


_row_total = reduce(operator.add, [func.coalesce(col, 0) for col in TriwulanRating.criteria_columns()])

# Aggregate scores per candidate, summed across raters in SQL
triwulan_candidate_scores = (
    select(
        TriwulanRating.period_id.label("period_id"),
        TriwulanRating.candidate_id.label("candidate_id"),
        cast(func.sum(_row_total), Float).label("total_score"),
        func.count().label("num_raters"),
        (cast(func.sum(_row_total), Float) / (func.count() * CRITERIA_COUNT)).label("avg_score"),
    )
    .group_by(TriwulanRating.period_id, TriwulanRating.candidate_id)
    .subquery("triwulan_candidate_scores")
)
