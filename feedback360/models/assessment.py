# feedback360/models/assessment.py
from sqlalchemy import Column, Integer, Float, String, Text, Boolean, Date, DateTime, ForeignKey, UniqueConstraint, func
from feedback360.database import Base
from feedback360.models.profile import new_id


class AssessmentPeriod(Base):
    __tablename__ = "assessment_periods"

    id = Column(String(36), primary_key=True, default=new_id)
    month = Column(Integer, nullable=False)  # 1-12
    year = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_active = Column(Boolean, nullable=False, default=False)
    is_completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class AssessmentAssignment(Base):
    __tablename__ = "assessment_assignments"

    id = Column(String(36), primary_key=True, default=new_id)
    assessor_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    assessee_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    period_id = Column(String(36), ForeignKey("assessment_periods.id"), nullable=False, index=True)
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("assessor_id", "assessee_id", "period_id", name="uq_assignment_pair_period"),
    )


class FeedbackResponse(Base):
    __tablename__ = "feedback_responses"

    id = Column(String(36), primary_key=True, default=new_id)
    assignment_id = Column(String(36), ForeignKey("assessment_assignments.id"), nullable=False, index=True)
    aspect = Column(String, nullable=False)
    indicator = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False)  # 1-100
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class ReminderLog(Base):
    __tablename__ = "reminder_logs"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    period_id = Column(String(36), ForeignKey("assessment_periods.id"), nullable=False)
    assignment_id = Column(String(36), ForeignKey("assessment_assignments.id"), nullable=True)
    reminder_type = Column(String, nullable=False, default="daily")
    sent_at = Column(DateTime(timezone=True), server_default=func.now())


class AssessmentHistory(Base):
    __tablename__ = "assessment_history"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    period_id = Column(String(36), ForeignKey("assessment_periods.id"), nullable=False)
    final_score = Column(Float, nullable=True)
    supervisor_average = Column(Float, nullable=True)
    peer_average = Column(Float, nullable=True)
    total_assessors = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "period_id", name="uq_history_user_period"),
    )
