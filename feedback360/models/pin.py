# feedback360/models/pin.py
from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, ForeignKey, UniqueConstraint, func
from feedback360.database import Base
from feedback360.models.profile import new_id


class EmployeePin(Base):
    __tablename__ = "employee_pins"

    id = Column(String(36), primary_key=True, default=new_id)
    giver_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    receiver_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    # week key: ISO week within the ISO year
    week_number = Column(Integer, nullable=False)
    iso_year = Column(Integer, nullable=False)
    # calendar year/month of the day the pin was given
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    given_date = Column(Date, nullable=False)
    given_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("giver_id", "receiver_id", "week_number", "iso_year", name="uq_pin_giver_receiver_week"),
    )


class WeeklyPinAllowance(Base):
    __tablename__ = "weekly_pin_allowance"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    week_number = Column(Integer, nullable=False)
    iso_year = Column(Integer, nullable=False)
    pins_remaining = Column(Integer, nullable=False)
    pins_used = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "week_number", "iso_year", name="uq_allowance_user_week"),
    )


class PinPeriod(Base):
    __tablename__ = "pin_periods"

    id = Column(String(36), primary_key=True, default=new_id)
    year = Column(Integer, nullable=True)
    month = Column(Integer, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_active = Column(Boolean, nullable=False, default=False)
    is_completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
