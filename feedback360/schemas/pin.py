from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime


class GivePinRequest(BaseModel):
    receiver_id: str


class CancelPinRequest(BaseModel):
    pin_id: str


class AllowanceResponse(BaseModel):
    week_number: int
    iso_year: int
    pins_remaining: int
    pins_used: int

    model_config = {"from_attributes": True}


class GivePinResponse(BaseModel):
    success: bool = True
    pin_id: str
    pins_remaining: int
    pins_used: int


class PinHistoryItem(BaseModel):
    id: str
    receiver_id: str
    receiver_name: Optional[str] = None
    week_number: int
    iso_year: int
    year: int
    month: int
    given_date: date
    given_at: Optional[datetime] = None


class PinRanking(BaseModel):
    rank: int
    user_id: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    total_pins: int


class PinStats(BaseModel):
    total_pins: int
    this_week_pins: int
    this_month_pins: int


class PinPeriodResponse(BaseModel):
    id: str
    year: Optional[int] = None
    month: Optional[int] = None
    start_date: date
    end_date: date
    is_active: bool
    is_completed: bool

    model_config = {"from_attributes": True}


class PinPeriodCreate(BaseModel):
    start_date: date
    end_date: date
    month: Optional[int] = Field(None, ge=1, le=12)
    year: Optional[int] = None


class PinPeriodUpdate(BaseModel):
    id: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    month: Optional[int] = Field(None, ge=1, le=12)
    year: Optional[int] = None
    is_active: Optional[bool] = None
    is_completed: Optional[bool] = None


class ResetPinPeriodRequest(BaseModel):
    id: str


class ResetPinPeriodResponse(BaseModel):
    pins_deleted: int
    allowances_reset: int
