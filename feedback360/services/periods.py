"""Monthly assessment periods and their quarterly (triwulan) grouping.

A quarter is not stored: it is derived from the monthly periods that fall in it
and identified by a QuarterKey such as ``2025-Q3``.
"""
import calendar
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, NamedTuple, Optional

from sqlalchemy import select, delete, update, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.core.errors import BadRequestError, NotFoundError
from feedback360.models.assessment import (
    AssessmentPeriod,
    AssessmentAssignment,
    FeedbackResponse,
    ReminderLog,
    AssessmentHistory,
)

logger = logging.getLogger(__name__)


def quarter_of_month(month: int) -> int:
    return (month - 1) // 3 + 1


def month_bounds(year: int, month: int):
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


MONTH_NAMES = (
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
)


def period_label(period: AssessmentPeriod) -> str:
    """``Juli 2025`` style label of a monthly period."""
    return f"{MONTH_NAMES[period.month - 1]} {period.year}"


class QuarterKey(NamedTuple):
    year: int
    quarter: int

    def __str__(self) -> str:
        return f"{self.year}-Q{self.quarter}"

    @classmethod
    def parse(cls, raw: str) -> "QuarterKey":
        try:
            year_part, quarter_part = str(raw).split("-Q")
            key = cls(int(year_part), int(quarter_part))
        except (ValueError, TypeError):
            raise BadRequestError(f"Invalid triwulan id: {raw}")
        if not 1 <= key.quarter <= 4:
            raise BadRequestError(f"Invalid triwulan id: {raw}")
        return key

    @classmethod
    def from_month(cls, year: int, month: int) -> "QuarterKey":
        return cls(year, quarter_of_month(month))

    @property
    def months(self) -> List[int]:
        first = (self.quarter - 1) * 3 + 1
        return [first, first + 1, first + 2]

    def default_range(self):
        first, _, last = self.months
        return month_bounds(self.year, first)[0], month_bounds(self.year, last)[1]


@dataclass
class Quarter:
    id: str
    year: int
    quarter: int
    start_date: date
    end_date: date
    is_active: bool


def group_periods(periods: Iterable[AssessmentPeriod], today: Optional[date] = None) -> List[Quarter]:
    today = today or date.today()
    groups: Dict[QuarterKey, Quarter] = {}

    for period in periods:
        key = QuarterKey.from_month(period.year, period.month or 1)
        group = groups.get(key)
        if group is None:
            group = Quarter(
                id=str(key),
                year=key.year,
                quarter=key.quarter,
                start_date=period.start_date,
                end_date=period.end_date,
                is_active=False,
            )
            groups[key] = group
        else:
            group.start_date = min(group.start_date, period.start_date)
            group.end_date = max(group.end_date, period.end_date)
        if period.is_active:
            group.is_active = True

    # A quarter whose date range contains today is active even if no month is flagged.
    for group in groups.values():
        if not group.is_active and group.start_date <= today <= group.end_date:
            group.is_active = True

    return sorted(groups.values(), key=lambda g: (g.year, g.quarter), reverse=True)


async def list_quarters(db: AsyncSession, active_only: bool = False, today: Optional[date] = None) -> List[Quarter]:
    result = await db.execute(select(AssessmentPeriod))
    quarters = group_periods(result.scalars().all(), today)
    if active_only:
        active = next((q for q in quarters if q.is_active), None)
        return [active] if active else []
    return quarters


def _validate_range(start_date: date, end_date: date):
    if end_date < start_date:
        raise BadRequestError("end_date must not be before start_date")


def _monthly_slices(start_date: date, end_date: date):
    """Yield (year, month, start, end) for every month touched by the range, clipped to it."""
    year, month = start_date.year, start_date.month
    while (year, month) <= (end_date.year, end_date.month):
        first, last = month_bounds(year, month)
        yield year, month, max(first, start_date), min(last, end_date)
        month += 1
        if month > 12:
            year, month = year + 1, 1


def _resolve_range(key: QuarterKey, start_date: Optional[date], end_date: Optional[date]):
    default_start, default_end = key.default_range()
    start_date = start_date or default_start
    end_date = end_date or default_end
    _validate_range(start_date, end_date)
    if start_date < default_start or end_date > default_end:
        raise BadRequestError(f"Range must stay within triwulan {key} ({default_start} - {default_end})")
    return start_date, end_date


async def create_quarter(
    db: AsyncSession,
    year: int,
    quarter: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Quarter:
    key = QuarterKey.parse(f"{year}-Q{quarter}")
    start_date, end_date = _resolve_range(key, start_date, end_date)

    for y, m, sd, ed in _monthly_slices(start_date, end_date):
        existing = await db.execute(
            select(AssessmentPeriod.id).where(AssessmentPeriod.year == y, AssessmentPeriod.month == m)
        )
        if existing.first() is None:
            db.add(AssessmentPeriod(year=y, month=m, start_date=sd, end_date=ed, is_active=False, is_completed=False))
    await db.commit()

    logger.info("Created triwulan %s (%s - %s)", key, start_date, end_date)
    return Quarter(id=str(key), year=key.year, quarter=key.quarter,
                   start_date=start_date, end_date=end_date, is_active=False)


async def _delete_quarter_periods(db: AsyncSession, key: QuarterKey) -> int:
    """Delete the quarter's monthly periods and every row that references them.

    Only stages the deletes; the caller commits.
    """
    result = await db.execute(
        select(AssessmentPeriod.id).where(
            AssessmentPeriod.year == key.year, AssessmentPeriod.month.in_(key.months)
        )
    )
    period_ids = list(result.scalars().all())
    if not period_ids:
        return 0

    assignment_ids = select(AssessmentAssignment.id).where(AssessmentAssignment.period_id.in_(period_ids))
    await db.execute(delete(FeedbackResponse).where(FeedbackResponse.assignment_id.in_(assignment_ids)))
    await db.execute(delete(ReminderLog).where(ReminderLog.period_id.in_(period_ids)))
    await db.execute(delete(AssessmentAssignment).where(AssessmentAssignment.period_id.in_(period_ids)))
    await db.execute(delete(AssessmentHistory).where(AssessmentHistory.period_id.in_(period_ids)))
    await db.execute(delete(AssessmentPeriod).where(AssessmentPeriod.id.in_(period_ids)))
    return len(period_ids)


async def delete_quarter(db: AsyncSession, key: QuarterKey) -> int:
    try:
        deleted = await _delete_quarter_periods(db, key)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info("Deleted triwulan %s (%d monthly periods)", key, deleted)
    return deleted


async def update_quarter(
    db: AsyncSession,
    key: QuarterKey,
    year: Optional[int] = None,
    quarter: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Quarter:
    """Replace a quarter's monthly periods with ones covering the new range.

    Dependent assessment data of the old months is removed. The delete and
    the recreate run in one transaction.
    """
    new_key = QuarterKey.parse(f"{year or key.year}-Q{quarter or key.quarter}")
    start_date, end_date = _resolve_range(new_key, start_date, end_date)

    try:
        await _delete_quarter_periods(db, key)
        if new_key != key:
            # months of the target quarter may already exist
            await _delete_quarter_periods(db, new_key)
        for y, m, sd, ed in _monthly_slices(start_date, end_date):
            db.add(AssessmentPeriod(year=y, month=m, start_date=sd, end_date=ed, is_active=False, is_completed=False))
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Updated triwulan %s -> %s (%s - %s)", key, new_key, start_date, end_date)
    return Quarter(id=str(new_key), year=new_key.year, quarter=new_key.quarter,
                   start_date=start_date, end_date=end_date, is_active=False)


# Monthly periods

async def get_active_period(db: AsyncSession) -> Optional[AssessmentPeriod]:
    result = await db.execute(
        select(AssessmentPeriod)
        .where(AssessmentPeriod.is_active.is_(True))
        .order_by(AssessmentPeriod.year.desc(), AssessmentPeriod.month.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def require_period(db: AsyncSession, period_id: Optional[str]) -> AssessmentPeriod:
    """The given period, or the active one when no id is passed."""
    if period_id:
        period = await db.get(AssessmentPeriod, period_id)
        if not period:
            raise NotFoundError("Period not found")
        return period
    period = await get_active_period(db)
    if not period:
        raise BadRequestError("No active period found")
    return period


async def list_periods(db: AsyncSession) -> List[dict]:
    periods = (
        await db.execute(
            select(AssessmentPeriod).order_by(AssessmentPeriod.year.desc(), AssessmentPeriod.month.desc())
        )
    ).scalars().all()

    counts = await db.execute(
        select(
            AssessmentAssignment.period_id,
            func.count(AssessmentAssignment.id),
            func.sum(case((AssessmentAssignment.is_completed.is_(True), 1), else_=0)),
        ).group_by(AssessmentAssignment.period_id)
    )
    by_period = {period_id: (assigned, completed or 0) for period_id, assigned, completed in counts.all()}

    return [
        {
            "period": period,
            "assigned_count": by_period.get(period.id, (0, 0))[0],
            "completed_count": by_period.get(period.id, (0, 0))[1],
        }
        for period in periods
    ]


async def _deactivate_others(db: AsyncSession, keep_id: Optional[str] = None):
    stmt = update(AssessmentPeriod).where(AssessmentPeriod.is_active.is_(True))
    if keep_id:
        stmt = stmt.where(AssessmentPeriod.id != keep_id)
    await db.execute(stmt.values(is_active=False))


async def create_period(db: AsyncSession, month: int, year: int, start_date: date, end_date: date) -> AssessmentPeriod:
    if not 1 <= month <= 12:
        raise BadRequestError("month must be 1..12")
    if start_date >= end_date:
        raise BadRequestError("end_date must be after start_date")

    existing = await db.execute(
        select(AssessmentPeriod.id).where(AssessmentPeriod.year == year, AssessmentPeriod.month == month)
    )
    if existing.first() is not None:
        raise BadRequestError(f"Period {month}/{year} already exists")

    # the new period becomes the only active one
    await _deactivate_others(db)
    period = AssessmentPeriod(
        month=month, year=year, start_date=start_date, end_date=end_date, is_active=True, is_completed=False
    )
    db.add(period)
    await db.commit()
    await db.refresh(period)
    logger.info("Created and activated period %s/%s", month, year)
    return period


async def activate_period(db: AsyncSession, period_id: str) -> AssessmentPeriod:
    period = await db.get(AssessmentPeriod, period_id)
    if not period:
        raise NotFoundError("Period not found")
    await _deactivate_others(db, keep_id=period.id)
    period.is_active = True
    await db.commit()
    await db.refresh(period)
    logger.info("Activated period %s/%s", period.month, period.year)
    return period


async def complete_period(db: AsyncSession, period_id: str) -> AssessmentPeriod:
    period = await db.get(AssessmentPeriod, period_id)
    if not period:
        raise NotFoundError("Period not found")
    period.is_active = False
    period.is_completed = True
    await db.commit()
    await db.refresh(period)
    return period
