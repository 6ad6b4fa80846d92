# feedback360/services/pin_periods.py
"""Pin periods: the date windows in which pins can be given.

Pin periods are optional. Until an admin defines one, pins can be given any
day; afterwards only inside the active period.
"""
import logging
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.config import settings
from feedback360.core.errors import BadRequestError, NotFoundError
from feedback360.models.pin import EmployeePin, PinPeriod, WeeklyPinAllowance

logger = logging.getLogger(__name__)

PIN_PERIOD_FIELDS = ("year", "month", "start_date", "end_date", "is_active", "is_completed")


async def list_pin_periods(db: AsyncSession, active_only: bool = False) -> List[PinPeriod]:
    if active_only:
        active = await get_active_pin_period(db)
        return [active] if active else []
    result = await db.execute(
        select(PinPeriod).order_by(PinPeriod.year.desc(), PinPeriod.month.desc(), PinPeriod.start_date.desc())
    )
    return list(result.scalars().all())


async def get_active_pin_period(db: AsyncSession) -> Optional[PinPeriod]:
    result = await db.execute(
        select(PinPeriod).where(PinPeriod.is_active.is_(True)).order_by(PinPeriod.start_date.desc()).limit(1)
    )
    return result.scalar_one_or_none()


async def _get_or_404(db: AsyncSession, period_id: str) -> PinPeriod:
    period = await db.get(PinPeriod, period_id)
    if not period:
        raise NotFoundError("Pin period tidak ditemukan")
    return period


def _validate(start_date: date, end_date: date, month: Optional[int]) -> None:
    if end_date < start_date:
        raise BadRequestError("end_date must not be before start_date")
    if month is not None and not 1 <= month <= 12:
        raise BadRequestError("month must be 1..12")


async def _deactivate_others(db: AsyncSession, keep_id: Optional[str] = None) -> None:
    stmt = update(PinPeriod).where(PinPeriod.is_active.is_(True))
    if keep_id:
        stmt = stmt.where(PinPeriod.id != keep_id)
    await db.execute(stmt.values(is_active=False))


async def create_pin_period(
    db: AsyncSession,
    start_date: date,
    end_date: date,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> PinPeriod:
    _validate(start_date, end_date, month)
    try:
        # the new period becomes the only active one
        await _deactivate_others(db)
        period = PinPeriod(
            year=year, month=month, start_date=start_date, end_date=end_date, is_active=True, is_completed=False
        )
        db.add(period)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    await db.refresh(period)
    logger.info("Created pin period %s (%s - %s)", period.id, start_date, end_date)
    return period


async def update_pin_period(db: AsyncSession, period_id: str, updates: dict) -> PinPeriod:
    period = await _get_or_404(db, period_id)
    for key, value in updates.items():
        if key in PIN_PERIOD_FIELDS and value is not None:
            setattr(period, key, value)
    _validate(period.start_date, period.end_date, period.month)

    try:
        if updates.get("is_active"):
            await _deactivate_others(db, keep_id=period.id)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    await db.refresh(period)
    return period


async def delete_pin_period(db: AsyncSession, period_id: str) -> None:
    period = await _get_or_404(db, period_id)
    await db.delete(period)
    await db.commit()
    logger.info("Deleted pin period %s", period_id)


async def ensure_pin_window(db: AsyncSession, day: date) -> None:
    """Raise unless ``day`` may be used for giving pins."""
    if (await db.execute(select(PinPeriod.id).limit(1))).first() is None:
        return
    active = await get_active_pin_period(db)
    if active is None:
        raise BadRequestError("No active pin period")
    if not active.start_date <= day <= active.end_date:
        raise BadRequestError("Out of active period range")


def _weeks_between(start_date: date, end_date: date):
    weeks = set()
    day = start_date
    while day <= end_date:
        iso_year, iso_week, _ = day.isocalendar()
        weeks.add((iso_week, iso_year))
        day += timedelta(days=1)
    return weeks


async def reset_pin_period(db: AsyncSession, period_id: str) -> dict:
    """Delete every pin given inside the period and recount the affected allowances.

    Allowances of weeks straddling the period boundary keep the pins given
    outside the period.
    """
    period = await _get_or_404(db, period_id)
    weeks = _weeks_between(period.start_date, period.end_date)
    in_period = (EmployeePin.given_date >= period.start_date, EmployeePin.given_date <= period.end_date)

    try:
        pins_deleted = (await db.execute(select(func.count(EmployeePin.id)).where(*in_period))).scalar_one()
        await db.execute(delete(EmployeePin).where(*in_period))

        candidates = await db.execute(
            select(WeeklyPinAllowance).where(
                WeeklyPinAllowance.week_number.in_(sorted({week for week, _ in weeks})),
                WeeklyPinAllowance.iso_year.in_(sorted({year for _, year in weeks})),
            )
        )
        allowances = [a for a in candidates.scalars().all() if (a.week_number, a.iso_year) in weeks]
        for allowance in allowances:
            used = (
                await db.execute(
                    select(func.count(EmployeePin.id)).where(
                        EmployeePin.giver_id == allowance.user_id,
                        EmployeePin.week_number == allowance.week_number,
                        EmployeePin.iso_year == allowance.iso_year,
                    )
                )
            ).scalar_one()
            allowance.pins_used = used
            allowance.pins_remaining = max(0, settings.PIN_WEEKLY_LIMIT - used)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Reset pin period %s: %d pins deleted, %d allowances reset", period_id, pins_deleted, len(allowances))
    return {"pins_deleted": pins_deleted, "allowances_reset": len(allowances)}
