# feedback360/services/pins.py
"""Weekly pin allowance and pin recognition."""
import logging
from datetime import date
from typing import List, NamedTuple, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.config import settings
from feedback360.core.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from feedback360.models.pin import EmployeePin, WeeklyPinAllowance
from feedback360.models.profile import Profile
from feedback360.services.notifications import create_notification
from feedback360.services.pin_periods import ensure_pin_window
from feedback360.services.roles import get_role_user_ids

logger = logging.getLogger(__name__)

NO_PINS_LEFT = "Anda sudah menggunakan semua pin minggu ini"
ALREADY_PINNED = "Anda sudah memberikan pin kepada user ini minggu ini"


class PinWeek(NamedTuple):
    week_number: int
    iso_year: int
    year: int
    month: int
    day: date


def current_week(day: Optional[date] = None) -> PinWeek:
    """ISO week of ``day`` plus its calendar year and month.

    Weeks are keyed by the ISO year so a week spanning New Year stays whole;
    monthly reports use the calendar year.
    """
    day = day or date.today()
    iso_year, iso_week, _ = day.isocalendar()
    return PinWeek(week_number=iso_week, iso_year=iso_year, year=day.year, month=day.month, day=day)


def _violates(exc: IntegrityError, table: str, constraint: str) -> bool:
    # postgres names the constraint, sqlite lists the table's columns
    message = str(exc.orig)
    return constraint in message or f"{table}." in message


async def _load_allowance(db: AsyncSession, user_id: str, week: PinWeek, lock: bool = False) -> WeeklyPinAllowance:
    stmt = select(WeeklyPinAllowance).where(
        WeeklyPinAllowance.user_id == user_id,
        WeeklyPinAllowance.week_number == week.week_number,
        WeeklyPinAllowance.iso_year == week.iso_year,
    )
    if lock:
        stmt = stmt.with_for_update()
    allowance = (await db.execute(stmt)).scalar_one_or_none()
    if allowance is None:
        allowance = WeeklyPinAllowance(
            user_id=user_id,
            week_number=week.week_number,
            iso_year=week.iso_year,
            pins_remaining=settings.PIN_WEEKLY_LIMIT,
            pins_used=0,
        )
        db.add(allowance)
        await db.flush()
    return allowance


async def get_allowance(db: AsyncSession, user_id: str, today: Optional[date] = None) -> WeeklyPinAllowance:
    allowance = await _load_allowance(db, user_id, current_week(today))
    await db.commit()
    return allowance


async def _record_pin(db: AsyncSession, giver_id: str, receiver_id: str, week: PinWeek) -> dict:
    allowance = await _load_allowance(db, giver_id, week, lock=True)
    if allowance.pins_remaining <= 0:
        raise BadRequestError(NO_PINS_LEFT)

    duplicate = await db.execute(
        select(EmployeePin.id).where(
            EmployeePin.giver_id == giver_id,
            EmployeePin.receiver_id == receiver_id,
            EmployeePin.week_number == week.week_number,
            EmployeePin.iso_year == week.iso_year,
        )
    )
    if duplicate.first() is not None:
        raise ConflictError(ALREADY_PINNED)

    pin = EmployeePin(
        giver_id=giver_id,
        receiver_id=receiver_id,
        week_number=week.week_number,
        iso_year=week.iso_year,
        year=week.year,
        month=week.month,
        given_date=week.day,
    )
    db.add(pin)
    allowance.pins_remaining -= 1
    allowance.pins_used += 1

    giver_name = (await db.execute(select(Profile.full_name).where(Profile.id == giver_id))).scalar_one_or_none()
    await create_notification(
        db,
        user_id=receiver_id,
        title="Anda menerima pin!",
        message=f"{giver_name or 'Seseorang'} memberikan pin penghargaan kepada Anda",
        type="pin",
        action_url="/pins",
        action_label="Lihat pin",
        commit=False,
    )
    await db.commit()
    return {
        "pin_id": pin.id,
        "pins_remaining": allowance.pins_remaining,
        "pins_used": allowance.pins_used,
    }


async def give_pin(db: AsyncSession, giver_id: str, receiver_id: str, today: Optional[date] = None) -> dict:
    if not receiver_id:
        raise BadRequestError("receiver_id required")
    if receiver_id == giver_id:
        raise BadRequestError("Tidak dapat memberikan pin kepada diri sendiri")
    if not await db.get(Profile, receiver_id):
        raise NotFoundError("Receiver not found")
    if receiver_id in (await get_role_user_ids(db)).admin_ids:
        raise BadRequestError("Admin tidak dapat menerima pin")

    week = current_week(today)
    await ensure_pin_window(db, week.day)

    for attempt in (1, 2):
        try:
            result = await _record_pin(db, giver_id, receiver_id, week)
            break
        except IntegrityError as exc:
            await db.rollback()
            if attempt == 1 and _violates(exc, "weekly_pin_allowance", "uq_allowance_user_week"):
                # another request created this week's allowance row first; load it and try again
                logger.info("Allowance for %s created concurrently, retrying", giver_id)
                continue
            if _violates(exc, "employee_pins", "uq_pin_giver_receiver_week"):
                raise ConflictError(ALREADY_PINNED)
            raise
        except Exception:
            await db.rollback()
            raise

    logger.info("Pin given %s -> %s (week %s/%s)", giver_id, receiver_id, week.week_number, week.iso_year)
    return result


async def cancel_pin(db: AsyncSession, pin_id: str, user_id: str) -> WeeklyPinAllowance:
    pin = await db.get(EmployeePin, pin_id)
    if not pin:
        raise NotFoundError("Pin not found")
    if pin.giver_id != user_id:
        raise ForbiddenError("Only the giver can cancel a pin")

    week = PinWeek(pin.week_number, pin.iso_year, pin.year, pin.month, pin.given_date)
    try:
        allowance = await _load_allowance(db, user_id, week, lock=True)
        await db.delete(pin)
        allowance.pins_used = max(0, allowance.pins_used - 1)
        allowance.pins_remaining = min(settings.PIN_WEEKLY_LIMIT, allowance.pins_remaining + 1)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info("Pin %s cancelled by %s", pin_id, user_id)
    return allowance


async def get_pin_history(db: AsyncSession, user_id: str, limit: int = 20) -> List[dict]:
    stmt = (
        select(EmployeePin, Profile)
        .join(Profile, Profile.id == EmployeePin.receiver_id)
        .where(EmployeePin.giver_id == user_id)
        .order_by(EmployeePin.given_date.desc(), EmployeePin.given_at.desc())
        .limit(limit)
    )
    return [
        {
            "id": pin.id,
            "receiver_id": pin.receiver_id,
            "receiver_name": receiver.full_name,
            "week_number": pin.week_number,
            "iso_year": pin.iso_year,
            "year": pin.year,
            "month": pin.month,
            "given_date": pin.given_date,
            "given_at": pin.given_at,
        }
        for pin, receiver in (await db.execute(stmt)).all()
    ]


def _period_filter(stmt, period: str, today: Optional[date]):
    if period == "all":
        return stmt
    if period == "week":
        week = current_week(today)
        return stmt.where(EmployeePin.week_number == week.week_number, EmployeePin.iso_year == week.iso_year)
    try:
        year, month = (int(part) for part in period.split("-"))
    except ValueError:
        raise BadRequestError("period must be 'week', 'all' or YYYY-MM")
    if not 1 <= month <= 12:
        raise BadRequestError("period must be 'week', 'all' or YYYY-MM")
    return stmt.where(EmployeePin.year == year, EmployeePin.month == month)


async def get_pin_rankings(
    db: AsyncSession, limit: int = 10, period: str = "all", today: Optional[date] = None
) -> List[dict]:
    roles = await get_role_user_ids(db)
    total = func.count(EmployeePin.id).label("total_pins")
    stmt = (
        select(Profile.id, Profile.full_name, Profile.avatar_url, total)
        .join(EmployeePin, EmployeePin.receiver_id == Profile.id)
        .group_by(Profile.id, Profile.full_name, Profile.avatar_url)
        .order_by(total.desc(), Profile.full_name)
    )
    if roles.admin_ids:
        stmt = stmt.where(Profile.id.notin_(sorted(roles.admin_ids)))
    stmt = _period_filter(stmt, period, today).limit(limit)

    return [
        {"rank": rank, "user_id": user_id, "full_name": name, "avatar_url": avatar, "total_pins": count}
        for rank, (user_id, name, avatar, count) in enumerate((await db.execute(stmt)).all(), start=1)
    ]


async def get_pin_statistics(db: AsyncSession, today: Optional[date] = None) -> dict:
    week = current_week(today)

    async def count(*criteria):
        return (await db.execute(select(func.count(EmployeePin.id)).where(*criteria))).scalar_one()

    return {
        "total_pins": await count(),
        "this_week_pins": await count(EmployeePin.week_number == week.week_number, EmployeePin.iso_year == week.iso_year),
        "this_month_pins": await count(EmployeePin.month == week.month, EmployeePin.year == week.year),
    }


async def get_participants(db: AsyncSession, exclude_id: Optional[str] = None) -> List[Profile]:
    """Profiles that can receive pins: everyone but admins."""
    roles = await get_role_user_ids(db)
    stmt = select(Profile).order_by(Profile.full_name)
    excluded = set(roles.admin_ids)
    if exclude_id:
        excluded.add(exclude_id)
    if excluded:
        stmt = stmt.where(Profile.id.notin_(sorted(excluded)))
    return list((await db.execute(stmt)).scalars().all())
