from datetime import date

import pytest
from sqlalchemy import select, func

from feedback360.core.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from feedback360.models.notification import Notification
from feedback360.models.pin import EmployeePin, WeeklyPinAllowance
from feedback360.services import pin_periods, pins, roles
from feedback360.services.pins import current_week

MONDAY = date(2025, 7, 14)


def test_current_week_uses_iso_week():
    week = current_week(MONDAY)
    assert (week.week_number, week.iso_year, week.year, week.month) == (29, 2025, 2025, 7)


def test_current_week_keeps_iso_year_across_new_year():
    week = current_week(date(2024, 12, 30))
    assert (week.week_number, week.iso_year, week.year, week.month) == (1, 2025, 2024, 12)


async def test_fifth_pin_in_a_week_is_rejected(db_session, make_user):
    giver_id = (await make_user()).id
    receiver_ids = [(await make_user()).id for _ in range(5)]

    for receiver_id in receiver_ids[:4]:
        await pins.give_pin(db_session, giver_id, receiver_id, today=MONDAY)

    with pytest.raises(BadRequestError) as exc:
        await pins.give_pin(db_session, giver_id, receiver_ids[4], today=MONDAY)
    assert "sudah menggunakan semua pin" in exc.value.message

    allowance = await pins.get_allowance(db_session, giver_id, today=MONDAY)
    assert (allowance.pins_remaining, allowance.pins_used) == (0, 4)


async def test_duplicate_pin_in_same_week_rejected(db_session, make_user):
    giver_id = (await make_user()).id
    receiver_id = (await make_user()).id

    await pins.give_pin(db_session, giver_id, receiver_id, today=MONDAY)
    with pytest.raises(ConflictError):
        await pins.give_pin(db_session, giver_id, receiver_id, today=date(2025, 7, 17))

    count = (await db_session.execute(select(func.count(EmployeePin.id)))).scalar_one()
    assert count == 1
    allowance = await pins.get_allowance(db_session, giver_id, today=MONDAY)
    assert allowance.pins_remaining == 3


async def test_same_receiver_allowed_next_week(db_session, make_user):
    giver = await make_user()
    receiver = await make_user()

    await pins.give_pin(db_session, giver.id, receiver.id, today=MONDAY)
    await pins.give_pin(db_session, giver.id, receiver.id, today=date(2025, 7, 21))

    count = (await db_session.execute(select(func.count(EmployeePin.id)))).scalar_one()
    assert count == 2


async def test_cannot_pin_yourself(db_session, make_user):
    giver = await make_user()
    with pytest.raises(BadRequestError):
        await pins.give_pin(db_session, giver.id, giver.id, today=MONDAY)


async def test_receiver_is_notified(db_session, make_user):
    giver = await make_user(full_name="Ani")
    receiver = await make_user()

    await pins.give_pin(db_session, giver.id, receiver.id, today=MONDAY)

    notes = (await db_session.execute(
        select(Notification).where(Notification.user_id == receiver.id)
    )).scalars().all()
    assert len(notes) == 1
    assert notes[0].type == "pin"
    assert "Ani" in notes[0].message


async def test_cancel_restores_allowance(db_session, make_user):
    giver = await make_user()
    other = await make_user()
    receiver = await make_user()
    result = await pins.give_pin(db_session, giver.id, receiver.id, today=MONDAY)

    with pytest.raises(ForbiddenError):
        await pins.cancel_pin(db_session, result["pin_id"], other.id)

    allowance = await pins.cancel_pin(db_session, result["pin_id"], giver.id)
    assert (allowance.pins_remaining, allowance.pins_used) == (4, 0)


async def test_rankings_exclude_admins(db_session, make_user):
    promoted = await make_user(full_name="Promoted")
    star = await make_user(full_name="Star")
    runner_up = await make_user(full_name="Runner")
    givers = [await make_user() for _ in range(2)]

    for giver in givers:
        await pins.give_pin(db_session, giver.id, star.id, today=MONDAY)
        await pins.give_pin(db_session, giver.id, promoted.id, today=MONDAY)
    await pins.give_pin(db_session, givers[0].id, runner_up.id, today=MONDAY)
    # pins received before becoming admin no longer rank
    await roles.set_user_role(db_session, promoted.id, "admin")

    ranking = await pins.get_pin_rankings(db_session, period="2025-07")
    assert [(r["full_name"], r["total_pins"]) for r in ranking] == [("Star", 2), ("Runner", 1)]
    assert ranking[0]["rank"] == 1

    assert await pins.get_pin_rankings(db_session, period="2025-06") == []
    with pytest.raises(BadRequestError):
        await pins.get_pin_rankings(db_session, period="last-year")


async def test_statistics(db_session, make_user):
    giver = await make_user()
    receiver = await make_user()
    await pins.give_pin(db_session, giver.id, receiver.id, today=MONDAY)

    stats = await pins.get_pin_statistics(db_session, today=MONDAY)
    assert stats == {"total_pins": 1, "this_week_pins": 1, "this_month_pins": 1}


async def test_admin_cannot_receive_pins(db_session, make_user):
    giver = await make_user()
    admin = await make_user(role="admin")

    with pytest.raises(BadRequestError) as exc:
        await pins.give_pin(db_session, giver.id, admin.id, today=MONDAY)
    assert "Admin" in exc.value.message

    allowance = await pins.get_allowance(db_session, giver.id, today=MONDAY)
    assert allowance.pins_used == 0


async def test_pin_on_iso_week_boundary_counts_in_its_calendar_month(db_session, make_user):
    giver = await make_user()
    receiver = await make_user(full_name="Desi")
    new_years_eve_week = date(2024, 12, 30)

    await pins.give_pin(db_session, giver.id, receiver.id, today=new_years_eve_week)

    pin = (await db_session.execute(select(EmployeePin))).scalar_one()
    assert (pin.week_number, pin.iso_year, pin.year, pin.month) == (1, 2025, 2024, 12)
    assert pin.given_date == new_years_eve_week

    december = await pins.get_pin_rankings(db_session, period="2024-12")
    assert [(r["full_name"], r["total_pins"]) for r in december] == [("Desi", 1)]
    assert await pins.get_pin_rankings(db_session, period="2025-12") == []

    stats = await pins.get_pin_statistics(db_session, today=new_years_eve_week)
    assert stats == {"total_pins": 1, "this_week_pins": 1, "this_month_pins": 1}
    # same ISO week, next calendar month
    stats = await pins.get_pin_statistics(db_session, today=date(2025, 1, 2))
    assert stats == {"total_pins": 1, "this_week_pins": 1, "this_month_pins": 0}


async def test_concurrently_created_allowance_is_retried(db_session, make_user, monkeypatch):
    giver = await make_user()
    receiver = await make_user()
    original = pins._load_allowance
    calls = []

    async def racing_load(db, user_id, week, lock=False):
        calls.append(user_id)
        if len(calls) == 1:
            # two requests insert the week's row at once
            for _ in range(2):
                db.add(WeeklyPinAllowance(
                    user_id=user_id,
                    week_number=week.week_number,
                    iso_year=week.iso_year,
                    pins_remaining=4,
                    pins_used=0,
                ))
            await db.flush()
        return await original(db, user_id, week, lock=lock)

    monkeypatch.setattr(pins, "_load_allowance", racing_load)
    result = await pins.give_pin(db_session, giver.id, receiver.id, today=MONDAY)

    assert len(calls) == 2
    assert (result["pins_remaining"], result["pins_used"]) == (3, 1)
    count = (await db_session.execute(select(func.count(WeeklyPinAllowance.id)))).scalar_one()
    assert count == 1


async def test_pins_allowed_any_day_without_pin_periods(db_session, make_user):
    giver = await make_user()
    receiver = await make_user()

    assert await pin_periods.get_active_pin_period(db_session) is None
    result = await pins.give_pin(db_session, giver.id, receiver.id, today=MONDAY)
    assert result["pins_used"] == 1


async def test_pins_only_inside_active_pin_period(db_session, make_user):
    giver = await make_user()
    receiver = await make_user()
    period = await pin_periods.create_pin_period(
        db_session, date(2025, 8, 1), date(2025, 8, 31), month=8, year=2025
    )
    period_id = period.id

    with pytest.raises(BadRequestError) as exc:
        await pins.give_pin(db_session, giver.id, receiver.id, today=MONDAY)
    assert exc.value.message == "Out of active period range"

    await pins.give_pin(db_session, giver.id, receiver.id, today=date(2025, 8, 4))

    await pin_periods.update_pin_period(db_session, period_id, {"is_active": False})
    with pytest.raises(BadRequestError) as exc:
        await pins.give_pin(db_session, giver.id, receiver.id, today=date(2025, 8, 11))
    assert exc.value.message == "No active pin period"


async def test_new_pin_period_deactivates_the_previous_one(db_session):
    july = await pin_periods.create_pin_period(db_session, date(2025, 7, 1), date(2025, 7, 31), month=7, year=2025)
    july_id = july.id
    august = await pin_periods.create_pin_period(db_session, date(2025, 8, 1), date(2025, 8, 31), month=8, year=2025)

    active = await pin_periods.list_pin_periods(db_session, active_only=True)
    assert [p.id for p in active] == [august.id]
    assert (await pin_periods.get_active_pin_period(db_session)).id == august.id

    await pin_periods.update_pin_period(db_session, july_id, {"is_active": True})
    assert (await pin_periods.get_active_pin_period(db_session)).id == july_id

    with pytest.raises(BadRequestError):
        await pin_periods.create_pin_period(db_session, date(2025, 9, 30), date(2025, 9, 1))


async def test_reset_pin_period_deletes_pins_and_recounts_allowances(db_session, make_user):
    giver = await make_user()
    receivers = [await make_user() for _ in range(3)]
    giver_id = giver.id
    # Mon 28 Jul and Fri 1 Aug share ISO week 31
    await pins.give_pin(db_session, giver_id, receivers[0].id, today=date(2025, 7, 28))
    await pins.give_pin(db_session, giver_id, receivers[1].id, today=date(2025, 8, 1))
    await pins.give_pin(db_session, giver_id, receivers[2].id, today=date(2025, 8, 5))

    august = await pin_periods.create_pin_period(db_session, date(2025, 8, 1), date(2025, 8, 31), month=8, year=2025)
    result = await pin_periods.reset_pin_period(db_session, august.id)

    assert result == {"pins_deleted": 2, "allowances_reset": 2}
    remaining = (await db_session.execute(select(EmployeePin.given_date))).scalars().all()
    assert remaining == [date(2025, 7, 28)]

    week_31 = await pins.get_allowance(db_session, giver_id, today=date(2025, 7, 28))
    assert (week_31.pins_used, week_31.pins_remaining) == (1, 3)
    week_32 = await pins.get_allowance(db_session, giver_id, today=date(2025, 8, 5))
    assert (week_32.pins_used, week_32.pins_remaining) == (0, 4)


async def test_deleting_unknown_pin_period(db_session):
    with pytest.raises(NotFoundError):
        await pin_periods.delete_pin_period(db_session, "missing")
