from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest
from fastapi import BackgroundTasks, HTTPException

from app.schemas.expense import ExpenseCreate
from app.services.cycle_services import start_cycle
from app.services.expense_services import (
    ORDER_EXPENSE_DATE,
    create_expense,
    delete_expense,
    get_expense_by_id,
    list_expenses,
)
from app.services.room_services import RoomContext
from conftest import add_expense


def ctx_for(user, room, other):
    return RoomContext(user=user, room=room, roommate=other)


async def test_expense_outside_a_cycle_is_unattributed(db, room, owner, roommate):
    tasks = BackgroundTasks()
    data = ExpenseCreate(amount=Decimal("120.5"), note="vegetables", expense_date=date(2026, 1, 10))

    expense = await create_expense(db, ctx_for(owner, room, roommate), data, tasks)

    assert expense.cycle_number is None
    assert expense.cycle_user_id is None
    assert expense.paid_by == owner.id
    assert expense.paid_by_name == "Asha"
    assert expense.category == "Food"

    await db.refresh(room)
    assert room.last_expense_at is not None

    assert len(tasks.tasks) == 1
    assert tasks.tasks[0].args == ([roommate.notify_token], "Asha added ₹120.50 for vegetables")


async def test_expense_is_stamped_with_running_cycle(db, room, owner, roommate):
    await start_cycle(db, room, roommate)
    data = ExpenseCreate(amount=Decimal("45"), note="bread", expense_date=date(2026, 1, 10))

    # the owner pays during the roommate's cycle; it still counts as the roommate's cycle
    expense = await create_expense(db, ctx_for(owner, room, roommate), data, BackgroundTasks())

    assert expense.cycle_number == 1
    assert expense.cycle_user_id == roommate.id


async def test_no_push_when_roommate_has_no_token(db, room, owner, roommate):
    roommate.notify_token = None
    await db.commit()
    tasks = BackgroundTasks()
    data = ExpenseCreate(amount=Decimal("10"), note="tea", expense_date=date(2026, 1, 10))

    await create_expense(db, ctx_for(owner, room, roommate), data, tasks)

    assert tasks.tasks == []


async def test_only_creator_can_delete(db, room, owner, roommate):
    expense = await add_expense(db, room, owner.id, 30)

    with pytest.raises(HTTPException) as exc:
        await delete_expense(db, room.id, roommate.id, expense.id)
    assert exc.value.status_code == 403

    assert await delete_expense(db, room.id, owner.id, expense.id) == {"status": "deleted"}
    with pytest.raises(HTTPException) as exc:
        await get_expense_by_id(db, room.id, expense.id)
    assert exc.value.status_code == 404


async def test_history_pages_through_every_expense_once(db, room, owner):
    start = datetime(2026, 1, 1, 8, 0)
    for i in range(11):
        # pairs share a timestamp so ties fall back to id order
        await add_expense(db, room, owner.id, i + 1, created_at=start + timedelta(hours=i // 2))

    seen = []
    sizes = []
    cursor = None
    for _ in range(3):
        page = await list_expenses(db, room.id, limit=4, cursor=cursor)
        sizes.append(len(page["items"]))
        seen.extend(e.id for e in page["items"])
        cursor = page["next_cursor"]

    assert sizes == [4, 4, 3]
    assert page["has_more"] is False
    assert len(seen) == len(set(seen)) == 11

    # newest first, ids descending within a shared timestamp
    expenses = [await get_expense_by_id(db, room.id, i) for i in seen]
    keys = [(e.created_at, e.id) for e in expenses]
    assert keys == sorted(keys, reverse=True)

    last = await list_expenses(db, room.id, limit=4, cursor=cursor)
    assert last["items"] == []
    assert last["next_cursor"] is None
    assert last["has_more"] is False


async def test_recent_orders_by_expense_date(db, room, owner, roommate):
    await add_expense(db, room, owner.id, 5, expense_date=date(2026, 1, 3), note="oldest")
    await add_expense(db, room, roommate.id, 6, expense_date=date(2026, 1, 9), note="newest")
    await add_expense(db, room, owner.id, 7, expense_date=date(2026, 1, 5), note="middle")

    page = await list_expenses(db, room.id, limit=2, order=ORDER_EXPENSE_DATE)

    assert [e.note for e in page["items"]] == ["newest", "middle"]
    assert page["has_more"] is True

    rest = await list_expenses(db, room.id, limit=2, cursor=page["next_cursor"], order=ORDER_EXPENSE_DATE)
    assert [e.note for e in rest["items"]] == ["oldest"]


async def test_next_page_survives_deleting_the_cursor_expense(db, room, owner):
    start = datetime(2026, 2, 1, 8, 0)
    for i in range(6):
        await add_expense(db, room, owner.id, i + 1, created_at=start + timedelta(minutes=i))

    first = await list_expenses(db, room.id, limit=3)
    anchor_id = first["items"][-1].id
    await delete_expense(db, room.id, owner.id, anchor_id)

    second = await list_expenses(db, room.id, limit=3, cursor=first["next_cursor"])

    first_ids = [e.id for e in first["items"]]
    second_ids = [e.id for e in second["items"]]
    assert len(second_ids) == 3
    assert not set(first_ids) & set(second_ids)
    assert all(e.created_at < start + timedelta(minutes=3) for e in second["items"])


@pytest.mark.parametrize("cursor", ["garbage", "2026-01-01T08:00:00", "not-a-date|4", "2026-01-01T08:00:00|x"])
async def test_malformed_cursor_is_rejected(db, room, cursor):
    with pytest.raises(HTTPException) as exc:
        await list_expenses(db, room.id, limit=4, cursor=cursor)

    assert exc.value.status_code == 400


def test_future_expense_date_is_rejected():
    with pytest.raises(ValueError):
        ExpenseCreate(amount=Decimal("5"), note="x", expense_date=date.today() + timedelta(days=2))


@pytest.mark.parametrize("amount", ["0", "-3"])
def test_amount_must_be_positive(amount):
    with pytest.raises(ValueError):
        ExpenseCreate(amount=Decimal(amount), note="x", expense_date=date(2026, 1, 1))


def test_blank_note_is_rejected():
    with pytest.raises(ValueError):
        ExpenseCreate(amount=Decimal("5"), note="   ", expense_date=date(2026, 1, 1))
