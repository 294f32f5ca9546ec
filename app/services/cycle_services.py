import logging
from fastapi import BackgroundTasks, HTTPException
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.sql import func
from app.core.config import settings
from app.core.errors import write_guard
from app.core.utils import budget_progress, qround, split_totals, to_decimal
from app.models.expense import Expense
from app.models.room import Room, ROOM_ACTIVE
from app.models.user import User
from app.services.push_service import send_push
from app.services.user_service import get_user_by_id

logger = logging.getLogger(__name__)

def is_cycle_active(room: Room) -> bool:
    return room.active_user_id is not None and room.cycle_start_at is not None

def can_start_cycle(room: Room) -> bool:
    return room.active_user_id is None and room.cycle_start_at is None

def is_my_turn(room: Room, user_id: int) -> bool:
    return is_cycle_active(room) and room.active_user_id == user_id

def next_cycle_owner(room: Room):
    """Turns alternate strictly between the owner and the roommate."""
    if room.active_user_id == room.owner_id:
        return room.roommate_id, room.roommate_email
    return room.owner_id, room.owner_email

async def get_cycle_totals(db: AsyncSession, room: Room):
    """
    Per-payer sums for the room's running cycle, read straight from the
    expense log. The cycle window comes from the stored room row, so the
    totals always match the cycle as persisted.
    """
    q = (
        select(
            Expense.paid_by,
            func.coalesce(func.sum(Expense.amount), 0)
        )
        .join(Room, Room.id == Expense.room_id)
        .where(
            Room.id == room.id,
            Room.active_user_id.is_not(None),
            Room.cycle_start_at.is_not(None),
            Expense.cycle_user_id == Room.active_user_id,
            Expense.created_at >= Room.cycle_start_at
        )
        .group_by(Expense.paid_by)
    )
    res = await db.execute(q)
    return res.all()

async def compute_cycle_spend(db: AsyncSession, room: Room, user_id: int):
    rows = await get_cycle_totals(db, room) if is_cycle_active(room) else []
    mine, roommate = split_totals(rows, user_id)
    target = qround(to_decimal(room.target_amount))

    return {
        "cycle_active": is_cycle_active(room),
        "cycle_number": room.cycle_number or 0,
        "active_user_id": room.active_user_id,
        "cycle_start_at": room.cycle_start_at,
        "mine": mine,
        "roommate": roommate,
        "target": target,
        **budget_progress(target, mine),
    }

async def start_cycle(db: AsyncSession, room: Room, user: User):
    if not can_start_cycle(room):
        raise HTTPException(400, "A cycle is already running in this room")

    stmt = (
        update(Room)
        .where(
            Room.id == room.id,
            Room.status == ROOM_ACTIVE,
            Room.active_user_id.is_(None),
            Room.cycle_start_at.is_(None)
        )
        .values(
            active_user_id=user.id,
            active_user_email=user.email,
            cycle_start_at=func.now(),
            cycle_number=Room.cycle_number + 1
        )
        .execution_options(synchronize_session=False)
    )

    async with write_guard(db, "start cycle"):
        res = await db.execute(stmt)
        if res.rowcount != 1:
            await db.rollback()
            raise HTTPException(409, "Your roommate already started a cycle, refresh the room")
        await db.commit()

    await db.refresh(room)
    logger.info("Room %s: cycle %s started by user %s", room.id, room.cycle_number, user.id)
    return room

async def complete_cycle(db: AsyncSession, room: Room, user: User, background_tasks: BackgroundTasks):
    if not is_cycle_active(room):
        raise HTTPException(400, "No active cycle to complete")

    if not is_my_turn(room, user.id):
        raise HTTPException(403, "Only the roommate on duty can complete the cycle")

    rows = await get_cycle_totals(db, room)
    spent, _ = split_totals(rows, room.active_user_id)
    target = to_decimal(room.target_amount)

    if target > 0 and spent < target:
        shortfall = qround(target - spent)
        raise HTTPException(400, {
            "message": f"You need to spend {settings.CURRENCY_SYMBOL}{shortfall} more to complete the cycle",
            "shortfall": str(shortfall),
            "spent": str(spent),
            "target": str(qround(target)),
        })

    next_id, next_email = next_cycle_owner(room)

    # Only lands if nobody completed or restarted the cycle since it was read
    stmt = (
        update(Room)
        .where(
            Room.id == room.id,
            Room.cycle_number == room.cycle_number,
            Room.active_user_id == room.active_user_id
        )
        .values(
            active_user_id=next_id,
            active_user_email=next_email,
            cycle_start_at=func.now(),
            cycle_number=Room.cycle_number + 1
        )
        .execution_options(synchronize_session=False)
    )

    async with write_guard(db, "complete cycle"):
        res = await db.execute(stmt)
        if res.rowcount != 1:
            await db.rollback()
            raise HTTPException(409, "The cycle was already completed, refresh the room")
        await db.commit()

    await db.refresh(room)
    logger.info("Room %s: cycle %s now owned by user %s", room.id, room.cycle_number, next_id)

    next_owner = await get_user_by_id(db, next_id)
    if next_owner and next_owner.notify_token:
        background_tasks.add_task(
            send_push,
            [next_owner.notify_token],
            "It is your turn to pay",
            "Cycle completed 🎉",
            {"type": "cycle", "roomId": room.id},
        )

    return room

async def cycle_history(db: AsyncSession, room: Room, user_id: int, limit: int | None = None):
    """Mine/roommate/total for the most recent cycles that have expenses."""
    limit = limit or settings.CYCLE_HISTORY_SIZE

    recent_cycles = (
        select(Expense.cycle_number)
        .where(Expense.room_id == room.id, Expense.cycle_number.is_not(None))
        .group_by(Expense.cycle_number)
        .order_by(Expense.cycle_number.desc())
        .limit(limit)
    )

    q = (
        select(
            Expense.cycle_number,
            Expense.paid_by,
            func.coalesce(func.sum(Expense.amount), 0)
        )
        .where(
            Expense.room_id == room.id,
            Expense.cycle_number.in_(recent_cycles)
        )
        .group_by(Expense.cycle_number, Expense.paid_by)
        .order_by(Expense.cycle_number.desc())
    )
    res = await db.execute(q)

    per_cycle = {}
    for cycle_number, paid_by, amount in res.all():
        per_cycle.setdefault(cycle_number, []).append((paid_by, amount))

    summary = []
    for cycle_number, rows in per_cycle.items():
        mine, roommate = split_totals(rows, user_id)
        summary.append({
            "cycle_number": cycle_number,
            "mine": mine,
            "roommate": roommate,
            "total": qround(mine + roommate),
        })

    return summary
