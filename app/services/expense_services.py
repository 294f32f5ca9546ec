import logging
from datetime import date, datetime
from fastapi import BackgroundTasks, HTTPException
from sqlalchemy import and_, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import aliased
from sqlalchemy.sql import func
from app.core.config import settings
from app.core.errors import write_guard
from app.core.utils import qround, to_decimal
from app.models.expense import Expense
from app.models.room import Room
from app.schemas.expense import ExpenseCreate
from app.services.cycle_services import is_cycle_active
from app.services.push_service import send_push
from app.services.room_services import RoomContext

logger = logging.getLogger(__name__)

ORDER_CREATED = "created_at"
ORDER_EXPENSE_DATE = "expense_date"

async def create_expense(db: AsyncSession, ctx: RoomContext, data: ExpenseCreate, background_tasks: BackgroundTasks):
    user, room = ctx.user, ctx.room
    cycle_active = is_cycle_active(room)

    # Attributed to whichever cycle is running right now; never reassigned
    expense = Expense(
        room_id=room.id,
        amount=data.amount,
        category=data.category,
        note=data.note,
        paid_by=user.id,
        paid_by_name=user.name,
        paid_by_email=user.email,
        cycle_number=room.cycle_number if cycle_active else None,
        cycle_user_id=room.active_user_id if cycle_active else None,
        expense_date=data.expense_date,
    )

    async with write_guard(db, "add expense"):
        db.add(expense)
        await db.execute(
            update(Room)
            .where(Room.id == room.id)
            .values(last_expense_at=func.now())
            .execution_options(synchronize_session=False)
        )
        await db.commit()
    await db.refresh(expense)

    logger.info("Room %s: expense %s of %s added by user %s", room.id, expense.id, expense.amount, user.id)

    if ctx.roommate and ctx.roommate.notify_token:
        amount = qround(to_decimal(expense.amount))
        background_tasks.add_task(
            send_push,
            [ctx.roommate.notify_token],
            f"{user.name} added {settings.CURRENCY_SYMBOL}{amount} for {expense.note}",
            data={"type": "expense", "roomId": room.id},
        )

    return expense

async def get_expense_by_id(db: AsyncSession, room_id: int, expense_id: int):
    q = select(Expense).where(Expense.id == expense_id, Expense.room_id == room_id)
    res = await db.execute(q)
    expense = res.scalar_one_or_none()

    if not expense:
        raise HTTPException(404, "Expense not found")

    return expense

async def delete_expense(db: AsyncSession, room_id: int, user_id: int, expense_id: int):
    expense = await get_expense_by_id(db, room_id, expense_id)

    # Authorization: only the creator can delete
    if expense.paid_by != user_id:
        raise HTTPException(403, "You cannot delete this expense")

    async with write_guard(db, "delete expense"):
        await db.delete(expense)
        await db.commit()

    return {"status": "deleted"}

def encode_cursor(expense: Expense, order: str) -> str:
    value = expense.expense_date if order == ORDER_EXPENSE_DATE else expense.created_at
    return f"{value.isoformat()}|{expense.id}"

def decode_cursor(cursor: str, order: str):
    """Returns (sort value, id) of the last expense of the previous page."""
    try:
        raw_value, raw_id = cursor.rsplit("|", 1)
        parse = date.fromisoformat if order == ORDER_EXPENSE_DATE else datetime.fromisoformat
        return parse(raw_value), int(raw_id)
    except ValueError:
        raise HTTPException(400, "Invalid cursor")

async def list_expenses(
    db: AsyncSession,
    room_id: int,
    limit: int,
    cursor: str | None = None,
    order: str = ORDER_CREATED
):
    """
    One page of the room's expenses, newest first. ``cursor`` carries the sort
    value and id of the last expense of the previous page, so the next page
    still resolves after that expense is deleted.
    """
    sort_col = Expense.expense_date if order == ORDER_EXPENSE_DATE else Expense.created_at

    q = select(Expense).where(Expense.room_id == room_id)

    if cursor is not None:
        anchor_value, anchor_id = decode_cursor(cursor, order)

        # the stored value wins while the anchor row exists; it matches the column format exactly
        anchor = aliased(Expense)
        stored_value = (
            select(getattr(anchor, sort_col.key))
            .where(anchor.id == anchor_id)
            .scalar_subquery()
        )
        anchor_key = func.coalesce(stored_value, anchor_value)

        q = q.where(
            or_(
                sort_col < anchor_key,
                and_(sort_col == anchor_key, Expense.id < anchor_id)
            )
        )

    q = q.order_by(sort_col.desc(), Expense.id.desc()).limit(limit)

    res = await db.execute(q)
    items = res.scalars().all()

    return {
        "items": items,
        "next_cursor": encode_cursor(items[-1], order) if items else None,
        "has_more": len(items) == limit,
    }
