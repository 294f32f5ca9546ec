from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.core.config import settings
from app.core.dependencies import get_room_context
from app.schemas.expense import ExpenseCreate, ExpenseOut, ExpensePage
from app.services.room_services import RoomContext
from app.services.expense_services import (
    create_expense, delete_expense, get_expense_by_id, list_expenses, ORDER_CREATED, ORDER_EXPENSE_DATE
)

router = APIRouter()

@router.post("/", response_model=ExpenseOut)
async def add_expense(
    data: ExpenseCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    ctx: RoomContext = Depends(get_room_context)
):
    return await create_expense(db, ctx, data, background_tasks)

@router.get("/", response_model=ExpensePage, description="full expense history, newest first")
async def expense_history(
    cursor: str | None = None,
    limit: int = Query(settings.EXPENSE_PAGE_SIZE, ge=1, le=settings.EXPENSE_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
    ctx: RoomContext = Depends(get_room_context)
):
    return await list_expenses(db, ctx.room.id, limit=limit, cursor=cursor, order=ORDER_CREATED)

@router.get("/recent", response_model=ExpensePage, description="recent activity by expense date")
async def recent_expenses(
    cursor: str | None = None,
    db: AsyncSession = Depends(get_db),
    ctx: RoomContext = Depends(get_room_context)
):
    return await list_expenses(
        db, ctx.room.id, limit=settings.RECENT_PAGE_SIZE, cursor=cursor, order=ORDER_EXPENSE_DATE
    )

@router.get("/{expense_id}", response_model=ExpenseOut)
async def fetch(
    expense_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: RoomContext = Depends(get_room_context)
):
    return await get_expense_by_id(db, ctx.room.id, expense_id)

@router.delete("/{expense_id}")
async def del_expense(
    expense_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: RoomContext = Depends(get_room_context)
):
    return await delete_expense(db, ctx.room.id, user_id=ctx.user.id, expense_id=expense_id)
