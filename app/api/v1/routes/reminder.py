from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.core.dependencies import get_current_user, get_reminder_scheduler
from app.schemas.reminder import ReminderCreate, ReminderOut, ReminderToggle
from app.services.reminder_services import (
    list_reminders, create_reminder, update_reminder, toggle_reminder, delete_reminder
)

router = APIRouter()

@router.get("/", response_model=list[ReminderOut])
async def my_reminders(db: AsyncSession = Depends(get_db), user = Depends(get_current_user)):
    return await list_reminders(db, user.id)

@router.post("/", response_model=ReminderOut)
async def add_reminder(
    data: ReminderCreate,
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user),
    scheduler = Depends(get_reminder_scheduler)
):
    return await create_reminder(db, user, data, scheduler)

@router.put("/{reminder_id}", response_model=ReminderOut)
async def edit_reminder(
    reminder_id: int,
    data: ReminderCreate,
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user),
    scheduler = Depends(get_reminder_scheduler)
):
    return await update_reminder(db, user, reminder_id, data, scheduler)

@router.post("/{reminder_id}/toggle", response_model=ReminderOut)
async def switch_reminder(
    reminder_id: int,
    data: ReminderToggle,
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user),
    scheduler = Depends(get_reminder_scheduler)
):
    return await toggle_reminder(db, user, reminder_id, data.is_active, scheduler)

@router.delete("/{reminder_id}")
async def remove_reminder(
    reminder_id: int,
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user),
    scheduler = Depends(get_reminder_scheduler)
):
    return await delete_reminder(db, user, reminder_id, scheduler)
