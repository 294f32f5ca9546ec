import logging
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from app.models.reminder import Reminder
from app.models.user import User
from app.schemas.reminder import ReminderCreate
from app.services.reminder_scheduler import ReminderScheduler, TriggerReplacement

logger = logging.getLogger(__name__)

async def list_reminders(db: AsyncSession, user_id: int):
    q = (
        select(Reminder)
        .where(Reminder.user_id == user_id)
        .order_by(Reminder.created_at.desc(), Reminder.id.desc())
    )
    res = await db.execute(q)
    return res.scalars().all()

async def get_reminder(db: AsyncSession, reminder_id: int, user_id: int):
    q = select(Reminder).where(Reminder.id == reminder_id, Reminder.user_id == user_id)
    res = await db.execute(q)
    reminder = res.scalar_one_or_none()

    if not reminder:
        raise HTTPException(404, "Reminder not found")

    return reminder

async def _restore_handles(db: AsyncSession, reminder: Reminder, reminder_id: int, handles: list[str]):
    """Point the stored reminder at the triggers ``revert`` rebuilt."""
    try:
        await db.refresh(reminder)
        reminder.notification_ids = handles
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Could not restore trigger handles of reminder %s", reminder_id)

async def _persist(db: AsyncSession, replacement: TriggerReplacement, action: str, reminder: Reminder | None = None):
    """Commit, or put the previous triggers back if the write fails."""
    reminder_id = reminder.id if reminder is not None else None

    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Storage error while trying to %s", action)

        restored = replacement.revert()
        # the rollback brought back handles that apply() already cancelled
        if reminder is not None:
            await _restore_handles(db, reminder, reminder_id, restored)

        raise HTTPException(500, f"Failed to {action}")

async def create_reminder(db: AsyncSession, user: User, data: ReminderCreate, scheduler: ReminderScheduler):
    replacement = TriggerReplacement(scheduler)
    handles = replacement.apply(data, enabled=True, token=user.notify_token)

    reminder = Reminder(
        user_id=user.id,
        name=data.name,
        message=data.message,
        type=data.type,
        time=data.time,
        repeat_days=data.repeat_days,
        interval_minutes=data.interval_minutes,
        notification_ids=handles,
        is_active=True,
    )
    db.add(reminder)

    await _persist(db, replacement, "save reminder")
    await db.refresh(reminder)
    return reminder

async def update_reminder(db: AsyncSession, user: User, reminder_id: int, data: ReminderCreate, scheduler: ReminderScheduler):
    reminder = await get_reminder(db, reminder_id, user.id)

    # old triggers go first so an edit never leaves duplicates behind
    replacement = TriggerReplacement(scheduler, reminder)
    handles = replacement.apply(data, enabled=True, token=user.notify_token)

    reminder.name = data.name
    reminder.message = data.message
    reminder.type = data.type
    reminder.time = data.time
    reminder.repeat_days = data.repeat_days
    reminder.interval_minutes = data.interval_minutes
    reminder.notification_ids = handles
    reminder.is_active = True

    await _persist(db, replacement, "save reminder", reminder)
    await db.refresh(reminder)
    return reminder

async def toggle_reminder(db: AsyncSession, user: User, reminder_id: int, is_active: bool, scheduler: ReminderScheduler):
    reminder = await get_reminder(db, reminder_id, user.id)

    replacement = TriggerReplacement(scheduler, reminder)
    handles = replacement.apply(reminder, enabled=is_active, token=user.notify_token)

    reminder.is_active = is_active
    reminder.notification_ids = handles

    await _persist(db, replacement, "update reminder", reminder)
    await db.refresh(reminder)
    return reminder

async def delete_reminder(db: AsyncSession, user: User, reminder_id: int, scheduler: ReminderScheduler):
    reminder = await get_reminder(db, reminder_id, user.id)

    failed = scheduler.cancel_all(reminder.notification_ids)
    if failed:
        logger.warning("Reminder %s deleted with %d trigger(s) not cancelled", reminder.id, len(failed))

    try:
        await db.delete(reminder)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Storage error while trying to delete reminder %s", reminder_id)
        raise HTTPException(500, "Failed to delete reminder")

    return {"status": "deleted"}

async def reschedule_active_reminders(db: AsyncSession, user: User, scheduler: ReminderScheduler):
    """Re-point every active reminder of ``user`` at their current push token."""
    reminders = [r for r in await list_reminders(db, user.id) if r.is_active]

    for reminder in reminders:
        replacement = TriggerReplacement(scheduler, reminder)
        reminder.notification_ids = replacement.apply(reminder, enabled=True, token=user.notify_token)
        await _persist(db, replacement, "reschedule reminder", reminder)

    return len(reminders)
