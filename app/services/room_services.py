import logging
from dataclasses import dataclass
from fastapi import BackgroundTasks, HTTPException
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.sql import func
from app.core.config import settings
from app.core.errors import write_guard
from app.models.room import Room, ROOM_ACTIVE, ROOM_INACTIVE
from app.models.user import User
from app.schemas.room import RoomCreate
from app.services.push_service import send_push
from app.services.user_service import get_user_by_email, get_user_by_id

logger = logging.getLogger(__name__)

@dataclass
class RoomContext:
    """The signed-in user, their active room and the other participant."""
    user: User
    room: Room
    roommate: User | None

    @property
    def roommate_id(self) -> int:
        return self.room.other_participant(self.user.id)[0]

async def get_active_room_for_user(db: AsyncSession, user_id: int):
    q = (
        select(Room)
        .where(
            or_(Room.owner_id == user_id, Room.roommate_id == user_id),
            Room.status == ROOM_ACTIVE
        )
        .order_by(Room.created_at.desc(), Room.id.desc())
    )
    res = await db.execute(q)
    return res.scalars().first()

async def load_room_context(db: AsyncSession, user: User):
    room = await get_active_room_for_user(db, user.id)
    if not room:
        return None

    roommate_id, _ = room.other_participant(user.id)
    roommate = await get_user_by_id(db, roommate_id)
    return RoomContext(user=user, room=room, roommate=roommate)

async def create_room(db: AsyncSession, owner: User, data: RoomCreate):
    if owner.email.lower() == data.roommate_email.lower():
        raise HTTPException(400, "Cannot invite yourself. Enter your roommate's email or ask them to invite you.")

    if await get_active_room_for_user(db, owner.id):
        raise HTTPException(400, "You are already part of an active room")

    roommate = await get_user_by_email(db, data.roommate_email)
    if not roommate:
        raise HTTPException(404, "No user exists with this email")

    if await get_active_room_for_user(db, roommate.id):
        raise HTTPException(400, "This user is already part of another active room")

    room = Room(
        name=data.name,
        owner_id=owner.id,
        owner_email=owner.email,
        roommate_id=roommate.id,
        roommate_email=roommate.email,
        target_amount=settings.DEFAULT_TARGET_AMOUNT,
        status=ROOM_ACTIVE,
    )

    async with write_guard(db, "create room"):
        db.add(room)
        await db.commit()
    await db.refresh(room)

    logger.info("Room %s created by user %s with roommate %s", room.id, owner.id, roommate.id)
    return room

async def update_target(db: AsyncSession, room: Room, target_amount):
    room.target_amount = target_amount
    room.updated_at = func.now()

    async with write_guard(db, "update target"):
        await db.commit()
    await db.refresh(room)
    return room

async def leave_room(db: AsyncSession, room: Room, user_id: int):
    if room.owner_id != user_id:
        raise HTTPException(403, "Only owner can delete the room. Contact your roommate to delete the room")

    room.status = ROOM_INACTIVE
    room.left_at = func.now()

    async with write_guard(db, "leave room"):
        await db.commit()

    logger.info("Room %s closed by owner %s", room.id, user_id)
    return {"status": "left"}

def nudge_roommate(ctx: RoomContext, background_tasks: BackgroundTasks):
    token = ctx.roommate.notify_token if ctx.roommate else None
    if not token:
        raise HTTPException(400, "Please ask your roommate to turn on notification.")

    background_tasks.add_task(
        send_push,
        [token],
        "Please add expense of today.",
        "Add Today Expense.",
        {"type": "nudge", "roomId": ctx.room.id},
    )
    return {"status": "reminder_sent"}
