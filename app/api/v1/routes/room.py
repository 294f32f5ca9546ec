from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.core.dependencies import get_current_user, get_room_context
from app.schemas.room import RoomCreate, RoomOut, RoomStatusOut, TargetUpdate
from app.services.room_services import RoomContext, create_room, update_target, leave_room, nudge_roommate
from app.services.cycle_services import is_cycle_active, is_my_turn, can_start_cycle

router = APIRouter()

@router.post("/", response_model=RoomOut, description="create a room and invite a roommate by email")
async def create_new_room(
    data: RoomCreate,
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user)
):
    return await create_room(db, user, data)

@router.get("/me", response_model=RoomStatusOut, description="current active room and turn state")
async def my_room(ctx: RoomContext = Depends(get_room_context)):
    room = ctx.room
    return {
        "room": room,
        "roommate": ctx.roommate,
        "cycle_active": is_cycle_active(room),
        "is_my_turn": is_my_turn(room, ctx.user.id),
        "can_start_cycle": can_start_cycle(room),
    }

@router.patch("/me/target", response_model=RoomOut)
async def change_target(
    data: TargetUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: RoomContext = Depends(get_room_context)
):
    return await update_target(db, ctx.room, data.target_amount)

@router.delete("/me")
async def leave(db: AsyncSession = Depends(get_db), ctx: RoomContext = Depends(get_room_context)):
    return await leave_room(db, ctx.room, ctx.user.id)

@router.post("/me/nudge", description="ask the roommate to log today's expenses")
async def nudge(background_tasks: BackgroundTasks, ctx: RoomContext = Depends(get_room_context)):
    return nudge_roommate(ctx, background_tasks)
