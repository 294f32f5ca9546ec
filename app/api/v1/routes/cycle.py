from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.core.dependencies import get_room_context
from app.schemas.cycle import CycleSpendOut, CycleSummaryOut
from app.schemas.room import RoomOut
from app.services.room_services import RoomContext
from app.services.cycle_services import start_cycle, complete_cycle, compute_cycle_spend, cycle_history

router = APIRouter()

@router.post("/start", response_model=RoomOut)
async def start(db: AsyncSession = Depends(get_db), ctx: RoomContext = Depends(get_room_context)):
    return await start_cycle(db, ctx.room, ctx.user)

@router.post("/complete", response_model=RoomOut)
async def complete(
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    ctx: RoomContext = Depends(get_room_context)
):
    return await complete_cycle(db, ctx.room, ctx.user, background_tasks)

@router.get("/spend", response_model=CycleSpendOut, description="my and my roommate's spend in the running cycle")
async def spend(db: AsyncSession = Depends(get_db), ctx: RoomContext = Depends(get_room_context)):
    return await compute_cycle_spend(db, ctx.room, ctx.user.id)

@router.get("/history", response_model=list[CycleSummaryOut])
async def history(db: AsyncSession = Depends(get_db), ctx: RoomContext = Depends(get_room_context)):
    return await cycle_history(db, ctx.room, ctx.user.id)
