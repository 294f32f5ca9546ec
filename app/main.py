import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from app.core.config import settings
from app.services.reminder_scheduler import reminder_scheduler
from app.api.v1.routes.system import router as system_router
from app.api.v1.routes.user import router as user_router
from app.api.v1.routes.room import router as room_router
from app.api.v1.routes.cycle import router as cycle_router
from app.api.v1.routes.expense import router as expense_router
from app.api.v1.routes.reminder import router as reminder_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)

@asynccontextmanager
async def lifespan(app: FastAPI):
    reminder_scheduler.start()
    yield
    reminder_scheduler.shutdown()

app = FastAPI(title=settings.PROJECT_NAME, version=settings.PROJECT_VERSION, lifespan=lifespan)

@app.get("/")
async def root():
    return {"message": "Roomturn Backend is live"}

app.include_router(system_router, prefix="/api/v1/system")
app.include_router(user_router, prefix="/api/v1/users")
app.include_router(room_router, prefix="/api/v1/rooms")
app.include_router(cycle_router, prefix="/api/v1/cycles")
app.include_router(expense_router, prefix="/api/v1/expenses")
app.include_router(reminder_router, prefix="/api/v1/reminders")
