import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["APP_TIMEZONE"] = "UTC"
os.environ["SCHEDULER_JOBSTORE_URL"] = ""

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from apscheduler.schedulers.background import BackgroundScheduler
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

import app.services.push_service as push_service
from app.core.dependencies import get_reminder_scheduler
from app.core.jwt_config import create_access_token
from app.core.security import hash_password
from app.db.session import Base, get_db
from app.main import app
from app.models.expense import Expense
from app.models.room import Room
from app.models.user import User
from app.services.reminder_scheduler import ReminderScheduler


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def scheduler():
    s = ReminderScheduler(BackgroundScheduler(timezone="UTC"))
    # registered jobs never fire while paused
    s.start(paused=True)
    yield s
    s.shutdown()


class FakeResponse:
    def raise_for_status(self):
        return None


@pytest.fixture
def pushes(monkeypatch):
    sent = []

    def fake_post(url, json=None, headers=None, timeout=None):
        sent.extend(json)
        return FakeResponse()

    monkeypatch.setattr(push_service.requests, "post", fake_post)
    return sent


@pytest_asyncio.fixture
async def client(engine, scheduler, pushes):
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_reminder_scheduler] = lambda: scheduler

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def auth_headers(user_id: int):
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user_id)})}"}


async def make_user(db, name: str, email: str, token: str | None = None):
    user = User(name=name, email=email, password_hash=hash_password("secret123"), notify_token=token)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def owner(db):
    return await make_user(db, "Asha", "asha@example.com", token="ExponentPushToken[asha]")


@pytest_asyncio.fixture
async def roommate(db):
    return await make_user(db, "Ravi", "ravi@example.com", token="ExponentPushToken[ravi]")


@pytest_asyncio.fixture
async def room(db, owner, roommate):
    room = Room(
        name="Flat 4B",
        owner_id=owner.id,
        owner_email=owner.email,
        roommate_id=roommate.id,
        roommate_email=roommate.email,
        target_amount=Decimal("100"),
    )
    db.add(room)
    await db.commit()
    await db.refresh(room)
    return room


async def add_expense(db, room, paid_by, amount, cycle_user_id=None, created_at=None, **extra):
    expense = Expense(
        room_id=room.id,
        amount=Decimal(str(amount)),
        note=extra.pop("note", "groceries"),
        paid_by=paid_by,
        cycle_number=extra.pop("cycle_number", room.cycle_number),
        cycle_user_id=cycle_user_id,
        expense_date=extra.pop("expense_date", date(2026, 1, 10)),
        **extra,
    )
    if created_at is not None:
        expense.created_at = created_at
    db.add(expense)
    await db.commit()
    await db.refresh(expense)
    return expense
