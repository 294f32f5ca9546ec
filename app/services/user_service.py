from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.sql import func
from app.models.user import User
from app.schemas.user import UserCreate
from app.core.security import hash_password
from app.core.errors import write_guard

async def get_user_by_email(db: AsyncSession, email:str):
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()

async def get_user_by_id(db: AsyncSession, id:int):
    result = await db.execute(select(User).where(User.id == id))
    return result.scalar_one_or_none()

async def create_user(db: AsyncSession, data: UserCreate):
    existing = await get_user_by_email(db, data.email)
    if existing:
        raise ValueError("User already Exists")

    user = User(
        email = data.email,
        name = data.name.strip(),
        password_hash = hash_password(data.password)
    )

    async with write_guard(db, "register user"):
        db.add(user)
        await db.commit()
    await db.refresh(user)
    return user

async def update_push_token(db: AsyncSession, user: User, token: str | None) -> bool:
    """
    Store the device push token, or record that permission was denied.
    Returns True when the stored token changed.
    """
    if not token:
        user.notify_permission = "denied"
        changed = False
    elif user.notify_token != token:
        user.notify_token = token
        user.notify_permission = "granted"
        user.token_updated_at = func.now()
        changed = True
    else:
        user.notify_permission = "granted"
        changed = False

    async with write_guard(db, "update notification token"):
        await db.commit()
    await db.refresh(user)
    return changed
