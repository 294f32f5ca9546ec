from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.core.jwt_config import decode_token, get_token_from_cookie
from app.services.user_service import get_user_by_id, get_user_by_email
from app.services.room_services import load_room_context
from app.services.reminder_scheduler import reminder_scheduler
from app.core.security import verify_password

async def get_current_user(request: Request,db: AsyncSession = Depends(get_db)):
    try:
        token = get_token_from_cookie(request=request)
        payload = decode_token(token)
        user_id = payload.get("sub")

        if user_id is None or payload.get("type", "access") != "access":
            raise HTTPException(status_code=401, detail="Invalid authentication credentials")

        user = await get_user_by_id(db, int(user_id))

        if user is None:
            raise HTTPException(status_code=401, detail="User not found")

        return user
    except HTTPException:
        raise
    except Exception:
        raise HTTPException(status_code=401, detail="Could not validate credentials")

async def authenticate_user(db:AsyncSession, email:str, password:str):
    user = await get_user_by_email(db, email)
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user

async def get_room_context(db: AsyncSession = Depends(get_db), user = Depends(get_current_user)):
    ctx = await load_room_context(db, user)
    if ctx is None:
        raise HTTPException(404, "No room found. Please create or join a room.")
    return ctx

def get_reminder_scheduler():
    return reminder_scheduler
