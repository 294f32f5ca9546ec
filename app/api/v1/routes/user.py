from fastapi import APIRouter, Depends, HTTPException, Response, Cookie
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.schemas.user import UserCreate, UserOut, UserLogin, PushTokenUpdate
from app.models.user import User
from app.services.user_service import create_user, get_user_by_id, update_push_token
from app.services.reminder_services import reschedule_active_reminders
from app.core.dependencies import authenticate_user, get_current_user, get_reminder_scheduler
from app.core.jwt_config import create_access_token, create_refresh_token, decode_token
from app.core.errors import write_guard

router = APIRouter()

def _set_auth_cookies(response: Response, access: str, refresh: str):
    response.set_cookie(
        key="refresh_token",
        value=refresh,
        httponly=True,
        secure=False,
        samesite="lax"
    )

    response.set_cookie(
        key="access_token",
        value=access,
        httponly=True,
        secure=False,
        samesite="lax"
    )

@router.post("/register", response_model=UserOut)
async def register_user(data:UserCreate, db:AsyncSession = Depends(get_db)):
    try:
        user = await create_user(db, data)
        return user
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.post("/login", response_model=UserOut)
async def login_user(data:UserLogin, response : Response, db:AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, data.email, data.password)

    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    access = create_access_token({"sub": str(user.id)})
    refresh = create_refresh_token({"sub": str(user.id)})

    user.refresh_token = refresh
    async with write_guard(db, "sign in"):
        await db.commit()

    _set_auth_cookies(response, access, refresh)
    return user

@router.get("/me", response_model=UserOut)
async def read_users_me(current_user: User = Depends(get_current_user)):
    return UserOut.model_validate(current_user)

@router.post("/refresh", response_model=UserOut)
async def refresh_token(
    response: Response,
    db: AsyncSession = Depends(get_db),
    refresh_cookie: str | None = Cookie(None, alias="refresh_token")
):
    if refresh_cookie is None:
        raise HTTPException(status_code=401, detail="Refresh token missing")

    payload = decode_token(refresh_cookie)
    user_id = payload.get("sub")

    if user_id is None or payload.get("type") != "refresh":
        raise HTTPException(401, "Invalid refresh token")

    user = await get_user_by_id(db, int(user_id))

    if not user:
        raise HTTPException(401, "User not found")

    if user.refresh_token != refresh_cookie:
        raise HTTPException(401, "Refresh token revoked or rotated")

    new_access = create_access_token({"sub": str(user.id)})
    new_refresh = create_refresh_token({"sub" : str(user.id)})

    user.refresh_token = new_refresh
    async with write_guard(db, "refresh session"):
        await db.commit()
    await db.refresh(user)

    _set_auth_cookies(response, new_access, new_refresh)
    return user

@router.post("/logout")
async def logout_user(response: Response, db: AsyncSession = Depends(get_db), current_user : User = Depends(get_current_user)):
    current_user.refresh_token = None
    async with write_guard(db, "sign out"):
        await db.commit()

    response.delete_cookie("refresh_token")
    response.delete_cookie("access_token")
    return {"message":"Logged out"}

@router.put("/me/push-token", response_model=UserOut)
async def register_push_token(
    data: PushTokenUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    scheduler = Depends(get_reminder_scheduler)
):
    changed = await update_push_token(db, current_user, data.token)

    # reminder triggers carry the token they were scheduled with
    if changed:
        await reschedule_active_reminders(db, current_user, scheduler)

    return current_user
