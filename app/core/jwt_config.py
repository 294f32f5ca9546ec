import jwt
from jwt import InvalidTokenError, ExpiredSignatureError
from datetime import datetime, timedelta, timezone
from app.core.config import settings
from fastapi import HTTPException, Request

def _encode(data: dict, lifetime: timedelta, kind: str) -> str:
    to_encode = data.copy()
    to_encode.update({
        "exp": datetime.now(timezone.utc) + lifetime,
        "type": kind,
    })

    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm = settings.JWT_ALGO)

def create_access_token(data: dict, expires_min: int | None = None):
    minutes = expires_min or settings.ACCESS_TOKEN_MINUTES
    return _encode(data, timedelta(minutes=minutes), "access")

def create_refresh_token(data: dict, expires_days: int | None = None):
    days = expires_days or settings.REFRESH_TOKEN_DAYS
    return _encode(data, timedelta(days=days), "refresh")

def decode_token(token : str):
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms = [settings.JWT_ALGO]
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired")
    except InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid Token")

def get_token_from_cookie(request : Request) -> str:
    token = request.cookies.get("access_token")
    if not token:
        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            token = auth_header.split(" ", 1)[1]

    if not token:
        raise HTTPException(401, "Unauthorized access")

    return token.strip()
