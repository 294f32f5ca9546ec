from pydantic import BaseModel, EmailStr, Field
from datetime import datetime

class UserCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class UserOut(BaseModel):
    id: int
    name: str
    email: str
    notify_permission: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True

class PushTokenUpdate(BaseModel):
    # null when the device denied notification permission
    token: str | None = None
