from pydantic import BaseModel, EmailStr, Field, field_validator
from decimal import Decimal
from datetime import datetime
from app.schemas.user import UserOut

class RoomCreate(BaseModel):
    name: str
    roommate_email: EmailStr

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str):
        if not v.strip():
            raise ValueError("Room name is required")
        return v.strip()

class TargetUpdate(BaseModel):
    target_amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)

class RoomOut(BaseModel):
    id: int
    name: str
    owner_id: int
    owner_email: str
    roommate_id: int
    roommate_email: str
    participants: list[int]
    status: str
    target_amount: Decimal
    active_user_id: int | None = None
    active_user_email: str | None = None
    cycle_start_at: datetime | None = None
    cycle_number: int
    last_expense_at: datetime | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True

class RoomStatusOut(BaseModel):
    room: RoomOut
    roommate: UserOut | None = None
    cycle_active: bool
    is_my_turn: bool
    can_start_cycle: bool
