from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from datetime import date, datetime
from typing import List
from app.core.dates import today

class ExpenseCreate(BaseModel):
    amount : Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    category : str = "Food"
    note : str
    expense_date : date = Field(default_factory=today)

    @field_validator("note")
    @classmethod
    def note_required(cls, v: str):
        if not v.strip():
            raise ValueError("Please enter a valid note")
        return v.strip()

    @field_validator("expense_date")
    @classmethod
    def not_in_future(cls, v: date):
        if v > today():
            raise ValueError("Expense date cannot be in the future")
        return v

class ExpenseOut(BaseModel):
    id: int
    room_id: int
    amount: Decimal
    category: str
    note: str
    paid_by: int
    paid_by_name: str | None = None
    paid_by_email: str | None = None
    cycle_number: int | None = None
    cycle_user_id: int | None = None
    expense_date: date
    created_at: datetime | None = None

    class Config:
        from_attributes = True

class ExpensePage(BaseModel):
    items: List[ExpenseOut]
    next_cursor: str | None = None
    has_more: bool
