from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import List, Literal
from app.core.utils import parse_time

class ReminderCreate(BaseModel):
    name: str = Field(min_length=1)
    message: str = ""
    type: Literal["fixed", "interval"] = "fixed"
    time: str | None = None
    repeat_days: List[int] | None = None
    interval_minutes: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def check_schedule(self):
        self.name = self.name.strip()
        self.message = self.message.strip()

        if not self.name:
            raise ValueError("Reminder name is required")

        if self.type == "fixed":
            if self.time is None:
                raise ValueError("Fixed reminders need a time")
            # malformed times are rejected here, before anything is scheduled
            parse_time(self.time)

            if not self.repeat_days:
                raise ValueError("Pick at least one day to repeat on")
            if any(d not in range(7) for d in self.repeat_days):
                raise ValueError("Repeat days must be between 0 (Monday) and 6 (Sunday)")

            self.repeat_days = sorted(set(self.repeat_days))
            self.interval_minutes = None
        else:
            if self.interval_minutes is None:
                raise ValueError("Interval reminders need interval_minutes")
            self.time = None
            self.repeat_days = None

        return self

class ReminderToggle(BaseModel):
    is_active: bool

class ReminderOut(BaseModel):
    id: int
    user_id: int
    name: str
    message: str
    type: str
    time: str | None = None
    repeat_days: List[int] | None = None
    interval_minutes: int | None = None
    notification_ids: List[str]
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
