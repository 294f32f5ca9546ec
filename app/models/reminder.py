from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean, JSON
from sqlalchemy.sql import func
from app.db.session import Base

REMINDER_FIXED = "fixed"
REMINDER_INTERVAL = "interval"

class Reminder(Base):
    __tablename__ = "reminders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    message = Column(String, nullable=False, default="")
    type = Column(String, nullable=False)

    time = Column(String, nullable=True)
    repeat_days = Column(JSON, nullable=True)
    interval_minutes = Column(Integer, nullable=True)

    # Scheduler handles of the live triggers, one per weekday for fixed reminders
    notification_ids = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True, server_default="true")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
