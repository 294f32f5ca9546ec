from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric, Date
from sqlalchemy.sql import func
from app.db.session import Base

class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    category = Column(String, nullable=False, default="Food")
    note = Column(String, nullable=False)
    paid_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    paid_by_name = Column(String, nullable=True)
    paid_by_email = Column(String, nullable=True)

    # Cycle the expense counts against, frozen at creation time
    cycle_number = Column(Integer, nullable=True)
    cycle_user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    expense_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
