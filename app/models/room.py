from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric
from sqlalchemy.sql import func
from app.db.session import Base

ROOM_ACTIVE = "active"
ROOM_INACTIVE = "inactive"

class Room(Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    owner_email = Column(String, nullable=False)
    roommate_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    roommate_email = Column(String, nullable=False)
    status = Column(String, nullable=False, default=ROOM_ACTIVE, server_default=ROOM_ACTIVE)
    target_amount = Column(Numeric(10, 2), nullable=False)

    # Cycle state: active_user_id and cycle_start_at are set or cleared together
    active_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    active_user_email = Column(String, nullable=True)
    cycle_start_at = Column(DateTime(timezone=True), nullable=True)
    cycle_number = Column(Integer, nullable=False, default=0, server_default="0")

    last_expense_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)
    left_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def participants(self):
        return [self.owner_id, self.roommate_id]

    def other_participant(self, user_id: int):
        """Returns (id, email) of the participant that is not ``user_id``."""
        if user_id == self.owner_id:
            return self.roommate_id, self.roommate_email
        return self.owner_id, self.owner_email
