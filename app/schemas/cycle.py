from pydantic import BaseModel
from decimal import Decimal
from datetime import datetime

class CycleSpendOut(BaseModel):
    cycle_active: bool
    cycle_number: int
    active_user_id: int | None = None
    cycle_start_at: datetime | None = None
    mine: Decimal
    roommate: Decimal
    target: Decimal
    remaining: Decimal
    progress_percent: Decimal

class CycleSummaryOut(BaseModel):
    cycle_number: int | None = None
    mine: Decimal
    roommate: Decimal
    total: Decimal
