import re
from decimal import Decimal, ROUND_HALF_UP, getcontext
from typing import Dict, Iterable, Tuple

getcontext().prec = 28
CENTS= Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

TIME_PATTERN = re.compile(r"^(\d{2}):(\d{2}) (AM|PM)$")

def qround(d : Decimal) -> Decimal:
    return d.quantize(CENTS, rounding=ROUND_HALF_UP)

def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    return Decimal(str(value))

def parse_time(value: str) -> Tuple[int, int]:
    """
    Parse a 12-hour clock string of the exact shape ``HH:MM AM|PM`` into a
    24-hour ``(hour, minute)`` pair.

    ``12 AM`` is midnight (hour 0) and ``12 PM`` stays hour 12; every other PM
    hour gets 12 added. Anything else raises ``ValueError``.
    """
    match = TIME_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Invalid time '{value}', expected HH:MM AM/PM")

    hour, minute, period = int(match.group(1)), int(match.group(2)), match.group(3)

    if not 1 <= hour <= 12 or not 0 <= minute <= 59:
        raise ValueError(f"Invalid time '{value}', expected HH:MM AM/PM")

    if period == "AM" and hour == 12:
        hour = 0
    elif period == "PM" and hour != 12:
        hour += 12

    return hour, minute

def to_trigger_weekday(day: int) -> int:
    """Room weekdays run 0=Monday..6=Sunday; triggers use 1=Sunday..7=Saturday."""
    if day not in range(7):
        raise ValueError(f"Invalid weekday {day}, expected 0-6")
    return (day + 1) % 7 + 1

def split_totals(rows: Iterable[Tuple[int, Decimal]], user_id: int) -> Tuple[Decimal, Decimal]:
    """Partition ``(paid_by, amount)`` rows into (mine, roommate) totals."""
    mine = ZERO
    other = ZERO

    for paid_by, amount in rows:
        if paid_by == user_id:
            mine += to_decimal(amount)
        else:
            other += to_decimal(amount)

    return qround(mine), qround(other)

def budget_progress(target: Decimal, spent: Decimal) -> Dict[str, Decimal]:
    target = to_decimal(target)
    spent = to_decimal(spent)

    remaining = max(target - spent, ZERO)

    if target > 0:
        percent = min(spent / target * HUNDRED, HUNDRED)
    else:
        percent = ZERO

    return {
        "remaining": qround(remaining),
        "progress_percent": qround(percent),
    }
