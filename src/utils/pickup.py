from datetime import datetime, time, timedelta
from typing import Optional

from utils.errors import ValidationError

MIN_PREP_MINUTES = 20  # minimum preparation window before pickup
ROUND_TO_MINUTES = 5


def earliest_pickup(now: datetime) -> datetime:
    """
    now + the preparation window, rounded up to the next 5 minute boundary.
    A result already on a boundary (zero seconds) is kept as is.
    """
    ready = now + timedelta(minutes=MIN_PREP_MINUTES)
    floored = ready.replace(
        minute=ready.minute - ready.minute % ROUND_TO_MINUTES, second=0, microsecond=0
    )
    if floored == ready:
        return ready
    return floored + timedelta(minutes=ROUND_TO_MINUTES)


def earliest_pickup_time(now: Optional[datetime] = None) -> str:
    """Earliest allowed pickup as "HH:MM"."""
    now = now or datetime.now()
    return earliest_pickup(now).strftime("%H:%M")


def parse_pickup_time(value: str) -> time:
    """Parse a "HH:MM" wall clock time; raise ValidationError if malformed."""
    value = (value or "").strip()
    if not value:
        raise ValidationError("Please choose a pickup time.")
    try:
        return datetime.strptime(value, "%H:%M").time()
    except ValueError as e:
        raise ValidationError(f"Pickup time must be HH:MM, got {value!r}.") from e


def is_valid_pickup_time(candidate: str, now: Optional[datetime] = None) -> bool:
    """
    True iff the candidate time of day, taken on now's calendar day, is at
    least now + the preparation window. Same day only: a time past midnight
    is always compared against today.
    """
    now = now or datetime.now()
    try:
        picked = parse_pickup_time(candidate)
    except ValidationError:
        return False
    picked_today = datetime.combine(now.date(), picked, tzinfo=now.tzinfo)
    return picked_today >= now + timedelta(minutes=MIN_PREP_MINUTES)
