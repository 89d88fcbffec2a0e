from datetime import datetime, timezone
from typing import Optional

def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalizes a datetime to naive UTC, the form every column is stored in."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)

class Clock:
    """Source of the current time. Everything that compares against a due date takes one."""

    def now(self) -> datetime:
        raise NotImplementedError

class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)

class FixedClock(Clock):
    """A clock that only moves when told to."""

    def __init__(self, current: datetime):
        self.current = to_naive_utc(current)

    def now(self) -> datetime:
        return self.current

    def advance(self, delta):
        self.current = self.current + delta

system_clock = SystemClock()

def get_clock() -> Clock:
    return system_clock
