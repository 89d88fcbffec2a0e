from datetime import datetime
from typing import Optional
from gradebook.models.entities import Assignment

SECONDS_PER_DAY = 86400

def is_available(assignment: Assignment, now: datetime) -> bool:
    """Whether students may work on the assignment right now."""
    if not assignment.is_published:
        return False
    if assignment.available_from and now < assignment.available_from:
        return False
    if assignment.available_until and now > assignment.available_until:
        return False
    return True

def is_overdue(assignment: Assignment, now: datetime) -> bool:
    return now > assignment.due_date

def can_submit_late(assignment: Assignment, now: datetime) -> bool:
    """Late work is accepted until the window closes, if it is accepted at all."""
    if not assignment.allow_late_submission:
        return False
    if assignment.available_until and now > assignment.available_until:
        return False
    return True

def days_until_due(assignment: Assignment, now: datetime) -> int:
    """Whole days from now to the due date, truncated toward zero. Negative once overdue."""
    seconds = (assignment.due_date - now).total_seconds()
    return int(seconds / SECONDS_PER_DAY)

def days_late(submitted_at: Optional[datetime], assignment: Assignment) -> int:
    if submitted_at is None or submitted_at <= assignment.due_date:
        return 0
    return -days_until_due(assignment, submitted_at)
