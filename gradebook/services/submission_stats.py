from typing import Iterable, Optional
from gradebook.core.numbers import percentage
from gradebook.models.entities import Submission
from gradebook.models.postgresql import SubmissionStatus
from gradebook.schemas.analytics import SubmissionStats

def average_grade(submissions: Iterable[Submission]) -> Optional[float]:
    """Mean of recorded grades, None while nothing has been graded."""
    grades = [s.grade for s in submissions if s.grade is not None]
    if not grades:
        return None
    return sum(grades) / len(grades)

def summarize(submissions: Iterable[Submission], total_students: int) -> SubmissionStats:
    """Counts and rates for one assignment's submissions against its class size."""
    submitted_count = 0
    graded_count = 0
    late_count = 0
    for sub in submissions:
        if sub.status != SubmissionStatus.DRAFT:
            submitted_count += 1
        if sub.grade is not None:
            graded_count += 1
        if sub.is_late:
            late_count += 1

    return SubmissionStats(
        total_students=total_students,
        submitted_count=submitted_count,
        graded_count=graded_count,
        late_count=late_count,
        submission_rate=percentage(submitted_count, total_students),
        grading_progress=percentage(graded_count, submitted_count),
    )
