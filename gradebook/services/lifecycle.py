"""
Submission lifecycle: draft -> submitted -> graded -> returned.

Each transition takes the current submission and returns either ``Ok`` with
the next submission or ``Err`` describing why the move was refused. Nothing
here touches the database.
"""

from datetime import datetime
from typing import Optional, List
import logging
from gradebook.core.numbers import Number, round_half_up
from gradebook.models.entities import Assignment, Submission
from gradebook.models.postgresql import SubmissionStatus
from gradebook.services.penalty import calculate_points_earned
from gradebook.services.results import Ok, Err, Result, InvalidStateTransition

logger = logging.getLogger(__name__)

GRADE_MIN = 0
GRADE_MAX = 100

def _refuse(action: str, submission: Submission, allowed: tuple) -> Err:
    logger.warning("Refused to %s submission %s in state %s", action, submission.id, submission.status.value)
    return Err(InvalidStateTransition(action, submission.status.value, tuple(s.value for s in allowed)))

def clamp_grade(grade: Number) -> float:
    bounded = max(GRADE_MIN, min(GRADE_MAX, grade))
    return float(round_half_up(bounded, 2))

def update_draft(submission: Submission, content: Optional[str] = None, attachments: Optional[List[str]] = None) -> Result:
    """Edit a draft. Fields left as None keep their current value."""
    if submission.status != SubmissionStatus.DRAFT:
        return _refuse("edit", submission, (SubmissionStatus.DRAFT,))
    changes = {}
    if content is not None:
        changes["content"] = content
    if attachments is not None:
        changes["attachments"] = list(attachments)
    return Ok(submission.model_copy(update=changes))

def submit(submission: Submission, assignment: Assignment, now: datetime) -> Result:
    """Hand in a draft. Lateness is decided here and never revisited."""
    if submission.status != SubmissionStatus.DRAFT:
        return _refuse("submit", submission, (SubmissionStatus.DRAFT,))

    submitted = submission.model_copy(update={
        "submitted_at": now,
        "is_late": now > assignment.due_date,
        "status": SubmissionStatus.SUBMITTED,
    })
    logger.info("Submission %s submitted (late=%s)", submitted.id, submitted.is_late)
    return Ok(submitted)

def grade(
    submission: Submission,
    assignment: Assignment,
    grade_value: Number,
    feedback: Optional[str],
    grader_id: Optional[int],
    now: datetime,
) -> Result:
    """
    Record a grade. Allowed any time after the first submit, including after
    the submission went back to the student; out-of-range grades are clamped
    into [0, 100] rather than refused.
    """
    if not submission.is_submitted:
        return _refuse("grade", submission, (SubmissionStatus.SUBMITTED, SubmissionStatus.GRADED, SubmissionStatus.RETURNED))

    percentage = clamp_grade(grade_value)
    graded = submission.model_copy(update={
        "grade": percentage,
        "feedback": feedback,
        "graded_by": grader_id,
        "graded_at": now,
        "status": SubmissionStatus.GRADED,
        "points_earned": calculate_points_earned(
            percentage, assignment.max_points, submission.is_late, assignment.late_penalty_percent
        ),
    })
    logger.info("Submission %s graded %s (%s points)", graded.id, graded.grade, graded.points_earned)
    return Ok(graded)

def return_to_student(submission: Submission) -> Result:
    if not submission.is_graded:
        return _refuse("return", submission, (SubmissionStatus.GRADED, SubmissionStatus.RETURNED))
    return Ok(submission.model_copy(update={"status": SubmissionStatus.RETURNED}))

def rescore(submission: Submission, assignment: Assignment) -> Submission:
    """Recompute points for a graded submission after the assignment's max points or late penalty changed."""
    return submission.model_copy(update={
        "points_earned": calculate_points_earned(
            submission.grade, assignment.max_points, submission.is_late, assignment.late_penalty_percent
        ),
    })
