from sqlalchemy.orm import Session
from typing import Optional, List
import logging
from gradebook.core.clock import Clock
from gradebook.models.entities import Assignment, Submission
from gradebook.models.postgresql import SubmissionStatus
from gradebook.services import availability, lifecycle
from gradebook.services.repository import SubmissionRepository
from gradebook.services.results import Ok, Err, Result, AssignmentUnavailable, LateSubmissionNotAllowed

logger = logging.getLogger(__name__)

class GradingService:
    """Runs lifecycle transitions against stored submissions and saves the outcome."""

    def __init__(self, db: Session, clock: Clock):
        self.submissions = SubmissionRepository(db)
        self.clock = clock

    def start_draft(self, assignment: Assignment, student_id: int, content: Optional[str] = None, attachments: Optional[List[str]] = None) -> Result:
        if not availability.is_available(assignment, self.clock.now()):
            logger.warning("Draft refused: assignment %s is not available", assignment.id)
            return Err(AssignmentUnavailable(assignment.id))
        draft = Submission(
            assignment_id=assignment.id,
            student_id=student_id,
            content=content,
            attachments=attachments or [],
        )
        return Ok(self.submissions.add(draft))

    def edit_draft(self, submission: Submission, content: Optional[str] = None, attachments: Optional[List[str]] = None) -> Result:
        return self._apply(lifecycle.update_draft(submission, content, attachments))

    def submit(self, submission: Submission, assignment: Assignment) -> Result:
        now = self.clock.now()
        if submission.status == SubmissionStatus.DRAFT:
            if not assignment.is_published:
                return Err(AssignmentUnavailable(assignment.id))
            if availability.is_overdue(assignment, now):
                if not availability.can_submit_late(assignment, now):
                    return Err(LateSubmissionNotAllowed(assignment.id))
            elif not availability.is_available(assignment, now):
                return Err(AssignmentUnavailable(assignment.id))
        return self._apply(lifecycle.submit(submission, assignment, now))

    def grade(self, submission: Submission, assignment: Assignment, grade: float, feedback: Optional[str], grader_id: Optional[int]) -> Result:
        return self._apply(lifecycle.grade(submission, assignment, grade, feedback, grader_id, self.clock.now()))

    def return_to_student(self, submission: Submission) -> Result:
        return self._apply(lifecycle.return_to_student(submission))

    def rescore(self, assignment: Assignment) -> List[Submission]:
        """Bring stored points of graded work in line with the assignment's current scoring. Leaves the transaction open."""
        rescored = [
            self.submissions.save(lifecycle.rescore(submission, assignment), commit=False)
            for submission in self.submissions.for_assignment(assignment.id)
            if submission.is_graded and submission.grade is not None
        ]
        logger.info("Rescored %s submissions for assignment %s", len(rescored), assignment.id)
        return rescored

    def _apply(self, result: Result) -> Result:
        if isinstance(result, Err):
            return result
        return Ok(self.submissions.save(result.value))
