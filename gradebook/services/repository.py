"""
Persistence for assignments and submissions.

Rows go in and out as the immutable entities from ``gradebook.models.entities``.
Submission writes are guarded twice: the (assignment, student) unique
constraint stops duplicate drafts, and the ``version`` column stops two graders
from overwriting each other.
"""

from sqlalchemy import update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from gradebook.models import postgresql as models
from gradebook.models.entities import Assignment, Submission

logger = logging.getLogger(__name__)

class DuplicateSubmissionError(Exception):
    def __init__(self, assignment_id: int, student_id: int):
        super().__init__(f"Student {student_id} already has a submission for assignment {assignment_id}")
        self.assignment_id = assignment_id
        self.student_id = student_id

class StaleSubmissionError(Exception):
    def __init__(self, submission_id: int, expected_version: int):
        super().__init__(f"Submission {submission_id} was changed by someone else (expected version {expected_version})")
        self.submission_id = submission_id
        self.expected_version = expected_version

ASSIGNMENT_FIELDS = (
    "title", "description", "instructions", "class_id", "subject_id", "teacher_id", "type",
    "max_points", "due_date", "available_from", "available_until", "allow_late_submission",
    "late_penalty_percent", "attachments", "is_published",
)

SUBMISSION_STATE_FIELDS = (
    "content", "attachments", "submitted_at", "is_late", "grade", "points_earned",
    "feedback", "graded_by", "graded_at", "status",
)

def _column_value(value):
    # Enums are stored as their plain string value
    return getattr(value, "value", value)

class AssignmentRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, assignment_id: int) -> Optional[Assignment]:
        row = self.db.query(models.Assignment).filter(models.Assignment.id == assignment_id).first()
        return Assignment.model_validate(row) if row else None

    def list(
        self,
        teacher_id: Optional[int] = None,
        class_id: Optional[int] = None,
        subject_id: Optional[int] = None,
        type: Optional[str] = None,
        is_published: Optional[bool] = None,
        due_before=None,
        due_after=None,
    ) -> List[Assignment]:
        query = self.db.query(models.Assignment)
        if teacher_id is not None:
            query = query.filter(models.Assignment.teacher_id == teacher_id)
        if class_id is not None:
            query = query.filter(models.Assignment.class_id == class_id)
        if subject_id is not None:
            query = query.filter(models.Assignment.subject_id == subject_id)
        if type is not None:
            query = query.filter(models.Assignment.type == _column_value(type))
        if is_published is not None:
            query = query.filter(models.Assignment.is_published == is_published)
        if due_before is not None:
            query = query.filter(models.Assignment.due_date < due_before)
        if due_after is not None:
            query = query.filter(models.Assignment.due_date >= due_after)
        rows = query.order_by(models.Assignment.due_date.desc()).all()
        return [Assignment.model_validate(row) for row in rows]

    def add(self, assignment: Assignment) -> Assignment:
        row = models.Assignment(**{f: _column_value(getattr(assignment, f)) for f in ASSIGNMENT_FIELDS})
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        logger.info("Created assignment %s '%s'", row.id, row.title)
        return Assignment.model_validate(row)

    def save(self, assignment: Assignment, commit: bool = True) -> Assignment:
        row = self.db.query(models.Assignment).filter(models.Assignment.id == assignment.id).one()
        for field in ASSIGNMENT_FIELDS:
            setattr(row, field, _column_value(getattr(assignment, field)))
        if commit:
            self.db.commit()
        else:
            self.db.flush()
        self.db.refresh(row)
        return Assignment.model_validate(row)

    def delete(self, assignment_id: int):
        self.db.query(models.Assignment).filter(models.Assignment.id == assignment_id).delete()
        self.db.commit()
        logger.info("Deleted assignment %s", assignment_id)

    def pending_grading_counts(self, teacher_id: Optional[int] = None) -> List[tuple]:
        """(assignment, count) pairs for assignments with submitted work still ungraded."""
        query = (
            self.db.query(models.Assignment, func.count(models.Submission.id))
            .join(models.Submission)
            .filter(
                models.Submission.grade.is_(None),
                models.Submission.status != models.SubmissionStatus.DRAFT.value,
            )
        )
        if teacher_id is not None:
            query = query.filter(models.Assignment.teacher_id == teacher_id)
        rows = query.group_by(models.Assignment.id).order_by(models.Assignment.due_date).all()
        return [(Assignment.model_validate(row), count) for row, count in rows]

class SubmissionRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, submission_id: int) -> Optional[Submission]:
        row = self.db.query(models.Submission).filter(models.Submission.id == submission_id).first()
        return Submission.model_validate(row) if row else None

    def for_assignment(self, assignment_id: int) -> List[Submission]:
        rows = (
            self.db.query(models.Submission)
            .filter(models.Submission.assignment_id == assignment_id)
            .order_by(models.Submission.submitted_at.desc(), models.Submission.id)
            .all()
        )
        return [Submission.model_validate(row) for row in rows]

    def for_student(self, student_id: int) -> List[Submission]:
        rows = self.db.query(models.Submission).filter(models.Submission.student_id == student_id).all()
        return [Submission.model_validate(row) for row in rows]

    def count_for_assignment(self, assignment_id: int) -> int:
        return self.db.query(models.Submission).filter(models.Submission.assignment_id == assignment_id).count()

    def add(self, submission: Submission) -> Submission:
        """Insert a new draft. The unique constraint decides races between two inserts."""
        row = models.Submission(
            assignment_id=submission.assignment_id,
            student_id=submission.student_id,
            **{f: _column_value(getattr(submission, f)) for f in SUBMISSION_STATE_FIELDS},
            version=1,
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Duplicate submission for assignment %s by student %s", submission.assignment_id, submission.student_id)
            raise DuplicateSubmissionError(submission.assignment_id, submission.student_id)
        self.db.refresh(row)
        return Submission.model_validate(row)

    def save(self, submission: Submission, commit: bool = True) -> Submission:
        """
        Write a transitioned submission back, only if nobody else has written
        it since it was loaded. ``submission.version`` is the version it was
        loaded at. With ``commit=False`` the write joins the caller's transaction.
        """
        values = {f: _column_value(getattr(submission, f)) for f in SUBMISSION_STATE_FIELDS}
        values["version"] = submission.version + 1
        result = self.db.execute(
            update(models.Submission)
            .where(
                models.Submission.id == submission.id,
                models.Submission.version == submission.version,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.db.rollback()
            logger.warning("Stale write to submission %s at version %s", submission.id, submission.version)
            raise StaleSubmissionError(submission.id, submission.version)
        if commit:
            self.db.commit()
        return submission.model_copy(update={"version": submission.version + 1})

class ClassRoster:
    def __init__(self, db: Session):
        self.db = db

    def count_students(self, class_id: int) -> int:
        return self.db.query(models.ClassEnrollment).filter(models.ClassEnrollment.class_id == class_id).count()

    def enroll(self, class_id: int, student_id: int):
        self.db.add(models.ClassEnrollment(class_id=class_id, student_id=student_id))
        self.db.commit()
