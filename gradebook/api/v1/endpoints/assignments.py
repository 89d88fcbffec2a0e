from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from datetime import timedelta
import logging
from gradebook.core import database
from gradebook.core.auth import Actor, get_current_actor
from gradebook.core.clock import Clock, get_clock
from gradebook.models.entities import Assignment, Submission
from gradebook.models.postgresql import AssignmentType
from gradebook.schemas import assignment as schemas
from gradebook.schemas.analytics import GradingQueueItem
from gradebook.services import availability, submission_stats
from gradebook.services.analytics_service import AnalyticsService, letter_grade
from gradebook.services.grading_service import GradingService
from gradebook.services.repository import AssignmentRepository, SubmissionRepository, ClassRoster, DuplicateSubmissionError, StaleSubmissionError
from gradebook.services.results import Err, InvalidStateTransition, LateSubmissionNotAllowed
from gradebook.utils.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter()
types_router = APIRouter()

NULLABLE_FIELDS = ("instructions", "available_from", "available_until")

ASSIGNMENT_TYPE_LABELS = {
    AssignmentType.HOMEWORK: "Homework",
    AssignmentType.QUIZ: "Quiz",
    AssignmentType.EXAM: "Exam",
    AssignmentType.PROJECT: "Project",
    AssignmentType.LAB: "Lab Work",
}

def _iso(value):
    return value.isoformat() if value else None

def _load_assignment(db: Session, assignment_id: int) -> Assignment:
    assignment = AssignmentRepository(db).get(assignment_id)
    if not assignment:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return assignment

def _load_submission(db: Session, assignment: Assignment, submission_id: int) -> Submission:
    submission = SubmissionRepository(db).get(submission_id)
    if not submission:
        raise HTTPException(status_code=404, detail="Submission not found")
    if submission.assignment_id != assignment.id:
        raise HTTPException(status_code=422, detail="Submission does not belong to this assignment.")
    return submission

def _unwrap(result):
    """Turns a refused transition into the matching HTTP error."""
    if isinstance(result, Err):
        error = result.error
        if isinstance(error, InvalidStateTransition):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=error.message)
        if isinstance(error, LateSubmissionNotAllowed):
            raise HTTPException(status_code=400, detail=error.message)
        raise HTTPException(status_code=403, detail=error.message)
    return result.value

def _stats(db: Session, assignment: Assignment, submissions=None):
    if submissions is None:
        submissions = SubmissionRepository(db).for_assignment(assignment.id)
    total_students = ClassRoster(db).count_students(assignment.class_id)
    return submission_stats.summarize(submissions, total_students).model_dump()

def _assignment_summary(assignment: Assignment):
    return {
        "id": assignment.id,
        "title": assignment.title,
        "description": assignment.description,
        "type": assignment.type.value,
        "max_points": assignment.max_points,
        "due_date": _iso(assignment.due_date),
        "is_published": assignment.is_published,
        "class_id": assignment.class_id,
        "subject_id": assignment.subject_id,
        "teacher_id": assignment.teacher_id,
    }

def _submission_payload(submission: Submission, assignment: Assignment):
    return {
        "id": submission.id,
        "student_id": submission.student_id,
        "status": submission.status.value,
        "content": submission.content,
        "attachments": submission.attachments,
        "grade": submission.grade,
        "letter_grade": letter_grade(submission.grade),
        "points_earned": submission.points_earned,
        "feedback": submission.feedback,
        "is_late": submission.is_late,
        "days_late": availability.days_late(submission.submitted_at, assignment),
        "submitted_at": _iso(submission.submitted_at),
        "graded_at": _iso(submission.graded_at),
        "graded_by": submission.graded_by,
        "version": submission.version,
    }

@router.get("")
def list_assignments(
    class_id: Optional[int] = None,
    subject_id: Optional[int] = None,
    type: Optional[AssignmentType] = None,
    status: Optional[str] = None,
    db: Session = Depends(database.get_db),
    clock: Clock = Depends(get_clock),
    current_actor: Actor = Depends(get_current_actor),
):
    now = clock.now()
    filters = {"class_id": class_id, "subject_id": subject_id, "type": type}
    if current_actor.role == "teacher":
        filters["teacher_id"] = current_actor.id
    if status == "published":
        filters["is_published"] = True
    elif status == "draft":
        filters["is_published"] = False
    elif status == "overdue":
        filters.update(is_published=True, due_before=now)
    elif status == "upcoming":
        filters.update(is_published=True, due_after=now)

    assignments = AssignmentRepository(db).list(**filters)
    if status == "upcoming":
        assignments = [a for a in assignments if a.due_date <= now + timedelta(days=7)]

    data = []
    for a in assignments:
        submissions = SubmissionRepository(db).for_assignment(a.id)
        item = _assignment_summary(a)
        item.update(
            is_overdue=availability.is_overdue(a, now),
            days_until_due=availability.days_until_due(a, now),
            submissions_count=len(submissions),
            submission_stats=_stats(db, a, submissions),
        )
        data.append(item)
    return success_response(data=data)

@router.post("", status_code=201)
def create_assignment(
    body: schemas.AssignmentCreate,
    db: Session = Depends(database.get_db),
    clock: Clock = Depends(get_clock),
    current_actor: Actor = Depends(get_current_actor),
):
    if body.due_date <= clock.now():
        raise HTTPException(status_code=422, detail="Due date must be in the future.")
    assignment = Assignment(**body.model_dump(), teacher_id=current_actor.id)
    created = AssignmentRepository(db).add(assignment)
    return success_response(data=_assignment_summary(created), message="Assignment created successfully.")

@router.get("/grading-queue")
def grading_queue(
    db: Session = Depends(database.get_db),
    clock: Clock = Depends(get_clock),
    current_actor: Actor = Depends(get_current_actor),
):
    """Assignments that have submitted work nobody has graded yet, soonest due first."""
    teacher_id = current_actor.id if current_actor.role == "teacher" else None
    now = clock.now()
    queue = [
        GradingQueueItem(
            id=a.id,
            title=a.title,
            type=a.type.value,
            due_date=_iso(a.due_date),
            is_overdue=availability.is_overdue(a, now),
            class_id=a.class_id,
            subject_id=a.subject_id,
            pending_submissions=count,
        ).model_dump()
        for a, count in AssignmentRepository(db).pending_grading_counts(teacher_id)
    ]
    return success_response(data=queue)

@router.get("/{assignment_id}")
def get_assignment(
    assignment_id: int,
    db: Session = Depends(database.get_db),
    clock: Clock = Depends(get_clock),
    current_actor: Actor = Depends(get_current_actor),
):
    assignment = _load_assignment(db, assignment_id)
    submissions = SubmissionRepository(db).for_assignment(assignment.id)
    now = clock.now()

    data = _assignment_summary(assignment)
    data.update(
        instructions=assignment.instructions,
        available_from=_iso(assignment.available_from),
        available_until=_iso(assignment.available_until),
        allow_late_submission=assignment.allow_late_submission,
        late_penalty_percent=assignment.late_penalty_percent,
        attachments=assignment.attachments,
        is_available=availability.is_available(assignment, now),
        is_overdue=availability.is_overdue(assignment, now),
        can_submit_late=availability.can_submit_late(assignment, now),
        days_until_due=availability.days_until_due(assignment, now),
        submissions_count=len(submissions),
        submission_stats=_stats(db, assignment, submissions),
        average_grade=submission_stats.average_grade(submissions),
        submissions=[_submission_payload(s, assignment) for s in submissions],
    )
    return success_response(data=data)

@router.patch("/{assignment_id}")
def update_assignment(
    assignment_id: int,
    body: schemas.AssignmentUpdate,
    db: Session = Depends(database.get_db),
    clock: Clock = Depends(get_clock),
    current_actor: Actor = Depends(get_current_actor),
):
    assignment = _load_assignment(db, assignment_id)
    changes = {
        field: value for field, value in body.model_dump(exclude_unset=True).items()
        if value is not None or field in NULLABLE_FIELDS
    }
    updated = assignment.model_copy(update=changes)
    if updated.available_from and updated.available_until and updated.available_from > updated.available_until:
        raise HTTPException(status_code=422, detail="Available from date must not be after available until date.")

    saved = AssignmentRepository(db).save(updated, commit=False)
    if (saved.max_points, saved.late_penalty_percent) != (assignment.max_points, assignment.late_penalty_percent):
        try:
            GradingService(db, clock).rescore(saved)
        except StaleSubmissionError as e:
            raise HTTPException(status_code=409, detail=str(e))
    db.commit()
    return success_response(data=_assignment_summary(saved), message="Assignment updated successfully.")

@router.delete("/{assignment_id}")
def delete_assignment(
    assignment_id: int,
    db: Session = Depends(database.get_db),
    current_actor: Actor = Depends(get_current_actor),
):
    assignment = _load_assignment(db, assignment_id)
    if SubmissionRepository(db).count_for_assignment(assignment.id) > 0:
        raise HTTPException(status_code=422, detail="Cannot delete assignment with submissions. Please remove submissions first.")
    AssignmentRepository(db).delete(assignment.id)
    return success_response(message="Assignment deleted successfully.")

def _set_published(db: Session, assignment_id: int, published: bool):
    assignment = _load_assignment(db, assignment_id)
    saved = AssignmentRepository(db).save(assignment.model_copy(update={"is_published": published}))
    return {"id": saved.id, "title": saved.title, "is_published": saved.is_published}

@router.post("/{assignment_id}/publish")
def publish_assignment(
    assignment_id: int,
    db: Session = Depends(database.get_db),
    current_actor: Actor = Depends(get_current_actor),
):
    return success_response(data=_set_published(db, assignment_id, True), message="Assignment published successfully.")

@router.post("/{assignment_id}/unpublish")
def unpublish_assignment(
    assignment_id: int,
    db: Session = Depends(database.get_db),
    current_actor: Actor = Depends(get_current_actor),
):
    return success_response(data=_set_published(db, assignment_id, False), message="Assignment unpublished successfully.")

@router.get("/{assignment_id}/submissions")
def list_submissions(
    assignment_id: int,
    db: Session = Depends(database.get_db),
    current_actor: Actor = Depends(get_current_actor),
):
    assignment = _load_assignment(db, assignment_id)
    submissions = SubmissionRepository(db).for_assignment(assignment.id)
    return success_response(data={
        "assignment_id": assignment.id,
        "assignment_title": assignment.title,
        "submissions": [_submission_payload(s, assignment) for s in submissions],
        "total_submissions": len(submissions),
        "submission_stats": _stats(db, assignment, submissions),
    })

@router.post("/{assignment_id}/submissions", status_code=201)
def start_submission(
    assignment_id: int,
    body: schemas.SubmissionCreate,
    db: Session = Depends(database.get_db),
    clock: Clock = Depends(get_clock),
    current_actor: Actor = Depends(get_current_actor),
):
    assignment = _load_assignment(db, assignment_id)
    try:
        result = GradingService(db, clock).start_draft(assignment, current_actor.id, body.content, body.attachments)
    except DuplicateSubmissionError:
        raise HTTPException(status_code=409, detail="A submission for this assignment already exists")
    return success_response(data=_submission_payload(_unwrap(result), assignment), message="Draft created.")

@router.patch("/{assignment_id}/submissions/{submission_id}")
def edit_submission(
    assignment_id: int,
    submission_id: int,
    body: schemas.SubmissionUpdate,
    db: Session = Depends(database.get_db),
    clock: Clock = Depends(get_clock),
    current_actor: Actor = Depends(get_current_actor),
):
    assignment = _load_assignment(db, assignment_id)
    submission = _load_submission(db, assignment, submission_id)
    try:
        result = GradingService(db, clock).edit_draft(submission, **body.model_dump(exclude_unset=True))
    except StaleSubmissionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return success_response(data=_submission_payload(_unwrap(result), assignment), message="Draft updated.")

@router.post("/{assignment_id}/submissions/{submission_id}/submit")
def submit_submission(
    assignment_id: int,
    submission_id: int,
    db: Session = Depends(database.get_db),
    clock: Clock = Depends(get_clock),
    current_actor: Actor = Depends(get_current_actor),
):
    assignment = _load_assignment(db, assignment_id)
    submission = _load_submission(db, assignment, submission_id)
    try:
        result = GradingService(db, clock).submit(submission, assignment)
    except StaleSubmissionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return success_response(data=_submission_payload(_unwrap(result), assignment), message="Assignment submitted.")

@router.post("/{assignment_id}/submissions/{submission_id}/grade")
def grade_submission(
    assignment_id: int,
    submission_id: int,
    body: schemas.GradeRequest,
    db: Session = Depends(database.get_db),
    clock: Clock = Depends(get_clock),
    current_actor: Actor = Depends(get_current_actor),
):
    assignment = _load_assignment(db, assignment_id)
    submission = _load_submission(db, assignment, submission_id)
    if body.version is not None and body.version != submission.version:
        raise HTTPException(status_code=409, detail="Submission was changed since it was loaded; reload and grade again")
    try:
        result = GradingService(db, clock).grade(submission, assignment, body.grade, body.feedback, current_actor.id)
    except StaleSubmissionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return success_response(data=_submission_payload(_unwrap(result), assignment), message="Submission graded successfully.")

@router.post("/{assignment_id}/submissions/{submission_id}/return")
def return_submission(
    assignment_id: int,
    submission_id: int,
    db: Session = Depends(database.get_db),
    clock: Clock = Depends(get_clock),
    current_actor: Actor = Depends(get_current_actor),
):
    assignment = _load_assignment(db, assignment_id)
    submission = _load_submission(db, assignment, submission_id)
    try:
        result = GradingService(db, clock).return_to_student(submission)
    except StaleSubmissionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return success_response(data=_submission_payload(_unwrap(result), assignment), message="Submission returned to student.")

@router.get("/{assignment_id}/analytics")
def get_assignment_analytics(
    assignment_id: int,
    db: Session = Depends(database.get_db),
    current_actor: Actor = Depends(get_current_actor),
):
    assignment = _load_assignment(db, assignment_id)
    report = AnalyticsService(db).get_assignment_analytics(assignment)
    return success_response(data=report.model_dump())

@types_router.get("/assignment-types")
def get_assignment_types():
    return success_response(data=[
        {"value": t.value, "label": label} for t, label in ASSIGNMENT_TYPE_LABELS.items()
    ])
