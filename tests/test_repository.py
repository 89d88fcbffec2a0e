import pytest
from datetime import timedelta
from gradebook.models.entities import Submission
from gradebook.models.postgresql import SubmissionStatus
from gradebook.services import lifecycle
from gradebook.services.repository import (
    AssignmentRepository, SubmissionRepository, ClassRoster, DuplicateSubmissionError, StaleSubmissionError,
)
from tests.conftest import NOW, CLASS_ID, STUDENT_ID, TEACHER_ID

@pytest.fixture
def stored_assignment(db, make_assignment):
    return AssignmentRepository(db).add(make_assignment(id=None))

def test_assignment_round_trip(db, stored_assignment):
    loaded = AssignmentRepository(db).get(stored_assignment.id)
    assert loaded == stored_assignment
    assert loaded.type.value == "homework"
    assert loaded.attachments == []

def test_missing_rows_are_none(db):
    assert AssignmentRepository(db).get(404) is None
    assert SubmissionRepository(db).get(404) is None

def test_one_submission_per_student(db, stored_assignment):
    repo = SubmissionRepository(db)
    repo.add(Submission(assignment_id=stored_assignment.id, student_id=STUDENT_ID))
    with pytest.raises(DuplicateSubmissionError):
        repo.add(Submission(assignment_id=stored_assignment.id, student_id=STUDENT_ID))
    assert repo.count_for_assignment(stored_assignment.id) == 1

def test_save_bumps_version(db, stored_assignment):
    repo = SubmissionRepository(db)
    draft = repo.add(Submission(assignment_id=stored_assignment.id, student_id=STUDENT_ID))
    assert draft.version == 1
    saved = repo.save(lifecycle.submit(draft, stored_assignment, NOW).value)
    assert saved.version == 2
    reloaded = repo.get(draft.id)
    assert reloaded.version == 2
    assert reloaded.status == SubmissionStatus.SUBMITTED
    assert reloaded.submitted_at == NOW

def test_concurrent_grades_do_not_overwrite(db, session_factory, stored_assignment):
    repo = SubmissionRepository(db)
    draft = repo.add(Submission(assignment_id=stored_assignment.id, student_id=STUDENT_ID))
    submitted = repo.save(lifecycle.submit(draft, stored_assignment, NOW).value)

    other_session = session_factory()
    try:
        other_copy = SubmissionRepository(other_session).get(submitted.id)
        first = lifecycle.grade(submitted, stored_assignment, 91, "first", TEACHER_ID, NOW).value
        second = lifecycle.grade(other_copy, stored_assignment, 40, "second", TEACHER_ID + 1, NOW).value
        repo.save(first)
        with pytest.raises(StaleSubmissionError):
            SubmissionRepository(other_session).save(second)
    finally:
        other_session.close()

    final = repo.get(submitted.id)
    assert final.grade == 91
    assert final.feedback == "first"

def test_roster_count(db):
    roster = ClassRoster(db)
    for student_id in (1, 2, 3):
        roster.enroll(CLASS_ID, student_id)
    roster.enroll(CLASS_ID + 1, 4)
    assert roster.count_students(CLASS_ID) == 3
    assert roster.count_students(999) == 0

def test_pending_grading_counts(db, make_assignment):
    assignments = AssignmentRepository(db)
    first = assignments.add(make_assignment(id=None, due_date=NOW + timedelta(days=2)))
    second = assignments.add(make_assignment(id=None, title="Lab report", due_date=NOW + timedelta(days=1)))
    repo = SubmissionRepository(db)
    for student_id in (1, 2):
        draft = repo.add(Submission(assignment_id=first.id, student_id=student_id))
        repo.save(lifecycle.submit(draft, first, NOW).value)
    repo.add(Submission(assignment_id=second.id, student_id=1))

    pending = assignments.pending_grading_counts()
    assert [(a.id, count) for a, count in pending] == [(first.id, 2)]

def test_submissions_by_student(db, make_assignment):
    assignments = AssignmentRepository(db)
    first = assignments.add(make_assignment(id=None))
    second = assignments.add(make_assignment(id=None, title="Lab report"))
    repo = SubmissionRepository(db)
    repo.add(Submission(assignment_id=first.id, student_id=STUDENT_ID))
    repo.add(Submission(assignment_id=second.id, student_id=STUDENT_ID))
    repo.add(Submission(assignment_id=first.id, student_id=STUDENT_ID + 1))
    assert sorted(s.assignment_id for s in repo.for_student(STUDENT_ID)) == [first.id, second.id]
