from datetime import timedelta
from gradebook.services.availability import is_available, is_overdue, can_submit_late, days_until_due, days_late
from tests.conftest import NOW

def test_unpublished_assignment_is_never_available(make_assignment):
    assignment = make_assignment(
        is_published=False,
        available_from=NOW - timedelta(days=1),
        available_until=NOW + timedelta(days=10),
    )
    assert not is_available(assignment, NOW)

def test_published_without_window_is_available(make_assignment):
    assert is_available(make_assignment(), NOW)

def test_not_available_before_window_opens(make_assignment):
    assignment = make_assignment(available_from=NOW + timedelta(hours=1))
    assert not is_available(assignment, NOW)
    assert is_available(assignment, NOW + timedelta(hours=1))

def test_not_available_after_window_closes(make_assignment):
    assignment = make_assignment(available_until=NOW - timedelta(seconds=1))
    assert not is_available(assignment, NOW)

def test_overdue_is_strict(make_assignment):
    assignment = make_assignment(due_date=NOW)
    assert not is_overdue(assignment, NOW)
    assert is_overdue(assignment, NOW + timedelta(seconds=1))

def test_late_submission_needs_permission(make_assignment):
    assert not can_submit_late(make_assignment(allow_late_submission=False), NOW)
    assert can_submit_late(make_assignment(allow_late_submission=True), NOW)

def test_late_submission_closes_with_window(make_assignment):
    assignment = make_assignment(due_date=NOW - timedelta(days=2), available_until=NOW - timedelta(days=1))
    assert not can_submit_late(assignment, NOW)

def test_late_submission_allowed_inside_window_after_due(make_assignment):
    assignment = make_assignment(due_date=NOW - timedelta(days=1), available_until=NOW + timedelta(days=1))
    assert is_overdue(assignment, NOW)
    assert can_submit_late(assignment, NOW)

def test_days_until_due_truncates(make_assignment):
    assert days_until_due(make_assignment(due_date=NOW + timedelta(days=2, hours=18)), NOW) == 2
    assert days_until_due(make_assignment(due_date=NOW + timedelta(hours=5)), NOW) == 0

def test_days_until_due_is_negative_when_overdue(make_assignment):
    assert days_until_due(make_assignment(due_date=NOW - timedelta(days=1, hours=12)), NOW) == -1
    assert days_until_due(make_assignment(due_date=NOW - timedelta(days=3)), NOW) == -3

def test_days_late(make_assignment):
    assignment = make_assignment(due_date=NOW)
    assert days_late(NOW + timedelta(days=3, hours=2), assignment) == 3
    assert days_late(NOW - timedelta(days=1), assignment) == 0
    assert days_late(None, assignment) == 0
