from sqlalchemy.orm import Session
from typing import Iterable, List, Dict, Optional
import statistics
from gradebook.core.numbers import percentage
from gradebook.models.entities import Assignment, Submission
from gradebook.schemas.analytics import AssignmentAnalytics, GradeSummary, PerformanceInsights
from gradebook.services import submission_stats
from gradebook.services.repository import SubmissionRepository, ClassRoster

PASSING_GRADE = 60
EXCELLENT_GRADE = 90

# Lower bound of each bucket, highest first
GRADE_BUCKETS = (
    ("A (90-100)", "A", 90),
    ("B (80-89)", "B", 80),
    ("C (70-79)", "C", 70),
    ("D (60-69)", "D", 60),
    ("F (0-59)", "F", None),
)

def letter_grade(grade: Optional[float]) -> Optional[str]:
    if grade is None:
        return None
    for _, letter, lower in GRADE_BUCKETS:
        if lower is None or grade >= lower:
            return letter

def graded_values(submissions: Iterable[Submission]) -> List[float]:
    return [s.grade for s in submissions if s.grade is not None]

def grade_summary(grades: List[float]) -> GradeSummary:
    """Average, median, extremes and sample standard deviation of a set of grades."""
    if not grades:
        return GradeSummary()
    std_deviation = statistics.stdev(grades) if len(grades) > 1 else 0
    return GradeSummary(
        average=sum(grades) / len(grades),
        median=statistics.median(grades),
        min=min(grades),
        max=max(grades),
        std_deviation=std_deviation,
    )

def grade_distribution(grades: List[float]) -> Dict[str, int]:
    dist = {label: 0 for label, _, _ in GRADE_BUCKETS}
    for g in grades:
        for label, _, lower in GRADE_BUCKETS:
            if lower is None or g >= lower:
                dist[label] += 1
                break
    return dist

def performance_insights(submissions: List[Submission]) -> PerformanceInsights:
    """Pass and excellence rates over graded work; late rate over every submission, drafts included."""
    grades = graded_values(submissions)
    late = sum(1 for s in submissions if s.is_late)
    return PerformanceInsights(
        pass_rate=percentage(sum(1 for g in grades if g >= PASSING_GRADE), len(grades)),
        excellence_rate=percentage(sum(1 for g in grades if g >= EXCELLENT_GRADE), len(grades)),
        late_submission_rate=percentage(late, len(submissions)),
    )

def build_report(assignment: Assignment, submissions: List[Submission], total_students: int) -> AssignmentAnalytics:
    grades = graded_values(submissions)
    return AssignmentAnalytics(
        assignment_id=assignment.id,
        assignment_title=assignment.title,
        total_students=total_students,
        submission_stats=submission_stats.summarize(submissions, total_students),
        grade_analytics=grade_summary(grades),
        grade_distribution=grade_distribution(grades),
        performance_insights=performance_insights(submissions),
    )

class AnalyticsService:
    def __init__(self, db: Session):
        self.db = db
        self.submissions = SubmissionRepository(db)
        self.roster = ClassRoster(db)

    def get_assignment_analytics(self, assignment: Assignment) -> AssignmentAnalytics:
        """Grade statistics for one assignment, computed from a single read of its submissions."""
        submissions = self.submissions.for_assignment(assignment.id)
        total_students = self.roster.count_students(assignment.class_id)
        return build_report(assignment, submissions, total_students)
