from pydantic import BaseModel
from typing import Optional, Dict

class SubmissionStats(BaseModel):
    total_students: int
    submitted_count: int
    graded_count: int
    late_count: int
    submission_rate: float
    grading_progress: float

class GradeSummary(BaseModel):
    average: Optional[float] = None
    median: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    std_deviation: float = 0

class PerformanceInsights(BaseModel):
    pass_rate: float
    excellence_rate: float
    late_submission_rate: float

class AssignmentAnalytics(BaseModel):
    assignment_id: Optional[int] = None
    assignment_title: str
    total_students: int
    submission_stats: SubmissionStats
    grade_analytics: GradeSummary
    grade_distribution: Dict[str, int]
    performance_insights: PerformanceInsights

class GradingQueueItem(BaseModel):
    id: int
    title: str
    type: str
    due_date: str
    is_overdue: bool
    class_id: int
    subject_id: int
    pending_submissions: int
