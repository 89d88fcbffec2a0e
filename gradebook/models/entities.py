"""
Immutable views of assignments and submissions.

Rows are loaded from the database into these models; every state change
produces a new instance (``model_copy(update=...)``) that the repository
writes back.
"""

from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from gradebook.models.postgresql import AssignmentType, SubmissionStatus

class Assignment(BaseModel):
    id: Optional[int] = None
    title: str
    description: str = ""
    instructions: Optional[str] = None
    class_id: int
    subject_id: int
    teacher_id: int
    type: AssignmentType = AssignmentType.HOMEWORK
    max_points: int = 100
    due_date: datetime
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None
    allow_late_submission: bool = False
    late_penalty_percent: int = 0
    attachments: List[str] = []
    is_published: bool = False

    class Config:
        frozen = True
        from_attributes = True

class Submission(BaseModel):
    id: Optional[int] = None
    assignment_id: int
    student_id: int
    content: Optional[str] = None
    attachments: List[str] = []
    submitted_at: Optional[datetime] = None
    is_late: bool = False
    grade: Optional[float] = None
    points_earned: Optional[int] = None
    feedback: Optional[str] = None
    graded_by: Optional[int] = None
    graded_at: Optional[datetime] = None
    status: SubmissionStatus = SubmissionStatus.DRAFT
    version: int = 1

    class Config:
        frozen = True
        from_attributes = True

    @property
    def is_submitted(self) -> bool:
        return self.status != SubmissionStatus.DRAFT

    @property
    def is_graded(self) -> bool:
        return self.status in (SubmissionStatus.GRADED, SubmissionStatus.RETURNED)
