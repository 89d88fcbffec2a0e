from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime
from gradebook.core.clock import to_naive_utc
from gradebook.models.postgresql import AssignmentType

TITLE_PATTERN = r"^[a-zA-Z0-9\s\-_.,!?()]+$"

class AssignmentBase(BaseModel):
    title: str = Field(..., min_length=3, max_length=255, pattern=TITLE_PATTERN)
    description: str = Field(..., min_length=10, max_length=5000)
    instructions: Optional[str] = Field(None, max_length=10000)
    class_id: int
    subject_id: int
    type: AssignmentType
    max_points: int = Field(..., ge=1, le=1000)
    due_date: datetime
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None
    allow_late_submission: bool = False
    late_penalty_percent: int = Field(0, ge=0, le=100)
    attachments: List[str] = Field(default_factory=list, max_length=10)
    is_published: bool = False

    @field_validator("due_date", "available_from", "available_until")
    @classmethod
    def normalize_timezone(cls, value):
        return to_naive_utc(value)

    @field_validator("attachments")
    @classmethod
    def check_attachment_refs(cls, value):
        for ref in value:
            if len(ref) > 500:
                raise ValueError("Attachment references cannot exceed 500 characters.")
        return value

class AssignmentCreate(AssignmentBase):
    @model_validator(mode="after")
    def check_window(self):
        if self.available_from and self.available_from >= self.due_date:
            raise ValueError("Available from date must be before due date.")
        if self.available_until and self.available_until <= self.due_date:
            raise ValueError("Available until date must be after due date.")
        return self

class AssignmentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=255, pattern=TITLE_PATTERN)
    description: Optional[str] = Field(None, min_length=10, max_length=5000)
    instructions: Optional[str] = Field(None, max_length=10000)
    class_id: Optional[int] = None
    subject_id: Optional[int] = None
    type: Optional[AssignmentType] = None
    max_points: Optional[int] = Field(None, ge=1, le=1000)
    due_date: Optional[datetime] = None
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None
    allow_late_submission: Optional[bool] = None
    late_penalty_percent: Optional[int] = Field(None, ge=0, le=100)
    attachments: Optional[List[str]] = Field(None, max_length=10)
    is_published: Optional[bool] = None

    @field_validator("due_date", "available_from", "available_until")
    @classmethod
    def normalize_timezone(cls, value):
        return to_naive_utc(value)

class SubmissionCreate(BaseModel):
    content: Optional[str] = None
    attachments: List[str] = Field(default_factory=list, max_length=10)

class SubmissionUpdate(BaseModel):
    content: Optional[str] = None
    attachments: Optional[List[str]] = Field(None, max_length=10)

class GradeRequest(BaseModel):
    # Out-of-range grades are clamped when recorded, not refused here
    grade: float = Field(..., allow_inf_nan=False)
    feedback: Optional[str] = None
    version: Optional[int] = None
