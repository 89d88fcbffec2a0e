from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, Boolean, JSON, Numeric, CheckConstraint, UniqueConstraint, Index
from sqlalchemy.orm import relationship, declarative_base
from datetime import datetime
import enum

Base = declarative_base()

class AssignmentType(str, enum.Enum):
    HOMEWORK = "homework"
    QUIZ = "quiz"
    EXAM = "exam"
    PROJECT = "project"
    LAB = "lab"

class SubmissionStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    GRADED = "graded"
    RETURNED = "returned"

class ClassEnrollment(Base):
    __tablename__ = "class_enrollments"

    class_id = Column(Integer, primary_key=True)
    student_id = Column(Integer, primary_key=True)
    enrolled_at = Column(DateTime, default=datetime.utcnow)

class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    instructions = Column(Text, nullable=True)
    class_id = Column(Integer, nullable=False)
    subject_id = Column(Integer, nullable=False)
    teacher_id = Column(Integer, nullable=False, index=True)
    type = Column(String, nullable=False, default=AssignmentType.HOMEWORK.value)
    max_points = Column(Integer, nullable=False, default=100)
    due_date = Column(DateTime, nullable=False, index=True)
    available_from = Column(DateTime, nullable=True)
    available_until = Column(DateTime, nullable=True)
    allow_late_submission = Column(Boolean, nullable=False, default=False)
    late_penalty_percent = Column(Integer, nullable=False, default=0)
    attachments = Column(JSON, nullable=False, default=list)
    is_published = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    submissions = relationship("Submission", back_populates="assignment")

    __table_args__ = (
        CheckConstraint(type.in_([t.value for t in AssignmentType]), name="assignment_type_check"),
        CheckConstraint("max_points > 0", name="max_points_positive"),
        CheckConstraint("late_penalty_percent >= 0 AND late_penalty_percent <= 100", name="late_penalty_range"),
        Index("ix_assignments_class_subject", "class_id", "subject_id"),
    )

class Submission(Base):
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, nullable=False, index=True)
    content = Column(Text, nullable=True)
    attachments = Column(JSON, nullable=False, default=list)
    submitted_at = Column(DateTime, nullable=True)
    is_late = Column(Boolean, nullable=False, default=False)
    grade = Column(Numeric(5, 2, asdecimal=False), nullable=True)
    points_earned = Column(Integer, nullable=True)
    feedback = Column(Text, nullable=True)
    graded_by = Column(Integer, nullable=True)
    graded_at = Column(DateTime, nullable=True)
    status = Column(String, nullable=False, default=SubmissionStatus.DRAFT.value, index=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=datetime.utcnow)

    assignment = relationship("Assignment", back_populates="submissions")

    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="unique_submission_per_student"),
        CheckConstraint(status.in_([s.value for s in SubmissionStatus]), name="submission_status_check"),
    )
