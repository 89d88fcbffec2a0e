"""
Outcome values for operations that can be refused.

A refused transition is an expected outcome, not a crash, so it comes back as
an ``Err`` the caller has to look at instead of an exception it might forget
to catch.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union, Optional

T = TypeVar("T")
E = TypeVar("E")

@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def ok(self) -> bool:
        return False

Result = Union[Ok[T], Err[E]]

@dataclass(frozen=True)
class InvalidStateTransition:
    action: str
    current_status: str
    allowed_from: tuple = ()

    @property
    def message(self) -> str:
        allowed = ", ".join(self.allowed_from)
        return f"Cannot {self.action} a submission in '{self.current_status}' state (allowed from: {allowed})"

@dataclass(frozen=True)
class AssignmentUnavailable:
    assignment_id: Optional[int]

    @property
    def message(self) -> str:
        return "Assignment is not available for submission"

@dataclass(frozen=True)
class LateSubmissionNotAllowed:
    assignment_id: Optional[int]

    @property
    def message(self) -> str:
        return "Late submissions not allowed"
