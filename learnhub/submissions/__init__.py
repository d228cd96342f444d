"""Submission lifecycle: submit, edit, mentor review, XP reward, comments."""

from learnhub.submissions.engine import SubmissionEngine
from learnhub.submissions.service import ReviewOutcome, SubmissionService, VisibleSubmissions
from learnhub.submissions.state_machine import (
    VALID_TRANSITIONS,
    can_transition,
    validate_transition,
)

__all__ = [
    "ReviewOutcome",
    "SubmissionEngine",
    "SubmissionService",
    "VALID_TRANSITIONS",
    "VisibleSubmissions",
    "can_transition",
    "validate_transition",
]
