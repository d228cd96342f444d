"""Unit tests for submission state machine transitions."""

import pytest

from learnhub.exceptions import InvalidStateError
from learnhub.submissions.state_machine import (
    VALID_TRANSITIONS,
    can_transition,
    permits_new_attempt,
    validate_transition,
)


class TestSubmissionCanTransition:
    def test_submitted_to_approved(self):
        assert can_transition("submitted", "approved") is True

    def test_submitted_to_rejected(self):
        assert can_transition("submitted", "rejected") is True

    def test_submitted_edit_in_place(self):
        assert can_transition("submitted", "submitted") is True

    def test_approved_is_terminal(self):
        for target in ["submitted", "approved", "rejected"]:
            assert can_transition("approved", target) is False

    def test_rejected_is_terminal(self):
        """A rejected row never reopens; resubmission inserts a new row."""
        for target in ["submitted", "approved", "rejected"]:
            assert can_transition("rejected", target) is False

    def test_unknown_state(self):
        assert can_transition("draft", "submitted") is False

    def test_all_states_covered(self):
        assert set(VALID_TRANSITIONS) == {"submitted", "approved", "rejected"}


class TestSubmissionValidateTransition:
    def test_valid_passes(self):
        validate_transition("submitted", "approved")

    def test_invalid_raises(self):
        with pytest.raises(InvalidStateError) as exc_info:
            validate_transition("approved", "rejected")
        assert exc_info.value.error_type == "invalid_state"
        assert exc_info.value.current == "approved"
        assert exc_info.value.target == "rejected"

    def test_error_lists_allowed_targets(self):
        with pytest.raises(InvalidStateError) as exc_info:
            validate_transition("rejected", "submitted")
        assert exc_info.value.details["allowed"] == []
        assert "rejected" in exc_info.value.message


class TestResubmission:
    def test_new_attempt_after_rejection(self):
        assert permits_new_attempt("rejected") is True

    def test_first_attempt(self):
        assert permits_new_attempt(None) is True

    def test_no_new_attempt_while_active(self):
        assert permits_new_attempt("submitted") is False
        assert permits_new_attempt("approved") is False
