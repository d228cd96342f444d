"""Submission lifecycle state machine.

States: submitted → approved (terminal)
        submitted → rejected (terminal for that row)

A learner who was rejected starts over with a new ``submitted`` row; rows
never move back out of ``rejected``.
"""

from learnhub.exceptions import InvalidStateError

VALID_TRANSITIONS: dict[str, list[str]] = {
    "submitted": ["submitted", "approved", "rejected"],  # submitted → submitted is an edit
    "approved": [],    # terminal
    "rejected": [],    # terminal
}


def can_transition(current: str, target: str) -> bool:
    """Check if a submission state transition is valid."""
    return target in VALID_TRANSITIONS.get(current, [])


def validate_transition(current: str, target: str) -> None:
    """Validate a submission state transition, raising InvalidStateError if invalid."""
    if not can_transition(current, target):
        raise InvalidStateError(current, target, VALID_TRANSITIONS.get(current, []))


def permits_new_attempt(state: str | None) -> bool:
    """Whether a learner whose latest attempt is in ``state`` may submit again."""
    return state is None or state == "rejected"
