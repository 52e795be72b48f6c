"""Phase control for a split session: capture -> assignment -> settlement."""

from __future__ import annotations

from typing import Literal

Phase = Literal["capture", "assignment", "settlement"]

PHASES: tuple[Phase, ...] = ("capture", "assignment", "settlement")

# Forward moves plus the one permitted step back. Reset to capture is handled
# separately because it is always allowed and also clears state.
_ALLOWED_TRANSITIONS: dict[Phase, set[Phase]] = {
    "capture": {"assignment"},
    "assignment": {"settlement"},
    "settlement": {"assignment"},
}


class PhaseTransitionError(RuntimeError):
    """Raised when a session is asked to move to a phase it cannot reach."""


def check_transition(current: Phase, target: Phase, *, has_bill: bool, people_count: int) -> None:
    """
    Validate a phase change.

    Raises:
        PhaseTransitionError: if the move skips a phase or its guard fails.
    """
    if target not in PHASES:
        raise PhaseTransitionError(f"Unknown phase: {target!r}")
    if target == current:
        return
    if target not in _ALLOWED_TRANSITIONS[current]:
        raise PhaseTransitionError(f"Cannot move from {current} to {target}")
    if target == "assignment" and not has_bill:
        raise PhaseTransitionError("Capture a receipt before assigning items")
    if target == "settlement":
        if not has_bill:
            raise PhaseTransitionError("Capture a receipt before settling")
        if people_count < 1:
            raise PhaseTransitionError("Add at least one person before settling")
