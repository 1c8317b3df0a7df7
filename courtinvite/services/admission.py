# courtinvite/services/admission.py
"""
RSVP admission decision.

Given what a visitor asked for and the session's current seat situation,
decide the status their participant row should end up with. This module does
no I/O; the caller is responsible for reading a consistent confirmed count
(the participant CRUD locks the session row first).
"""

from dataclasses import dataclass
from typing import Optional

from courtinvite.constants.rsvp import ParticipantStatus, RsvpAction
from courtinvite.core.errors import ErrorCode


@dataclass(frozen=True)
class AdmissionDecision:
    status: Optional[str]
    rejected: bool = False
    error_code: Optional[str] = None


def decide_admission(
    action: str,
    current_status: Optional[str],
    capacity: Optional[int],
    confirmed_count: int,
    waitlist_enabled: bool,
) -> AdmissionDecision:
    """
    Decide the outcome of a join or decline.

    Args:
        action: RsvpAction.JOIN or RsvpAction.DECLINE
        current_status: The visitor's existing status, or None for a new visitor
        capacity: Seat limit, None for unlimited
        confirmed_count: Confirmed participants right now (including the visitor)
        waitlist_enabled: Whether a full session queues new joiners

    Returns:
        AdmissionDecision with the resulting status, or rejected=True and an
        error code when the join cannot be accepted.
    """
    if action == RsvpAction.DECLINE:
        return AdmissionDecision(status=ParticipantStatus.CANCELLED)

    if action != RsvpAction.JOIN:
        raise ValueError(f"Unknown RSVP action: {action}")

    # Already holds a seat
    if current_status == ParticipantStatus.CONFIRMED:
        return AdmissionDecision(status=ParticipantStatus.CONFIRMED)

    if capacity is None or confirmed_count < capacity:
        return AdmissionDecision(status=ParticipantStatus.CONFIRMED)

    if waitlist_enabled:
        return AdmissionDecision(status=ParticipantStatus.WAITLISTED)

    return AdmissionDecision(
        status=None, rejected=True, error_code=ErrorCode.CAPACITY_EXCEEDED
    )
