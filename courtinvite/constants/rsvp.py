# courtinvite/constants/rsvp.py
"""
Constants for session, participant and payment status values.

Provides type-safe constants to replace hardcoded strings throughout the codebase.
"""


class ParticipantStatus:
    """Participant RSVP status values."""
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    WAITLISTED = "waitlisted"
    PULLED_OUT = "pulled_out"

    @classmethod
    def all_values(cls) -> list[str]:
        """Return all valid status values."""
        return [cls.CONFIRMED, cls.CANCELLED, cls.WAITLISTED, cls.PULLED_OUT]

    @classmethod
    def is_valid(cls, status: str) -> bool:
        """Check if a status value is valid."""
        return status in cls.all_values()


class SessionStatus:
    """Session publication status values."""
    DRAFT = "draft"
    OPEN = "open"
    CLOSED = "closed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def all_values(cls) -> list[str]:
        return [cls.DRAFT, cls.OPEN, cls.CLOSED, cls.COMPLETED, cls.CANCELLED]

    @classmethod
    def publicly_visible(cls) -> tuple[str, ...]:
        """Statuses whose invite page can be viewed without hosting."""
        return (cls.OPEN, cls.CLOSED)


class PaymentStatus:
    """Payment proof review status values."""
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def all_values(cls) -> list[str]:
        return [cls.PENDING_REVIEW, cls.APPROVED, cls.REJECTED]


class RsvpAction:
    JOIN = "join"
    DECLINE = "decline"


class HostRole:
    OWNER = "owner"
    HOST = "host"


# A host may have at most this many published (open) sessions at once.
MAX_LIVE_SESSIONS = 2

# A user may keep at most this many saved drafts.
MAX_DRAFTS = 2

# Open sessions are deleted this many hours after they end.
SESSION_EXPIRY_GRACE_HOURS = 48

MAX_DISPLAY_NAME_LENGTH = 80
