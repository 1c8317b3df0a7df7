# courtinvite/schemas/participant.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .session import Sport, SessionStatusEnum


class ParticipantStatusEnum(str, Enum):
    confirmed = "confirmed"
    cancelled = "cancelled"
    waitlisted = "waitlisted"
    pulled_out = "pulled_out"


class RsvpRequest(BaseModel):
    # Blank names are rejected by the RSVP handler with an INVALID_NAME code,
    # so no min_length here.
    name: str = Field(..., max_length=200, json_schema_extra={"example": "Alex"})
    phone: Optional[str] = Field(None, max_length=32)


class RsvpResponse(BaseModel):
    ok: bool = True
    participant_id: str
    status: ParticipantStatusEnum
    waitlisted: bool = False
    # Present only when the server issued a new guest token on this request
    guest_token: Optional[str] = None


class PullOutRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class RsvpStatusResponse(BaseModel):
    ok: bool = True
    status: Optional[ParticipantStatusEnum] = None
    display_name: Optional[str] = None


class Participant(BaseModel):
    id: str
    session_id: str
    display_name: str
    contact_phone: Optional[str] = None
    status: ParticipantStatusEnum
    is_host: bool = False
    pull_out_reason: Optional[str] = None
    pull_out_seen: bool = False
    created_at: datetime
    model_config = {"from_attributes": True}


class PublicParticipant(BaseModel):
    id: str
    display_name: str
    model_config = {"from_attributes": True}


class PublicSessionView(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    map_url: Optional[str] = None
    sport: Sport
    court_numbers: Optional[str] = None
    start_at: datetime
    end_at: Optional[datetime] = None
    status: SessionStatusEnum
    host_name: Optional[str] = None
    host_slug: Optional[str] = None
    public_code: Optional[str] = None
    cover_url: Optional[str] = None
    price: Optional[Decimal] = None
    currency: Optional[str] = None
    payment_bank_name: Optional[str] = None
    payment_account_number: Optional[str] = None
    payment_account_name: Optional[str] = None
    payment_notes: Optional[str] = None
    capacity: Optional[int] = None
    waitlist_enabled: bool
    confirmed_count: int
    waitlisted_count: int
    spots_left: Optional[int] = None
    is_full: bool
    participants: List[PublicParticipant]
    waitlist: List[PublicParticipant]
    viewer_status: Optional[ParticipantStatusEnum] = None
    viewer_display_name: Optional[str] = None
    share_url: Optional[str] = None


class PullOutNotice(BaseModel):
    id: str
    display_name: str
    pull_out_reason: Optional[str] = None
    updated_at: datetime
    model_config = {"from_attributes": True}


class PullOutListResponse(BaseModel):
    ok: bool = True
    pull_outs: List[PullOutNotice]
