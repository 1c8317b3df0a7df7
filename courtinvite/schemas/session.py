# courtinvite/schemas/session.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, model_validator

from courtinvite.utils.timeutils import as_utc

NOT_NULL_FIELDS = ("title", "start_at", "sport", "waitlist_enabled")


class Sport(str, Enum):
    badminton = "badminton"
    pickleball = "pickleball"
    volleyball = "volleyball"
    futsal = "futsal"
    other = "other"


class SessionStatusEnum(str, Enum):
    draft = "draft"
    open = "open"
    closed = "closed"
    completed = "completed"
    cancelled = "cancelled"


class SessionBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200, json_schema_extra={"example": "Friday Night Doubles"})
    start_at: datetime
    end_at: Optional[datetime] = None
    sport: Sport = Sport.badminton
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=300)
    map_url: Optional[str] = Field(None, max_length=2048)
    court_numbers: Optional[str] = Field(None, max_length=100)
    capacity: Optional[int] = Field(None, ge=1, json_schema_extra={"example": 12})
    price: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    host_name: Optional[str] = Field(None, max_length=120)
    cover_url: Optional[str] = Field(None, max_length=2048)
    waitlist_enabled: bool = True
    payment_bank_name: Optional[str] = None
    payment_account_number: Optional[str] = None
    payment_account_name: Optional[str] = None
    payment_notes: Optional[str] = None


class SessionCreate(SessionBase):
    @model_validator(mode="after")
    def check_end_after_start(self):
        if self.end_at and as_utc(self.end_at) < as_utc(self.start_at):
            raise ValueError("end_at must not be before start_at")
        return self


class SessionUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    sport: Optional[Sport] = None
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=300)
    map_url: Optional[str] = Field(None, max_length=2048)
    court_numbers: Optional[str] = Field(None, max_length=100)
    capacity: Optional[int] = Field(None, ge=1)
    price: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    host_name: Optional[str] = Field(None, max_length=120)
    cover_url: Optional[str] = Field(None, max_length=2048)
    waitlist_enabled: Optional[bool] = None
    payment_bank_name: Optional[str] = None
    payment_account_number: Optional[str] = None
    payment_account_name: Optional[str] = None
    payment_notes: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def reject_null_required_fields(cls, data: Any) -> Any:
        # Omit a field to leave it unchanged; these columns cannot be cleared
        if isinstance(data, dict):
            nulled = [name for name in NOT_NULL_FIELDS if name in data and data[name] is None]
            if nulled:
                raise ValueError(f"{', '.join(nulled)} cannot be null")
        return data

    @model_validator(mode="after")
    def check_end_after_start(self):
        if self.start_at and self.end_at and as_utc(self.end_at) < as_utc(self.start_at):
            raise ValueError("end_at must not be before start_at")
        return self


class Session(SessionBase):
    id: str
    host_id: str
    host_slug: Optional[str] = None
    status: SessionStatusEnum
    public_code: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    model_config = {"from_attributes": True}


class WaitlistToggle(BaseModel):
    enabled: bool


class PublishResponse(BaseModel):
    ok: bool = True
    session_id: str
    public_code: str
    host_slug: str
    share_url: str
    edit_url: str


class LiveSessionSummary(BaseModel):
    id: str
    title: str
    start_at: datetime
    location: Optional[str] = None
    capacity: Optional[int] = None
    cover_url: Optional[str] = None
    sport: Sport
    host_slug: Optional[str] = None
    public_code: Optional[str] = None
    model_config = {"from_attributes": True}


class LiveSessionsResponse(BaseModel):
    ok: bool = True
    sessions: List[LiveSessionSummary]
    count: int
    max_live: int
    can_publish: bool


class CoverUploadRequest(BaseModel):
    content_type: str = Field(..., pattern=r"^image/(jpeg|png|webp|gif)$")


class CoverUploadResponse(BaseModel):
    url: str
    fields: dict
    object_url: str


class CoverUrlUpdate(BaseModel):
    cover_url: Optional[str] = Field(None, max_length=2048)


class AttendanceStats(BaseModel):
    accepted: int
    declined: int
    waitlisted: int
    pulled_out: int
    capacity: Optional[int] = None
    unanswered: int


class PaymentStats(BaseModel):
    collected: Decimal
    total: Decimal
    received_count: int
    pending_count: int
    confirmed_count: int


class AttendeeEntry(BaseModel):
    id: str
    display_name: str
    created_at: datetime
    model_config = {"from_attributes": True}


class SessionAnalytics(BaseModel):
    ok: bool = True
    session_id: str
    title: str
    status: SessionStatusEnum
    sport: Sport
    start_at: datetime
    location: Optional[str] = None
    host_name: Optional[str] = None
    host_slug: Optional[str] = None
    public_code: Optional[str] = None
    share_url: Optional[str] = None
    waitlist_enabled: bool
    price_per_person: Optional[Decimal] = None
    attendance: AttendanceStats
    payments: PaymentStats
    accepted_list: List[AttendeeEntry]
    declined_list: List[AttendeeEntry]
    waitlist: List[AttendeeEntry]


class CleanupResult(BaseModel):
    ok: bool = True
    removed: int
    message: str
