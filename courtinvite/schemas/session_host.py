# courtinvite/schemas/session_host.py
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class HostRoleEnum(str, Enum):
    owner = "owner"
    host = "host"


class CoHostInvite(BaseModel):
    email: str = Field(..., max_length=320, json_schema_extra={"example": "friend@example.com"})

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        value = value.strip().lower()
        local, _, domain = value.partition("@")
        if not local or "." not in domain:
            raise ValueError("Invalid email address")
        return value


class SessionHost(BaseModel):
    id: str
    session_id: str
    email: Optional[str] = None
    user_id: Optional[str] = None
    role: HostRoleEnum
    invited_at: datetime
    accepted_at: Optional[datetime] = None
    model_config = {"from_attributes": True}


class LinkInvitesResponse(BaseModel):
    ok: bool = True
    linked_count: int
