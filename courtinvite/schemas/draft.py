# courtinvite/schemas/draft.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class DraftSave(BaseModel):
    # Blank names are reported as INVALID_NAME by the CRUD layer.
    name: str = Field(..., max_length=120, json_schema_extra={"example": "Sunday pickleball"})
    data: Dict[str, Any] = Field(default_factory=dict)
    source_session_id: Optional[str] = None


class DraftOverwrite(BaseModel):
    data: Dict[str, Any]
    name: Optional[str] = Field(None, max_length=120)


class DraftSummary(BaseModel):
    id: str
    name: str
    source_session_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    is_live: bool = False
    model_config = {"from_attributes": True}


class Draft(DraftSummary):
    data: Dict[str, Any]


class DraftListResponse(BaseModel):
    ok: bool = True
    drafts: List[DraftSummary]
    max_drafts: int


class DraftSaveResponse(BaseModel):
    ok: bool = True
    draft: Draft
