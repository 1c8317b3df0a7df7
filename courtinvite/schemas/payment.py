# courtinvite/schemas/payment.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class PaymentStatusEnum(str, Enum):
    pending_review = "pending_review"
    approved = "approved"
    rejected = "rejected"


class PaymentProofSubmit(BaseModel):
    # Base64 image; a "data:image/...;base64," prefix is accepted
    file_data: str = Field(..., min_length=1)
    file_name: str = Field(..., min_length=1, max_length=255, json_schema_extra={"example": "receipt.jpg"})
    amount: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)


class PaymentProofSubmitResponse(BaseModel):
    ok: bool = True
    payment_proof_id: str


class PaymentProof(BaseModel):
    id: str
    session_id: str
    participant_id: str
    proof_image_url: Optional[str] = None
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    payment_status: PaymentStatusEnum
    created_at: datetime
    processed_at: Optional[datetime] = None
    model_config = {"from_attributes": True}


class PaymentUpload(BaseModel):
    """One row per confirmed participant with their latest proof, if any."""
    id: Optional[str] = None
    participant_id: str
    participant_name: str
    proof_image_url: Optional[str] = None
    payment_status: Optional[PaymentStatusEnum] = None
    created_at: Optional[datetime] = None
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    has_proof: bool = False


class PaymentUploadsResponse(BaseModel):
    ok: bool = True
    uploads: List[PaymentUpload]


class CashPaymentRequest(BaseModel):
    # Defaults to the session price when omitted
    amount: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
