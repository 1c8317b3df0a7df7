# courtinvite/schemas/token.py
from pydantic import BaseModel
from typing import Optional


class TokenPayload(BaseModel):
    sub: str  # auth provider user id
    email: Optional[str] = None
    exp: int

    model_config = {
        "from_attributes": True,
        "extra": "ignore",
    }
