"""Pooling API schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PoolMemberModel(BaseModel):
    """Member CB before and after redistribution (gCO2eq)."""
    ship_id: str = Field(..., min_length=1, max_length=100)
    cb_before: float = Field(..., allow_inf_nan=False)
    cb_after: float = Field(..., allow_inf_nan=False)


class CreatePoolRequest(BaseModel):
    year: int = Field(..., ge=2000, le=2100)
    members: List[PoolMemberModel] = Field(..., max_length=100)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class PoolResponse(BaseModel):
    id: str
    year: int
    members: List[PoolMemberModel]
    total_cb_before: float
    total_cb_after: float
    valid: bool
    created_at: Optional[datetime] = None


class PoolValidationResponse(BaseModel):
    valid: bool
    errors: List[str]
    total_cb_before: float
    total_cb_after: float
