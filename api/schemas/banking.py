"""Banking ledger API schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class BankingRequest(BaseModel):
    """Bank or apply an amount of compliance balance."""
    ship_id: str = Field(..., min_length=1, max_length=100)
    year: int = Field(..., ge=2000, le=2100)
    amount: float = Field(..., allow_inf_nan=False, description="gCO2eq, must be positive")


class BankEntryResponse(BaseModel):
    id: str
    ship_id: str
    year: int
    amount_gco2eq: float
    created_at: Optional[datetime] = None


class BankRecordsResponse(BaseModel):
    records: List[BankEntryResponse]
    total_banked: float
