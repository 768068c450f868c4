"""
Banking ledger API router.

Bank surplus CB, apply previously banked CB and list ledger entries.
Write endpoints are rate limited.
"""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from api.database import get_db
from api.middleware import structured_logger
from api.rate_limit import limiter, get_rate_limit_string
from api.repositories import SqlBankStore, SqlComplianceStore
from api.schemas import BankEntryResponse, BankingRequest, BankRecordsResponse
from fueleu.banking import BankingLedger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/banking", tags=["Banking"])


def _ledger(db) -> BankingLedger:
    return BankingLedger(SqlBankStore(db), SqlComplianceStore(db))


@router.post("/bank", response_model=BankEntryResponse)
@limiter.limit(get_rate_limit_string())
async def bank_surplus(request: Request, body: BankingRequest, db=Depends(get_db)):
    """Bank part of a ship's surplus for the given year."""
    entry = _ledger(db).bank(body.ship_id, body.year, body.amount)
    structured_logger.info(
        "Surplus banked", ship_id=body.ship_id, year=body.year, amount=entry.amount_gco2eq,
    )
    return BankEntryResponse(**asdict(entry))


@router.post("/apply", response_model=BankEntryResponse)
@limiter.limit(get_rate_limit_string())
async def apply_banked(request: Request, body: BankingRequest, db=Depends(get_db)):
    """Apply surplus banked in earlier years to the given year."""
    entry = _ledger(db).apply(body.ship_id, body.year, body.amount)
    structured_logger.info(
        "Banked surplus applied", ship_id=body.ship_id, year=body.year, amount=entry.amount_gco2eq,
    )
    return BankEntryResponse(**asdict(entry))


@router.get("/records", response_model=BankRecordsResponse)
async def get_records(
    ship_id: str = Query(..., min_length=1, max_length=100),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    db=Depends(get_db),
):
    """List ledger entries of a ship, optionally for one year."""
    result = _ledger(db).records(ship_id, year)
    return BankRecordsResponse(
        records=[BankEntryResponse(**asdict(e)) for e in result.entries],
        total_banked=result.total_banked,
    )
