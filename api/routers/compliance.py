"""
FuelEU Maritime compliance balance API router.

Handles CB computation (with derived penalty), stored balance lookup,
banked-adjusted balances and the reference data behind them.
"""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from api.database import get_db
from api.repositories import SqlBankStore, SqlComplianceStore
from api.schemas import (
    AdjustedBalanceResponse,
    ComplianceBalanceResponse,
    ComputeBalanceRequest,
    ComputeBalanceResponse,
    FuelTypeInfo,
    FuelTypesResponse,
    TargetsResponse,
    TargetYear,
)
from fueleu.banking import BankingLedger
from fueleu.compliance import ComplianceCalculator, get_target_table
from fueleu.compliance.energy import fuel_types
from fueleu.config import settings as domain_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/compliance", tags=["Compliance"])


# ---- reference data endpoints -----------------------------------------------

@router.get("/targets", response_model=TargetsResponse)
async def get_targets():
    """Return the GHG intensity target table in use."""
    return TargetsResponse(
        targets=[TargetYear(**row) for row in get_target_table().limits()],
    )


@router.get("/fuel-types", response_model=FuelTypesResponse)
async def get_fuel_types():
    """List supported fuel types with their lower calorific values."""
    return FuelTypesResponse(
        fuel_types=[FuelTypeInfo(**f) for f in fuel_types()],
        unknown_fuel_policy=domain_settings.unknown_fuel_policy,
    )


# ---- balance endpoints ------------------------------------------------------

@router.post("/cb", response_model=ComputeBalanceResponse)
async def compute_balance(
    body: ComputeBalanceRequest,
    ship_id: str = Query(..., min_length=1, max_length=100),
    year: int = Query(..., ge=2000, le=2100),
    db=Depends(get_db),
):
    """Compute and store the compliance balance for a ship-year."""
    calc = ComplianceCalculator(SqlComplianceStore(db))
    result = calc.compute_balance(
        ship_id, year, body.ghg_intensity, body.fuel_consumption, body.fuel_type,
    )
    return ComputeBalanceResponse(
        **asdict(result.balance),
        penalty=result.penalty_eur,
        fuel_type=result.fuel_type,
        fuel_type_defaulted=result.fuel_type_defaulted,
    )


@router.get("/cb", response_model=ComplianceBalanceResponse)
async def get_balance(
    ship_id: str = Query(..., min_length=1, max_length=100),
    year: int = Query(..., ge=2000, le=2100),
    db=Depends(get_db),
):
    """Return the stored compliance balance for a ship-year."""
    calc = ComplianceCalculator(SqlComplianceStore(db))
    return ComplianceBalanceResponse(**asdict(calc.get_balance(ship_id, year)))


@router.get("/adjusted-cb", response_model=AdjustedBalanceResponse)
async def get_adjusted_balance(
    ship_id: str = Query(..., min_length=1, max_length=100),
    year: int = Query(..., ge=2000, le=2100),
    db=Depends(get_db),
):
    """Stored CB adjusted by surplus banked up to the previous year."""
    ledger = BankingLedger(SqlBankStore(db), SqlComplianceStore(db))
    return AdjustedBalanceResponse(**asdict(ledger.adjusted_balance(ship_id, year)))
