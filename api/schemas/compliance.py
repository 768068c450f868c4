"""Compliance balance API schemas."""

from typing import List

from pydantic import BaseModel, Field


class ComputeBalanceRequest(BaseModel):
    """Measured values for a ship-year; ship_id and year come from the query."""
    ghg_intensity: float = Field(..., gt=0, allow_inf_nan=False, description="Measured GHG intensity (gCO2eq/MJ)")
    fuel_consumption: float = Field(..., gt=0, allow_inf_nan=False, description="Fuel consumed (t)")
    fuel_type: str = Field(..., min_length=1, max_length=50, description="Fuel type, e.g. MGO")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class ComplianceBalanceResponse(BaseModel):
    """Stored compliance balance with derived target and flag."""
    ship_id: str
    year: int
    cb_gco2eq: float
    ghg_intensity: float
    energy_in_scope: float
    target: float
    compliant: bool


class ComputeBalanceResponse(ComplianceBalanceResponse):
    """Freshly computed balance plus the derived penalty."""
    penalty: float
    fuel_type: str
    fuel_type_defaulted: bool


class AdjustedBalanceResponse(BaseModel):
    ship_id: str
    year: int
    cb_gco2eq: float
    adjusted_cb_gco2eq: float
    banked_amount: float


class TargetYear(BaseModel):
    """GHG intensity target for one step of the table."""
    year: int
    target: float


class TargetsResponse(BaseModel):
    targets: List[TargetYear]


class FuelTypeInfo(BaseModel):
    id: str
    name: str
    lcv_mj_per_g: float


class FuelTypesResponse(BaseModel):
    fuel_types: List[FuelTypeInfo]
    unknown_fuel_policy: str
