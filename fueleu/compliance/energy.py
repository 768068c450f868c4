"""
Energy-in-scope conversion.

energy (MJ) = fuel mass (t) * 1e6 (g/t) * LCV (MJ/g)

Fuel types missing from the LCV table are handled by an explicit policy:
"default" substitutes the configured default fuel (MGO) and flags the
result, "reject" raises UnknownFuelTypeError.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from fueleu.config import settings
from fueleu.errors import UnknownFuelTypeError, ValidationError

logger = logging.getLogger(__name__)


# Lower Calorific Values (MJ/g fuel), FuelEU Annex II defaults
LCV = {
    "HFO": 0.0405,
    "LFO": 0.0410,
    "MGO": 0.0427,
    "MDO": 0.0427,
    "LNG": 0.0491,
    "LPG_BUTANE": 0.0460,
    "LPG_PROPANE": 0.0460,
    "METHANOL": 0.0199,
    "AMMONIA": 0.0186,
    "HYDROGEN": 0.1200,
}

DEFAULT_FUEL_TYPE = "MGO"

GRAMS_PER_TONNE = 1_000_000


@dataclass
class FuelLookup:
    """Resolved LCV for a requested fuel type."""
    requested: str
    fuel_key: str  # key actually used in the LCV table
    lcv: float  # MJ/g
    defaulted: bool  # True when the unknown-fuel default was substituted


def normalize_fuel_type(fuel_type: str) -> str:
    """'lpg-butane' / 'LPG Butane' -> 'LPG_BUTANE'."""
    return fuel_type.strip().upper().replace("-", "_").replace(" ", "_")


def lookup_lcv(fuel_type: str, policy: Optional[str] = None) -> FuelLookup:
    """
    Look up the LCV for a fuel type under the unknown-fuel policy.

    Args:
        fuel_type: Fuel type name as submitted
        policy: "default" or "reject"; falls back to settings

    Returns:
        FuelLookup

    Raises:
        UnknownFuelTypeError: fuel unknown and policy is "reject"
    """
    reject = policy == "reject" if policy else settings.reject_unknown_fuels
    key = normalize_fuel_type(fuel_type)

    if key in LCV:
        return FuelLookup(requested=fuel_type, fuel_key=key, lcv=LCV[key], defaulted=False)

    if reject:
        raise UnknownFuelTypeError(fuel_type, list(LCV))

    logger.warning(
        "Unknown fuel type %r, using %s LCV (%s MJ/g)",
        fuel_type, DEFAULT_FUEL_TYPE, LCV[DEFAULT_FUEL_TYPE],
    )
    return FuelLookup(
        requested=fuel_type,
        fuel_key=DEFAULT_FUEL_TYPE,
        lcv=LCV[DEFAULT_FUEL_TYPE],
        defaulted=True,
    )


def energy_in_scope(fuel_consumption_t: float, lcv_mj_per_g: float) -> float:
    """Energy in scope (MJ) for a fuel mass in tonnes. Not rounded."""
    if fuel_consumption_t <= 0:
        raise ValidationError("Fuel consumption must be positive")
    return fuel_consumption_t * GRAMS_PER_TONNE * lcv_mj_per_g


def fuel_types() -> List[Dict]:
    """Return supported fuel types with their LCV."""
    return [
        {"id": key, "name": key.replace("_", " "), "lcv_mj_per_g": lcv}
        for key, lcv in LCV.items()
    ]
