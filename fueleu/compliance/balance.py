"""
FuelEU Maritime Compliance Balance (CB) calculator.

CB = (target - actual GHG intensity) * energy in scope   [gCO2eq]

Positive CB is a surplus, negative a deficit. Deficits carry a penalty:

    VLSFO equivalent (t) = |CB| / (GHG intensity * 41,000 MJ/t)
    penalty (EUR)        = VLSFO equivalent * 2,400 EUR/t

Reference: EU Regulation 2023/1805 (FuelEU Maritime), Annex IV
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from fueleu.compliance.energy import energy_in_scope, lookup_lcv
from fueleu.compliance.targets import TargetTable, get_target_table
from fueleu.errors import BalanceNotFoundError, ValidationError
from fueleu.records import ComplianceRecord
from fueleu.stores import ComplianceStore
from fueleu.utils import round_half_away

logger = logging.getLogger(__name__)


# Energy content of one tonne of VLSFO (MJ/t)
VLSFO_ENERGY_MJ_PER_T = 41000

# Penalty: EUR 2,400 per t VLSFO equivalent
PENALTY_EUR_PER_T_VLSFO = 2400


# =============================================================================
# Result Dataclasses
# =============================================================================

@dataclass
class ComplianceBalance:
    """Compliance balance with derived target and compliance flag."""
    ship_id: str
    year: int
    cb_gco2eq: float  # positive=surplus, negative=deficit
    ghg_intensity: float  # gCO2eq/MJ
    energy_in_scope: float  # MJ
    target: float  # gCO2eq/MJ
    compliant: bool


@dataclass
class ComplianceResult:
    """Freshly computed balance plus values derived on demand."""
    balance: ComplianceBalance
    penalty_eur: float
    fuel_type: str  # fuel key whose LCV was used
    fuel_type_defaulted: bool


def calculate_penalty(cb_gco2eq: float, ghg_intensity: float) -> float:
    """Penalty (EUR, whole units) for a deficit; 0 for a surplus."""
    if cb_gco2eq >= 0:
        return 0.0
    deficit = abs(cb_gco2eq)
    vlsfo_equivalent_t = deficit / (ghg_intensity * VLSFO_ENERGY_MJ_PER_T)
    return round_half_away(vlsfo_equivalent_t * PENALTY_EUR_PER_T_VLSFO, 0)


# =============================================================================
# Calculator
# =============================================================================

class ComplianceCalculator:
    """Computes and stores ship-year compliance balances."""

    def __init__(
        self,
        store: ComplianceStore,
        targets: Optional[TargetTable] = None,
        unknown_fuel_policy: Optional[str] = None,
    ):
        self.store = store
        self.targets = targets or get_target_table()
        self.unknown_fuel_policy = unknown_fuel_policy

    def compute_balance(
        self,
        ship_id: str,
        year: int,
        ghg_intensity: float,
        fuel_consumption: float,
        fuel_type: str,
    ) -> ComplianceResult:
        """
        Compute the CB for a ship-year and upsert it.

        Args:
            ship_id: Ship identifier
            year: Regulation year
            ghg_intensity: Measured GHG intensity (gCO2eq/MJ)
            fuel_consumption: Fuel consumed (t)
            fuel_type: Fuel type name, e.g. "MGO"

        Returns:
            ComplianceResult with the stored balance and derived penalty
        """
        if not ship_id:
            raise ValidationError("ship_id is required")
        if ghg_intensity <= 0:
            raise ValidationError("GHG intensity must be positive")

        fuel = lookup_lcv(fuel_type, self.unknown_fuel_policy)
        target = self.targets.resolve(year)
        energy = energy_in_scope(fuel_consumption, fuel.lcv)

        cb = round_half_away((target - ghg_intensity) * energy)

        record = self.store.upsert(ComplianceRecord(
            ship_id=ship_id,
            year=year,
            cb_gco2eq=cb,
            ghg_intensity=round_half_away(ghg_intensity),
            energy_in_scope=round_half_away(energy),
        ))

        logger.info(
            "CB computed for %s/%d: %s gCO2eq (target %s, intensity %s)",
            ship_id, year, cb, target, record.ghg_intensity,
        )

        balance = self._to_balance(record)
        return ComplianceResult(
            balance=balance,
            penalty_eur=calculate_penalty(balance.cb_gco2eq, balance.ghg_intensity),
            fuel_type=fuel.fuel_key,
            fuel_type_defaulted=fuel.defaulted,
        )

    def get_balance(self, ship_id: str, year: int) -> ComplianceBalance:
        """Stored balance for a ship-year, with derived target/compliant."""
        record = self.store.get(ship_id, year)
        if record is None:
            raise BalanceNotFoundError(ship_id, year)
        return self._to_balance(record)

    def list_balances(self, ship_id: str) -> List[ComplianceBalance]:
        return [self._to_balance(r) for r in self.store.list_for_ship(ship_id)]

    # ---- private helpers ----------------------------------------------------

    def _to_balance(self, record: ComplianceRecord) -> ComplianceBalance:
        return ComplianceBalance(
            ship_id=record.ship_id,
            year=record.year,
            cb_gco2eq=record.cb_gco2eq,
            ghg_intensity=record.ghg_intensity,
            energy_in_scope=record.energy_in_scope,
            target=self.targets.resolve(record.year),
            compliant=record.cb_gco2eq >= 0,
        )
