"""
FuelEU Maritime banking (Article 20).

Surplus compliance balance can be banked for use in later years and
applied against a later deficit. The ledger is append-only: a bank
deposit is a positive entry in the year it was banked, an application is
a negative entry in the year it was used. Balances are always summed from
the full history, never cached.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from fueleu.errors import BalanceNotFoundError, InsufficientBalanceError, ValidationError
from fueleu.records import BankEntry
from fueleu.stores import BankStore, ComplianceStore
from fueleu.utils import round_half_away

logger = logging.getLogger(__name__)


@dataclass
class BankRecords:
    entries: List[BankEntry]
    total_banked: float


@dataclass
class AdjustedComplianceBalance:
    """Stored CB plus everything banked up to the previous year."""
    ship_id: str
    year: int
    cb_gco2eq: float
    adjusted_cb_gco2eq: float
    banked_amount: float


class BankingLedger:
    """Bank surplus CB and apply banked CB for a ship."""

    def __init__(self, bank_store: BankStore, compliance_store: ComplianceStore):
        self.bank_store = bank_store
        self.compliance_store = compliance_store

    def bank(self, ship_id: str, year: int, amount: float) -> BankEntry:
        """
        Bank part of a ship's surplus for the given year.

        Raises:
            ValidationError: amount is not positive
            InsufficientBalanceError: no stored CB or CB below amount
        """
        _require_positive(amount, "Banking amount")

        with self.bank_store.lock(ship_id):
            record = self.compliance_store.get(ship_id, year)
            available = record.cb_gco2eq if record else 0.0
            if record is None or record.cb_gco2eq < amount:
                raise InsufficientBalanceError(
                    "Insufficient surplus to bank", available=available, requested=amount,
                )
            entry = self.bank_store.append(ship_id, year, round_half_away(amount))

        logger.info("Banked %s gCO2eq for %s/%d", entry.amount_gco2eq, ship_id, year)
        return entry

    def apply(self, ship_id: str, year: int, amount: float) -> BankEntry:
        """
        Apply surplus banked in earlier years to `year`.

        Only entries up to year - 1 count as available. The negative entry
        is recorded at `year`.

        Raises:
            ValidationError: amount is not positive
            InsufficientBalanceError: banked total below amount
        """
        _require_positive(amount, "Application amount")

        with self.bank_store.lock(ship_id):
            available = self.cumulative_banked(ship_id, year - 1)
            if available < amount:
                raise InsufficientBalanceError(
                    "Insufficient banked surplus", available=available, requested=amount,
                )
            entry = self.bank_store.append(ship_id, year, round_half_away(-amount))

        logger.info("Applied %s gCO2eq banked surplus for %s/%d", amount, ship_id, year)
        return entry

    def cumulative_banked(self, ship_id: str, through_year: int) -> float:
        """Sum of all ledger entries of a ship with year <= through_year."""
        entries = self.bank_store.entries_through(ship_id, through_year)
        return round_half_away(sum(e.amount_gco2eq for e in entries))

    def records(self, ship_id: str, year: Optional[int] = None) -> BankRecords:
        """Ledger entries of a ship, optionally for one year, with their total."""
        entries = self.bank_store.entries(ship_id, year)
        total = round_half_away(sum(e.amount_gco2eq for e in entries))
        return BankRecords(entries=entries, total_banked=total)

    def adjusted_balance(self, ship_id: str, year: int) -> AdjustedComplianceBalance:
        """
        Stored CB for a ship-year adjusted by the banked cumulative balance.

        Raises:
            BalanceNotFoundError: no CB stored for (ship_id, year)
        """
        record = self.compliance_store.get(ship_id, year)
        if record is None:
            raise BalanceNotFoundError(ship_id, year)

        banked = self.cumulative_banked(ship_id, year - 1)
        return AdjustedComplianceBalance(
            ship_id=ship_id,
            year=year,
            cb_gco2eq=record.cb_gco2eq,
            adjusted_cb_gco2eq=round_half_away(record.cb_gco2eq + banked),
            banked_amount=banked,
        )


def _require_positive(amount: float, label: str):
    if amount is None or amount <= 0:
        raise ValidationError(f"{label} must be positive")
