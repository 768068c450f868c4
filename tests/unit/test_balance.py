"""Tests for the compliance balance calculator."""

import pytest

from fueleu.compliance.balance import ComplianceCalculator, calculate_penalty
from fueleu.errors import BalanceNotFoundError, UnknownFuelTypeError, ValidationError


@pytest.fixture
def calc(compliance_store, targets):
    return ComplianceCalculator(compliance_store, targets, unknown_fuel_policy="default")


# =============================================================================
# Compliance Balance
# =============================================================================

class TestComputeBalance:
    def test_surplus_2031_mgo(self, calc):
        """(85.6904 - 85) * 42.7e9 MJ."""
        result = calc.compute_balance("S1", 2031, 85.0, 1000, "MGO")
        balance = result.balance

        assert balance.energy_in_scope == pytest.approx(42_700_000_000)
        assert balance.cb_gco2eq == pytest.approx(29_480_080_000, rel=1e-9)
        assert balance.target == 85.6904
        assert balance.compliant is True
        assert result.penalty_eur == 0.0
        assert result.fuel_type == "MGO"
        assert result.fuel_type_defaulted is False

    def test_deficit_with_penalty(self, calc):
        """HFO at 91 against 89.3368 in 2025."""
        result = calc.compute_balance("S2", 2025, 91.0, 5000, "HFO")
        balance = result.balance

        assert balance.cb_gco2eq == pytest.approx(-336_798_000_000, rel=1e-9)
        assert balance.compliant is False
        # |CB| / (91 * 41000) * 2400
        assert result.penalty_eur == pytest.approx(216_648_405, abs=1)

    def test_exactly_on_target_is_compliant(self, calc):
        result = calc.compute_balance("S3", 2026, 89.3368, 10, "MGO")
        assert result.balance.cb_gco2eq == 0.0
        assert result.balance.compliant is True

    def test_stored_values_rounded(self, calc, compliance_store):
        calc.compute_balance("S1", 2031, 85.1234567, 1.2345678, "LNG")
        record = compliance_store.get("S1", 2031)

        assert record.ghg_intensity == 85.12346
        assert record.cb_gco2eq == round(record.cb_gco2eq, 5)

    def test_upsert_is_idempotent(self, calc, compliance_store):
        first = calc.compute_balance("S1", 2031, 85.0, 1000, "MGO")
        second = calc.compute_balance("S1", 2031, 85.0, 1000, "MGO")

        assert first.balance == second.balance
        assert len(compliance_store.list_for_ship("S1")) == 1

    def test_recompute_overwrites(self, calc):
        calc.compute_balance("S1", 2031, 85.0, 1000, "MGO")
        calc.compute_balance("S1", 2031, 90.0, 1000, "MGO")

        assert calc.get_balance("S1", 2031).compliant is False

    def test_unknown_fuel_defaulted(self, calc):
        result = calc.compute_balance("S1", 2031, 85.0, 1000, "Nuclear")
        assert result.fuel_type == "MGO"
        assert result.fuel_type_defaulted is True
        assert result.balance.energy_in_scope == pytest.approx(42_700_000_000)

    def test_unknown_fuel_rejected(self, compliance_store, targets):
        calc = ComplianceCalculator(compliance_store, targets, unknown_fuel_policy="reject")
        with pytest.raises(UnknownFuelTypeError):
            calc.compute_balance("S1", 2031, 85.0, 1000, "Nuclear")
        assert compliance_store.get("S1", 2031) is None

    @pytest.mark.parametrize("ship_id,intensity,consumption", [
        ("", 85.0, 1000),
        ("S1", 0, 1000),
        ("S1", -1, 1000),
        ("S1", 85.0, 0),
    ])
    def test_invalid_inputs(self, calc, ship_id, intensity, consumption):
        with pytest.raises(ValidationError):
            calc.compute_balance(ship_id, 2031, intensity, consumption, "MGO")

    def test_huge_consumption(self, calc):
        result = calc.compute_balance("S1", 2031, 85.0, 1e20, "MGO")

        assert result.balance.energy_in_scope == pytest.approx(4.27e24)
        assert result.balance.cb_gco2eq == pytest.approx(0.6904 * 4.27e24, rel=1e-9)
        assert result.balance.compliant is True


class TestGetBalance:
    def test_missing_balance(self, calc):
        with pytest.raises(BalanceNotFoundError, match="S9"):
            calc.get_balance("S9", 2031)

    def test_list_balances_by_year(self, calc):
        calc.compute_balance("S1", 2032, 85.0, 10, "MGO")
        calc.compute_balance("S1", 2031, 85.0, 10, "MGO")
        calc.compute_balance("S2", 2031, 85.0, 10, "MGO")

        assert [b.year for b in calc.list_balances("S1")] == [2031, 2032]


# =============================================================================
# Penalty
# =============================================================================

class TestPenalty:
    def test_surplus_has_no_penalty(self):
        assert calculate_penalty(1_000_000, 85.0) == 0.0

    def test_zero_balance_has_no_penalty(self):
        assert calculate_penalty(0.0, 85.0) == 0.0

    def test_whole_euros(self):
        # 41000 * 90 gCO2eq deficit = 1 t VLSFO equivalent
        assert calculate_penalty(-3_690_000, 90.0) == 2400.0
