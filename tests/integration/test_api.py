"""
Integration tests for the FuelEU Ledger API.

Fixtures (db, client, seeded_routes) provided by tests/conftest.py.
"""
import uuid

import pytest


def _compute(client, ship_id="S1", year=2031, ghg_intensity=85.0, fuel_consumption=1000, fuel_type="MGO"):
    return client.post(
        "/api/compliance/cb",
        params={"ship_id": ship_id, "year": year},
        json={
            "ghg_intensity": ghg_intensity,
            "fuel_consumption": fuel_consumption,
            "fuel_type": fuel_type,
        },
    )


# ============================================================================
# Public Endpoint Tests
# ============================================================================

def test_root_endpoint(client):
    """Test API root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "FuelEU Ledger API"
    assert data["version"] == "1.0.0"
    assert data["status"] == "operational"


def test_health_check(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["components"]["database"]["status"] == "healthy"
    assert data["components"]["target_table"]["details"]["last_year"] == 2050


def test_liveness(client):
    response = client.get("/api/health/live")
    assert response.status_code == 200
    assert response.json()["status"] == "alive"


def test_request_id_header(client):
    response = client.get("/", headers={"X-Request-ID": "test-req-1"})
    assert response.headers["X-Request-ID"] == "test-req-1"


# ============================================================================
# Compliance Endpoint Tests
# ============================================================================

class TestComplianceEndpoints:
    def test_targets(self, client):
        response = client.get("/api/compliance/targets")
        assert response.status_code == 200
        targets = response.json()["targets"]
        assert targets[0] == {"year": 2025, "target": 89.3368}
        assert targets[-1] == {"year": 2050, "target": 18.232}

    def test_fuel_types(self, client):
        response = client.get("/api/compliance/fuel-types")
        assert response.status_code == 200
        data = response.json()
        assert data["unknown_fuel_policy"] == "default"
        assert {"id": "MGO", "name": "MGO", "lcv_mj_per_g": 0.0427} in data["fuel_types"]

    def test_compute_balance(self, client):
        response = _compute(client)
        assert response.status_code == 200
        data = response.json()
        assert data["ship_id"] == "S1"
        assert data["target"] == 85.6904
        assert data["energy_in_scope"] == pytest.approx(42_700_000_000)
        assert data["cb_gco2eq"] == pytest.approx(29_480_080_000, rel=1e-9)
        assert data["compliant"] is True
        assert data["penalty"] == 0.0
        assert data["fuel_type_defaulted"] is False

    def test_compute_deficit_penalty(self, client):
        data = _compute(client, "S2", 2025, 91.0, 5000, "HFO").json()
        assert data["compliant"] is False
        assert data["penalty"] == pytest.approx(216_648_405, abs=1)

    def test_unknown_fuel_flagged(self, client):
        data = _compute(client, fuel_type="Nuclear").json()
        assert data["fuel_type"] == "MGO"
        assert data["fuel_type_defaulted"] is True

    def test_compute_is_idempotent(self, client, db):
        from api.models import ShipCompliance

        first = _compute(client).json()
        second = _compute(client).json()

        assert first == second
        assert db.query(ShipCompliance).filter_by(ship_id="S1", year=2031).count() == 1

    def test_get_stored_balance(self, client):
        _compute(client)
        response = client.get("/api/compliance/cb", params={"ship_id": "S1", "year": 2031})
        assert response.status_code == 200
        assert response.json()["cb_gco2eq"] == pytest.approx(29_480_080_000, rel=1e-9)

    def test_get_missing_balance(self, client):
        response = client.get("/api/compliance/cb", params={"ship_id": "S9", "year": 2031})
        assert response.status_code == 404
        assert "S9" in response.json()["detail"]

    @pytest.mark.parametrize("field,value", [
        ("ghg_intensity", 0),
        ("fuel_consumption", -1),
    ])
    def test_invalid_body(self, client, field, value):
        body = {"ghg_intensity": 85.0, "fuel_consumption": 1000, "fuel_type": "MGO", field: value}
        response = client.post(
            "/api/compliance/cb", params={"ship_id": "S1", "year": 2031}, json=body,
        )
        assert response.status_code == 422

    def test_missing_query(self, client):
        response = client.post(
            "/api/compliance/cb",
            json={"ghg_intensity": 85.0, "fuel_consumption": 1000, "fuel_type": "MGO"},
        )
        assert response.status_code == 422

    def test_huge_consumption(self, client):
        response = _compute(client, fuel_consumption=1e20)
        assert response.status_code == 200
        assert response.json()["cb_gco2eq"] == pytest.approx(0.6904 * 4.27e24, rel=1e-9)


# ============================================================================
# Banking Endpoint Tests
# ============================================================================

class TestBankingEndpoints:
    def test_bank_apply_adjusted_round_trip(self, client):
        _compute(client, year=2031)
        _compute(client, year=2033, ghg_intensity=80.0, fuel_consumption=1)

        bank = client.post("/api/banking/bank", json={"ship_id": "S1", "year": 2031, "amount": 1_000_000})
        assert bank.status_code == 200
        assert bank.json()["amount_gco2eq"] == 1_000_000

        apply = client.post("/api/banking/apply", json={"ship_id": "S1", "year": 2032, "amount": 400_000})
        assert apply.status_code == 200
        assert apply.json()["amount_gco2eq"] == -400_000

        adjusted = client.get("/api/compliance/adjusted-cb", params={"ship_id": "S1", "year": 2033}).json()
        assert adjusted["banked_amount"] == 600_000
        assert adjusted["adjusted_cb_gco2eq"] == pytest.approx(adjusted["cb_gco2eq"] + 600_000)

    def test_bank_insufficient_surplus(self, client):
        _compute(client, ghg_intensity=90.0)  # deficit in 2031

        response = client.post("/api/banking/bank", json={"ship_id": "S1", "year": 2031, "amount": 10})

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail.startswith("Insufficient surplus to bank")
        assert "Requested: 10" in detail

    def test_bank_without_balance(self, client):
        response = client.post("/api/banking/bank", json={"ship_id": "S9", "year": 2031, "amount": 10})
        assert response.status_code == 400

    def test_bank_non_positive(self, client):
        _compute(client)
        response = client.post("/api/banking/bank", json={"ship_id": "S1", "year": 2031, "amount": 0})
        assert response.status_code == 400
        assert response.json()["detail"] == "Banking amount must be positive"

    def test_apply_insufficient(self, client):
        response = client.post("/api/banking/apply", json={"ship_id": "S1", "year": 2032, "amount": 5})
        assert response.status_code == 400
        assert response.json()["detail"].startswith("Insufficient banked surplus")

    def test_failed_bank_keeps_balance(self, client):
        _compute(client)
        client.post("/api/banking/bank", json={"ship_id": "S1", "year": 2031, "amount": 1e15})

        response = client.get("/api/compliance/cb", params={"ship_id": "S1", "year": 2031})
        assert response.status_code == 200

    def test_records(self, client):
        _compute(client)
        client.post("/api/banking/bank", json={"ship_id": "S1", "year": 2031, "amount": 700})
        client.post("/api/banking/apply", json={"ship_id": "S1", "year": 2032, "amount": 250})

        data = client.get("/api/banking/records", params={"ship_id": "S1"}).json()
        assert [r["amount_gco2eq"] for r in data["records"]] == [700, -250]
        assert data["total_banked"] == 450

        one_year = client.get("/api/banking/records", params={"ship_id": "S1", "year": 2031}).json()
        assert len(one_year["records"]) == 1
        assert one_year["total_banked"] == 700

    def test_adjusted_missing(self, client):
        response = client.get("/api/compliance/adjusted-cb", params={"ship_id": "S1", "year": 2031})
        assert response.status_code == 404


# ============================================================================
# Pool Endpoint Tests
# ============================================================================

VALID_MEMBERS = [
    {"ship_id": "A", "cb_before": -50, "cb_after": -40},
    {"ship_id": "B", "cb_before": 100, "cb_after": 90},
]

INVALID_MEMBERS = [
    {"ship_id": "A", "cb_before": -50, "cb_after": -60},
    {"ship_id": "B", "cb_before": 10, "cb_after": 20},
]


class TestPoolEndpoints:
    def test_create_pool(self, client):
        response = client.post("/api/pools", json={"year": 2031, "members": VALID_MEMBERS})
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["total_cb_before"] == 50
        assert data["total_cb_after"] == 50
        assert [m["ship_id"] for m in data["members"]] == ["A", "B"]

    def test_create_invalid_pool(self, client):
        response = client.post("/api/pools", json={"year": 2031, "members": INVALID_MEMBERS})
        assert response.status_code == 400
        data = response.json()
        assert "Ship A deficit increased from -50.0 to -60.0" in data["errors"]
        assert data["detail"].startswith("Pool validation failed")

        assert client.get("/api/pools", params={"year": 2031}).json() == []

    def test_validate_shares_errors_with_create(self, client):
        check = client.post("/api/pools/validate", json={"year": 2031, "members": INVALID_MEMBERS})
        create = client.post("/api/pools", json={"year": 2031, "members": INVALID_MEMBERS})

        assert check.status_code == 200
        assert check.json()["valid"] is False
        assert check.json()["errors"] == create.json()["errors"]

    def test_validate_valid_pool(self, client):
        data = client.post("/api/pools/validate", json={"year": 2031, "members": VALID_MEMBERS}).json()
        assert data == {"valid": True, "errors": [], "total_cb_before": 50.0, "total_cb_after": 50.0}

    def test_single_member_pool(self, client):
        response = client.post("/api/pools", json={"year": 2031, "members": VALID_MEMBERS[:1]})
        assert response.status_code == 400
        assert "Pool must have at least 2 members" in response.json()["errors"]

    def test_list_and_get(self, client):
        created = client.post("/api/pools", json={"year": 2031, "members": VALID_MEMBERS}).json()
        client.post("/api/pools", json={"year": 2032, "members": VALID_MEMBERS})

        pools = client.get("/api/pools", params={"year": 2031}).json()
        assert [p["id"] for p in pools] == [created["id"]]

        fetched = client.get(f"/api/pools/{created['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["members"] == created["members"]

    def test_get_missing_pool(self, client):
        assert client.get(f"/api/pools/{uuid.uuid4()}").status_code == 404
        assert client.get("/api/pools/not-a-uuid").status_code == 404


# ============================================================================
# Route Endpoint Tests
# ============================================================================

class TestRouteEndpoints:
    def test_list_routes(self, client, seeded_routes):
        data = client.get("/api/routes").json()
        assert [r["route_id"] for r in data] == ["R001", "R002", "R003", "R004", "R005"]

    def test_filter_routes(self, client, seeded_routes):
        data = client.get("/api/routes", params={"vessel_type": "Container", "fuel_type": "LNG"}).json()
        assert [r["route_id"] for r in data] == ["R005"]

    def test_comparison(self, client, seeded_routes):
        response = client.get("/api/routes/comparison")
        assert response.status_code == 200
        rows = {r["route_id"]: r for r in response.json()}
        assert rows["R001"]["percent_diff"] == 0.0
        assert rows["R003"]["percent_diff"] == pytest.approx(2.74725, abs=1e-5)
        assert rows["R002"]["compliant"] is True

    def test_set_baseline(self, client, seeded_routes):
        response = client.post("/api/routes/R002/baseline")
        assert response.status_code == 200
        assert response.json()["is_baseline"] is True

        baselines = [r["route_id"] for r in client.get("/api/routes").json() if r["is_baseline"]]
        assert baselines == ["R002"]

        rows = {r["route_id"]: r for r in client.get("/api/routes/comparison").json()}
        assert rows["R002"]["percent_diff"] == 0.0
        assert rows["R001"]["baseline_ghg_intensity"] == 88.0

    def test_set_unknown_baseline(self, client, seeded_routes):
        assert client.post("/api/routes/R999/baseline").status_code == 404

    def test_comparison_without_baseline(self, client):
        response = client.get("/api/routes/comparison")
        assert response.status_code == 404
        assert response.json()["detail"] == "No baseline route set"


# ============================================================================
# Error Handling Tests
# ============================================================================

def test_unexpected_error_is_opaque():
    """Store failures surface as a 500 carrying only the request ID."""
    from fastapi.testclient import TestClient

    from api.main import create_app

    app = create_app()

    @app.get("/boom")
    async def boom():
        raise RuntimeError("connection reset by store")

    with TestClient(app, raise_server_exceptions=False) as test_client:
        response = test_client.get("/boom", headers={"X-Request-ID": "req-500"})

    assert response.status_code == 500
    data = response.json()
    assert data["request_id"] == "req-500"
    assert response.headers["X-Request-ID"] == "req-500"
    assert "connection reset" not in data["detail"]


def test_debug_echoes_error_text(monkeypatch):
    from fastapi.testclient import TestClient

    from api.config import settings
    from api.main import create_app

    monkeypatch.setattr(settings, "debug", True)
    app = create_app()

    @app.get("/boom")
    async def boom():
        raise RuntimeError("connection reset by store")

    with TestClient(app, raise_server_exceptions=False) as test_client:
        response = test_client.get("/boom")

    assert response.status_code == 500
    assert response.json()["detail"] == "connection reset by store"
    assert response.headers["X-Request-ID"] == response.json()["request_id"]
