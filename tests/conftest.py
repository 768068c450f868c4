"""
Shared pytest fixtures for FuelEU Ledger tests.

The environment is set before any api.* import, so api.database builds its
engine on an in-memory SQLite database. engine_options() pins that database
to one shared connection; each test gets a freshly created schema on it.
"""

import os

import pytest
from fastapi.testclient import TestClient

# ---------------------------------------------------------------------------
# Section 1: Environment setup (before ANY api.* imports)
# ---------------------------------------------------------------------------
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("DB_ECHO", "false")
os.environ.setdefault("FUELEU_UNKNOWN_FUEL_POLICY", "default")

from api.database import Base, SessionLocal, get_db, engine as test_engine  # noqa: E402
import api.models  # noqa: E402,F401  ensure all ORM models are registered

from fueleu.compliance import TargetTable  # noqa: E402
from fueleu.compliance.targets import DEFAULT_TARGETS  # noqa: E402
from fueleu.records import Route  # noqa: E402
from fueleu.stores import (  # noqa: E402
    InMemoryBankStore,
    InMemoryComplianceStore,
    InMemoryPoolStore,
    InMemoryRouteStore,
)


# ---------------------------------------------------------------------------
# Section 2: Core database + client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def db():
    """Test database session on freshly created tables.

    Stores commit their own writes, so isolation comes from recreating the
    schema rather than from an outer transaction.
    """
    Base.metadata.create_all(bind=test_engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db):
    """Create a FastAPI TestClient with database dependency override."""
    from api.main import app

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Section 3: Domain fixtures (in-memory stores)
# ---------------------------------------------------------------------------


@pytest.fixture
def targets():
    return TargetTable(DEFAULT_TARGETS)


@pytest.fixture
def compliance_store():
    return InMemoryComplianceStore()


@pytest.fixture
def bank_store():
    return InMemoryBankStore()


@pytest.fixture
def pool_store():
    return InMemoryPoolStore()


def _sample_routes():
    return [
        Route("R001", "Container", "HFO", 2024, 91.0, 5000.0, 12000.0, 4500.0, is_baseline=True),
        Route("R002", "BulkCarrier", "LNG", 2024, 88.0, 4800.0, 11500.0, 4200.0),
        Route("R003", "Tanker", "MGO", 2024, 93.5, 5100.0, 12500.0, 4700.0),
        Route("R004", "RoRo", "HFO", 2025, 89.2, 4900.0, 11800.0, 4300.0),
        Route("R005", "Container", "LNG", 2025, 90.5, 4950.0, 11900.0, 4400.0),
    ]


@pytest.fixture
def route_store():
    """In-memory route store with five routes, R001 as baseline."""
    return InMemoryRouteStore(_sample_routes())


@pytest.fixture
def seeded_routes(db):
    """Five routes in the test database, R001 as baseline."""
    from api.repositories import SqlRouteStore

    store = SqlRouteStore(db)
    for route in _sample_routes():
        store.create(route)
    return store
