"""
FuelEU Ledger API Pydantic schemas.

Re-exports all schema classes:
    from api.schemas import BankingRequest, PoolResponse, ...
"""

# Compliance
from .compliance import (  # noqa: F401
    ComputeBalanceRequest,
    ComplianceBalanceResponse,
    ComputeBalanceResponse,
    AdjustedBalanceResponse,
    TargetYear,
    TargetsResponse,
    FuelTypeInfo,
    FuelTypesResponse,
)

# Banking
from .banking import BankingRequest, BankEntryResponse, BankRecordsResponse  # noqa: F401

# Pools
from .pools import (  # noqa: F401
    PoolMemberModel,
    CreatePoolRequest,
    PoolResponse,
    PoolValidationResponse,
)

# Routes
from .routes import RouteResponse, RouteComparisonResponse  # noqa: F401
