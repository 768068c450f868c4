"""
Plain records exchanged between the engine and its stores.

Stores (in-memory or SQLAlchemy) hand these back instead of ORM objects
so the engine stays independent of the persistence layer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class ComplianceRecord:
    """Stored compliance balance for one ship-year."""
    ship_id: str
    year: int
    cb_gco2eq: float
    ghg_intensity: float
    energy_in_scope: float  # MJ


@dataclass
class BankEntry:
    """One append-only ledger row. Positive = banked, negative = applied."""
    ship_id: str
    year: int
    amount_gco2eq: float
    id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class PoolMember:
    ship_id: str
    cb_before: float
    cb_after: float


@dataclass
class Pool:
    year: int
    members: List[PoolMember] = field(default_factory=list)
    total_cb_before: float = 0.0
    total_cb_after: float = 0.0
    valid: bool = False
    id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class Route:
    route_id: str
    vessel_type: str
    fuel_type: str
    year: int
    ghg_intensity: float  # gCO2eq/MJ
    fuel_consumption: float  # t
    distance: float  # km
    total_emissions: float  # t
    is_baseline: bool = False
    id: Optional[str] = None
