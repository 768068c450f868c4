"""
Store interfaces consumed by the compliance engine.

The engine never talks to a database directly. It is handed one store per
concern and relies on these guarantees:

- ComplianceStore.upsert is atomic per (ship_id, year).
- BankStore is append-only; BankStore.lock(ship_id) serialises a
  balance check and the append that follows it for one ship.
- RouteStore.set_baseline clears the previous baseline and sets the new
  one as a single unit.

The in-memory implementations back the unit tests and ad-hoc scripting.
The SQLAlchemy implementations live in api.repositories.
"""

import threading
import uuid
from abc import ABC, abstractmethod
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, Tuple

from fueleu.records import BankEntry, ComplianceRecord, Pool, PoolMember, Route


# =============================================================================
# Interfaces
# =============================================================================

class ComplianceStore(ABC):

    @abstractmethod
    def upsert(self, record: ComplianceRecord) -> ComplianceRecord:
        """Insert or overwrite the record for (ship_id, year)."""

    @abstractmethod
    def get(self, ship_id: str, year: int) -> Optional[ComplianceRecord]:
        ...

    @abstractmethod
    def list_for_ship(self, ship_id: str) -> List[ComplianceRecord]:
        """All records of a ship, ascending by year."""


class BankStore(ABC):

    @abstractmethod
    def append(self, ship_id: str, year: int, amount_gco2eq: float) -> BankEntry:
        ...

    @abstractmethod
    def entries(self, ship_id: str, year: Optional[int] = None) -> List[BankEntry]:
        """Entries of a ship in insertion order, optionally for one year."""

    @abstractmethod
    def entries_through(self, ship_id: str, through_year: int) -> List[BankEntry]:
        """Entries of a ship with year <= through_year."""

    @abstractmethod
    def lock(self, ship_id: str):
        """Context manager serialising check-then-append for one ship."""


class PoolStore(ABC):

    @abstractmethod
    def create(self, pool: Pool) -> Pool:
        ...

    @abstractmethod
    def get(self, pool_id: str) -> Optional[Pool]:
        ...

    @abstractmethod
    def list_by_year(self, year: int) -> List[Pool]:
        """Pools for a year, newest first."""


class RouteStore(ABC):

    @abstractmethod
    def create(self, route: Route) -> Route:
        ...

    @abstractmethod
    def list(
        self,
        vessel_type: Optional[str] = None,
        fuel_type: Optional[str] = None,
        year: Optional[int] = None,
    ) -> List[Route]:
        """Routes matching all given filters, ordered by route_id."""

    @abstractmethod
    def get(self, route_id: str) -> Optional[Route]:
        ...

    @abstractmethod
    def baseline(self) -> Optional[Route]:
        ...

    @abstractmethod
    def set_baseline(self, route_id: str) -> Optional[Route]:
        """Make route_id the only baseline. None if the route is unknown."""


# =============================================================================
# In-memory implementations
# =============================================================================

class ShipLocks:
    """Lazily created re-entrant lock per ship id."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.RLock] = {}

    @contextmanager
    def hold(self, ship_id: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(ship_id, threading.RLock())
        with lock:
            yield


class InMemoryComplianceStore(ComplianceStore):

    def __init__(self):
        self._records: Dict[Tuple[str, int], ComplianceRecord] = {}
        self._lock = threading.Lock()

    def upsert(self, record: ComplianceRecord) -> ComplianceRecord:
        with self._lock:
            self._records[(record.ship_id, record.year)] = replace(record)
        return replace(record)

    def get(self, ship_id: str, year: int) -> Optional[ComplianceRecord]:
        record = self._records.get((ship_id, year))
        return replace(record) if record else None

    def list_for_ship(self, ship_id: str) -> List[ComplianceRecord]:
        return sorted(
            (replace(r) for (sid, _), r in self._records.items() if sid == ship_id),
            key=lambda r: r.year,
        )


class InMemoryBankStore(BankStore):

    def __init__(self):
        self._entries: Dict[str, List[BankEntry]] = defaultdict(list)
        self._locks = ShipLocks()

    def append(self, ship_id: str, year: int, amount_gco2eq: float) -> BankEntry:
        entry = BankEntry(
            id=str(uuid.uuid4()),
            ship_id=ship_id,
            year=year,
            amount_gco2eq=amount_gco2eq,
            created_at=datetime.now(timezone.utc),
        )
        with self._locks.hold(ship_id):
            self._entries[ship_id].append(entry)
        return replace(entry)

    def entries(self, ship_id: str, year: Optional[int] = None) -> List[BankEntry]:
        return [
            replace(e) for e in self._entries.get(ship_id, [])
            if year is None or e.year == year
        ]

    def entries_through(self, ship_id: str, through_year: int) -> List[BankEntry]:
        return [replace(e) for e in self._entries.get(ship_id, []) if e.year <= through_year]

    def lock(self, ship_id: str):
        return self._locks.hold(ship_id)


class InMemoryPoolStore(PoolStore):

    def __init__(self):
        self._pools: List[Pool] = []

    def create(self, pool: Pool) -> Pool:
        stored = replace(
            pool,
            id=pool.id or str(uuid.uuid4()),
            created_at=pool.created_at or datetime.now(timezone.utc),
            members=[replace(m) for m in pool.members],
        )
        self._pools.append(stored)
        return self._copy(stored)

    def get(self, pool_id: str) -> Optional[Pool]:
        for pool in self._pools:
            if pool.id == pool_id:
                return self._copy(pool)
        return None

    def list_by_year(self, year: int) -> List[Pool]:
        return [self._copy(p) for p in reversed(self._pools) if p.year == year]

    @staticmethod
    def _copy(pool: Pool) -> Pool:
        return replace(pool, members=[PoolMember(m.ship_id, m.cb_before, m.cb_after) for m in pool.members])


class InMemoryRouteStore(RouteStore):

    def __init__(self, routes: Optional[List[Route]] = None):
        self._routes: Dict[str, Route] = {}
        self._lock = threading.Lock()
        for route in routes or []:
            self.create(route)

    def create(self, route: Route) -> Route:
        stored = replace(route, id=route.id or str(uuid.uuid4()))
        with self._lock:
            self._routes[stored.route_id] = stored
        return replace(stored)

    def list(self, vessel_type=None, fuel_type=None, year=None) -> List[Route]:
        routes = [
            r for r in self._routes.values()
            if (vessel_type is None or r.vessel_type == vessel_type)
            and (fuel_type is None or r.fuel_type == fuel_type)
            and (year is None or r.year == year)
        ]
        return [replace(r) for r in sorted(routes, key=lambda r: r.route_id)]

    def get(self, route_id: str) -> Optional[Route]:
        route = self._routes.get(route_id)
        return replace(route) if route else None

    def baseline(self) -> Optional[Route]:
        for route in self._routes.values():
            if route.is_baseline:
                return replace(route)
        return None

    def set_baseline(self, route_id: str) -> Optional[Route]:
        with self._lock:
            if route_id not in self._routes:
                return None
            for key, route in self._routes.items():
                self._routes[key] = replace(route, is_baseline=(key == route_id))
            return replace(self._routes[route_id])
