"""
SQLAlchemy implementations of the engine's store interfaces.

Each store wraps the request's Session and commits its own writes.
"""

import logging
import uuid as uuid_mod
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session, selectinload

from api import models
from fueleu import records
from fueleu.stores import BankStore, ComplianceStore, PoolStore, RouteStore, ShipLocks

logger = logging.getLogger(__name__)

# Process-local serialisation of bank/apply per ship
_ship_locks = ShipLocks()


class SqlComplianceStore(ComplianceStore):

    def __init__(self, db: Session):
        self.db = db

    def upsert(self, record: records.ComplianceRecord) -> records.ComplianceRecord:
        row = (
            self.db.query(models.ShipCompliance)
            .filter(
                models.ShipCompliance.ship_id == record.ship_id,
                models.ShipCompliance.year == record.year,
            )
            .first()
        )
        if row is None:
            row = models.ShipCompliance(ship_id=record.ship_id, year=record.year)
            self.db.add(row)

        row.cb_gco2eq = record.cb_gco2eq
        row.ghg_intensity = record.ghg_intensity
        row.energy_in_scope = record.energy_in_scope

        self.db.commit()
        self.db.refresh(row)
        return _compliance_record(row)

    def get(self, ship_id: str, year: int) -> Optional[records.ComplianceRecord]:
        row = (
            self.db.query(models.ShipCompliance)
            .filter(
                models.ShipCompliance.ship_id == ship_id,
                models.ShipCompliance.year == year,
            )
            .first()
        )
        return _compliance_record(row) if row else None

    def list_for_ship(self, ship_id: str) -> List[records.ComplianceRecord]:
        rows = (
            self.db.query(models.ShipCompliance)
            .filter(models.ShipCompliance.ship_id == ship_id)
            .order_by(models.ShipCompliance.year.asc())
            .all()
        )
        return [_compliance_record(r) for r in rows]


class SqlBankStore(BankStore):

    def __init__(self, db: Session):
        self.db = db

    def append(self, ship_id: str, year: int, amount_gco2eq: float) -> records.BankEntry:
        row = models.BankEntry(ship_id=ship_id, year=year, amount_gco2eq=amount_gco2eq)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return _bank_entry(row)

    def entries(self, ship_id: str, year: Optional[int] = None) -> List[records.BankEntry]:
        query = self.db.query(models.BankEntry).filter(models.BankEntry.ship_id == ship_id)
        if year is not None:
            query = query.filter(models.BankEntry.year == year)
        rows = query.order_by(models.BankEntry.year.asc(), models.BankEntry.created_at.asc()).all()
        return [_bank_entry(r) for r in rows]

    def entries_through(self, ship_id: str, through_year: int) -> List[records.BankEntry]:
        rows = (
            self.db.query(models.BankEntry)
            .filter(
                models.BankEntry.ship_id == ship_id,
                models.BankEntry.year <= through_year,
            )
            .all()
        )
        return [_bank_entry(r) for r in rows]

    @contextmanager
    def lock(self, ship_id: str):
        with _ship_locks.hold(ship_id):
            if self.db.get_bind().dialect.name == "postgresql":
                # Held until the append commits or the check fails and rolls back
                self.db.execute(
                    text("SELECT pg_advisory_xact_lock(hashtext(:ship_id))"),
                    {"ship_id": ship_id},
                )
            try:
                yield
            except Exception:
                self.db.rollback()
                raise


class SqlPoolStore(PoolStore):

    def __init__(self, db: Session):
        self.db = db

    def create(self, pool: records.Pool) -> records.Pool:
        row = models.Pool(
            year=pool.year,
            total_cb_before=pool.total_cb_before,
            total_cb_after=pool.total_cb_after,
            valid=pool.valid,
        )
        for position, member in enumerate(pool.members):
            row.members.append(models.PoolMember(
                position=position,
                ship_id=member.ship_id,
                cb_before=member.cb_before,
                cb_after=member.cb_after,
            ))

        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return _pool(row)

    def get(self, pool_id: str) -> Optional[records.Pool]:
        try:
            pid = uuid_mod.UUID(str(pool_id))
        except ValueError:
            return None
        row = (
            self.db.query(models.Pool)
            .options(selectinload(models.Pool.members))
            .filter(models.Pool.id == pid)
            .first()
        )
        return _pool(row) if row else None

    def list_by_year(self, year: int) -> List[records.Pool]:
        rows = (
            self.db.query(models.Pool)
            .options(selectinload(models.Pool.members))
            .filter(models.Pool.year == year)
            .order_by(models.Pool.created_at.desc())
            .all()
        )
        return [_pool(r) for r in rows]


class SqlRouteStore(RouteStore):

    def __init__(self, db: Session):
        self.db = db

    def create(self, route: records.Route) -> records.Route:
        row = models.Route(
            route_id=route.route_id,
            vessel_type=route.vessel_type,
            fuel_type=route.fuel_type,
            year=route.year,
            ghg_intensity=route.ghg_intensity,
            fuel_consumption=route.fuel_consumption,
            distance=route.distance,
            total_emissions=route.total_emissions,
            is_baseline=route.is_baseline,
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return _route(row)

    def list(self, vessel_type=None, fuel_type=None, year=None) -> List[records.Route]:
        query = self.db.query(models.Route)
        if vessel_type:
            query = query.filter(models.Route.vessel_type == vessel_type)
        if fuel_type:
            query = query.filter(models.Route.fuel_type == fuel_type)
        if year is not None:
            query = query.filter(models.Route.year == year)
        return [_route(r) for r in query.order_by(models.Route.route_id.asc()).all()]

    def get(self, route_id: str) -> Optional[records.Route]:
        row = self.db.query(models.Route).filter(models.Route.route_id == route_id).first()
        return _route(row) if row else None

    def baseline(self) -> Optional[records.Route]:
        row = self.db.query(models.Route).filter(models.Route.is_baseline.is_(True)).first()
        return _route(row) if row else None

    def set_baseline(self, route_id: str) -> Optional[records.Route]:
        row = self.db.query(models.Route).filter(models.Route.route_id == route_id).first()
        if row is None:
            return None

        # Clear and set in one transaction
        self.db.query(models.Route).filter(
            models.Route.is_baseline.is_(True),
            models.Route.route_id != route_id,
        ).update({models.Route.is_baseline: False}, synchronize_session="fetch")
        row.is_baseline = True

        self.db.commit()
        self.db.refresh(row)
        return _route(row)


# =============================================================================
# Row -> record conversion
# =============================================================================


def _compliance_record(row: models.ShipCompliance) -> records.ComplianceRecord:
    return records.ComplianceRecord(
        ship_id=row.ship_id,
        year=row.year,
        cb_gco2eq=row.cb_gco2eq,
        ghg_intensity=row.ghg_intensity,
        energy_in_scope=row.energy_in_scope,
    )


def _bank_entry(row: models.BankEntry) -> records.BankEntry:
    return records.BankEntry(
        id=str(row.id),
        ship_id=row.ship_id,
        year=row.year,
        amount_gco2eq=row.amount_gco2eq,
        created_at=row.created_at,
    )


def _pool(row: models.Pool) -> records.Pool:
    return records.Pool(
        id=str(row.id),
        year=row.year,
        members=[
            records.PoolMember(ship_id=m.ship_id, cb_before=m.cb_before, cb_after=m.cb_after)
            for m in row.members
        ],
        total_cb_before=row.total_cb_before,
        total_cb_after=row.total_cb_after,
        valid=row.valid,
        created_at=row.created_at,
    )


def _route(row: models.Route) -> records.Route:
    return records.Route(
        id=str(row.id),
        route_id=row.route_id,
        vessel_type=row.vessel_type,
        fuel_type=row.fuel_type,
        year=row.year,
        ghg_intensity=row.ghg_intensity,
        fuel_consumption=row.fuel_consumption,
        distance=row.distance,
        total_emissions=row.total_emissions,
        is_baseline=row.is_baseline,
    )
