"""
SQLAlchemy models for the FuelEU Ledger database.
"""

from sqlalchemy import (
    Column,
    String,
    Float,
    Integer,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import uuid

from api.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ShipCompliance(Base):
    """Compliance balance per ship-year. Target and compliance flag are derived."""

    __tablename__ = "ship_compliance"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    ship_id = Column(String(100), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    cb_gco2eq = Column(Float, nullable=False)
    ghg_intensity = Column(Float, nullable=False)
    energy_in_scope = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("ship_id", "year", name="uq_ship_compliance_ship_year"),
    )

    def __repr__(self):
        return f"<ShipCompliance(ship_id='{self.ship_id}', year={self.year}, cb={self.cb_gco2eq})>"


class BankEntry(Base):
    """Append-only banking ledger row. Never updated or deleted."""

    __tablename__ = "bank_entries"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    ship_id = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False)
    amount_gco2eq = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)

    __table_args__ = (
        Index("ix_bank_entries_ship_year", "ship_id", "year"),
    )

    def __repr__(self):
        return f"<BankEntry(ship_id='{self.ship_id}', year={self.year}, amount={self.amount_gco2eq})>"


class Pool(Base):
    """Compliance pool. Immutable once created."""

    __tablename__ = "pools"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    year = Column(Integer, nullable=False, index=True)
    total_cb_before = Column(Float, nullable=False)
    total_cb_after = Column(Float, nullable=False)
    valid = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)

    # Relationships
    members = relationship(
        "PoolMember",
        back_populates="pool",
        cascade="all, delete-orphan",
        order_by="PoolMember.position",
    )

    def __repr__(self):
        return f"<Pool(id={self.id}, year={self.year}, members={len(self.members)})>"


class PoolMember(Base):
    """Member of a pool with its CB before and after redistribution."""

    __tablename__ = "pool_members"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    pool_id = Column(
        UUID(as_uuid=True), ForeignKey("pools.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False, default=0)
    ship_id = Column(String(100), nullable=False)
    cb_before = Column(Float, nullable=False)
    cb_after = Column(Float, nullable=False)

    # Relationships
    pool = relationship("Pool", back_populates="members")

    def __repr__(self):
        return f"<PoolMember(ship_id='{self.ship_id}', before={self.cb_before}, after={self.cb_after})>"


class Route(Base):
    """Route-level GHG intensity record. At most one row is the baseline."""

    __tablename__ = "routes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    route_id = Column(String(50), nullable=False, unique=True, index=True)
    vessel_type = Column(String(50), nullable=False, index=True)
    fuel_type = Column(String(50), nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    ghg_intensity = Column(Float, nullable=False)
    fuel_consumption = Column(Float, nullable=False)
    distance = Column(Float, nullable=False)
    total_emissions = Column(Float, nullable=False)
    is_baseline = Column(Boolean, default=False, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    def __repr__(self):
        return f"<Route(route_id='{self.route_id}', baseline={self.is_baseline})>"
