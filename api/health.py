"""
Health check module for the FuelEU Ledger API.

Checks the database connection and the regulatory target table. Used by
load balancer and orchestrator probes.
"""
import logging
from typing import Dict, Any, Optional
from datetime import datetime, timezone
from enum import Enum
from dataclasses import dataclass

from sqlalchemy import text

from fueleu import __version__
from fueleu.compliance import get_target_table
from fueleu.errors import ConfigurationError

logger = logging.getLogger(__name__)


class HealthStatus(Enum):
    """Health check status."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of a single component."""
    name: str
    status: HealthStatus
    latency_ms: Optional[float] = None
    message: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


def check_database_health() -> ComponentHealth:
    """
    Check database connectivity.

    Returns:
        ComponentHealth with database status
    """
    start = datetime.now(timezone.utc)

    try:
        from api.database import SessionLocal

        db = SessionLocal()
        try:
            result = db.execute(text("SELECT 1")).scalar()
            latency_ms = (datetime.now(timezone.utc) - start).total_seconds() * 1000

            if result == 1:
                return ComponentHealth(
                    name="database",
                    status=HealthStatus.HEALTHY,
                    latency_ms=round(latency_ms, 2),
                    message=f"{db.get_bind().dialect.name} connected",
                )
            return ComponentHealth(
                name="database",
                status=HealthStatus.UNHEALTHY,
                message="Unexpected query result",
            )
        finally:
            db.close()

    except Exception as e:
        latency_ms = (datetime.now(timezone.utc) - start).total_seconds() * 1000
        logger.error(f"Database health check failed: {e}")
        return ComponentHealth(
            name="database",
            status=HealthStatus.UNHEALTHY,
            latency_ms=round(latency_ms, 2),
            message=f"Connection failed: {type(e).__name__}",
        )


def check_target_table_health() -> ComponentHealth:
    """Check that the GHG intensity target table loads."""
    try:
        table = get_target_table()
        years = table.years
        return ComponentHealth(
            name="target_table",
            status=HealthStatus.HEALTHY,
            message="Target table loaded",
            details={"first_year": years[0], "last_year": years[-1], "steps": len(years)},
        )
    except ConfigurationError as e:
        logger.error(f"Target table health check failed: {e}")
        return ComponentHealth(
            name="target_table",
            status=HealthStatus.UNHEALTHY,
            message=str(e),
        )


async def perform_full_health_check() -> Dict[str, Any]:
    """
    Perform health check of all components.

    Returns:
        Dict with overall status and component details
    """
    start = datetime.now(timezone.utc)

    components = [check_database_health(), check_target_table_health()]

    if any(c.status == HealthStatus.UNHEALTHY for c in components):
        overall_status = HealthStatus.UNHEALTHY
    elif any(c.status == HealthStatus.DEGRADED for c in components):
        overall_status = HealthStatus.DEGRADED
    else:
        overall_status = HealthStatus.HEALTHY

    total_time_ms = (datetime.now(timezone.utc) - start).total_seconds() * 1000

    return {
        "status": overall_status.value,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "check_duration_ms": round(total_time_ms, 2),
        "components": {
            c.name: {
                "status": c.status.value,
                "latency_ms": c.latency_ms,
                "message": c.message,
                **({"details": c.details} if c.details else {}),
            }
            for c in components
        },
    }


async def perform_liveness_check() -> Dict[str, Any]:
    """
    Simple liveness check.

    Only confirms the process answers; dependencies are not checked.
    """
    return {
        "status": "alive",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
