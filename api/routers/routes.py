"""
Route GHG intensity API router.

Route listing with filters, baseline selection and comparison of every
route against the baseline.
"""

import logging
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from api.database import get_db
from api.repositories import SqlRouteStore
from api.schemas import RouteComparisonResponse, RouteResponse
from fueleu.compliance import RouteComparisonService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/routes", tags=["Routes"])


@router.get("", response_model=List[RouteResponse])
async def list_routes(
    vessel_type: Optional[str] = Query(None, max_length=50),
    fuel_type: Optional[str] = Query(None, max_length=50),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    db=Depends(get_db),
):
    """List routes, optionally filtered by vessel type, fuel type and year."""
    service = RouteComparisonService(SqlRouteStore(db))
    routes = service.list_routes(vessel_type=vessel_type, fuel_type=fuel_type, year=year)
    return [RouteResponse(**asdict(r)) for r in routes]


@router.get("/comparison", response_model=List[RouteComparisonResponse])
async def compare_routes(db=Depends(get_db)):
    """Compare every route's GHG intensity with the baseline route."""
    service = RouteComparisonService(SqlRouteStore(db))
    return [RouteComparisonResponse(**asdict(c)) for c in service.compare()]


@router.post("/{route_id}/baseline", response_model=RouteResponse)
async def set_baseline(route_id: str, db=Depends(get_db)):
    """Make a route the single comparison baseline."""
    service = RouteComparisonService(SqlRouteStore(db))
    return RouteResponse(**asdict(service.set_baseline(route_id)))
