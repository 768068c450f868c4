"""
Pooling API router.

Pool creation and the pre-submission check both run the same
fueleu.compliance.pooling.validate_pool routine.
"""

import logging
from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, Query, Request

from api.database import get_db
from api.middleware import structured_logger
from api.rate_limit import limiter, get_rate_limit_string
from api.repositories import SqlPoolStore
from api.schemas import CreatePoolRequest, PoolMemberModel, PoolResponse, PoolValidationResponse
from fueleu.compliance import PoolingService, validate_pool
from fueleu.records import Pool, PoolMember

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pools", tags=["Pooling"])


@router.post("", response_model=PoolResponse)
@limiter.limit(get_rate_limit_string())
async def create_pool(request: Request, body: CreatePoolRequest, db=Depends(get_db)):
    """Validate and persist a pool. Rejected pools are not stored."""
    pool = PoolingService(SqlPoolStore(db)).create_pool(body.year, _members(body))
    structured_logger.info(
        "Pool created", pool_id=pool.id, year=pool.year, members=len(pool.members),
    )
    return _pool_to_response(pool)


@router.post("/validate", response_model=PoolValidationResponse)
async def validate_pool_members(body: CreatePoolRequest):
    """Check a proposed pool without storing it."""
    return PoolValidationResponse(**asdict(validate_pool(_members(body))))


@router.get("", response_model=List[PoolResponse])
async def list_pools(year: int = Query(..., ge=2000, le=2100), db=Depends(get_db)):
    """List pools for a year, newest first."""
    pools = PoolingService(SqlPoolStore(db)).list_pools(year)
    return [_pool_to_response(p) for p in pools]


@router.get("/{pool_id}", response_model=PoolResponse)
async def get_pool(pool_id: str, db=Depends(get_db)):
    return _pool_to_response(PoolingService(SqlPoolStore(db)).get_pool(pool_id))


# =============================================================================
# Helpers
# =============================================================================


def _members(body: CreatePoolRequest) -> List[PoolMember]:
    return [PoolMember(m.ship_id, m.cb_before, m.cb_after) for m in body.members]


def _pool_to_response(pool: Pool) -> PoolResponse:
    return PoolResponse(
        id=pool.id,
        year=pool.year,
        members=[PoolMemberModel(**asdict(m)) for m in pool.members],
        total_cb_before=pool.total_cb_before,
        total_cb_after=pool.total_cb_after,
        valid=pool.valid,
        created_at=pool.created_at,
    )
