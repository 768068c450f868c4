"""
FuelEU Maritime pooling (Article 21).

A pool redistributes compliance balance among its members. The rules are
enforced by validate_pool(), the single validation routine used both when
a pool is created and by the pre-submission check endpoint:

1. at least two members
2. the pool's total CB before redistribution is not negative
3. total CB is conserved (within 0.01 gCO2eq)
4. a deficit ship may not end up with a larger deficit, and a surplus ship
   may not end up in deficit

All failing rules are reported, not just the first.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from fueleu.errors import PoolNotFoundError, PoolValidationError
from fueleu.records import Pool, PoolMember
from fueleu.stores import PoolStore
from fueleu.utils import round_half_away

logger = logging.getLogger(__name__)


MIN_POOL_MEMBERS = 2

# Allowed drift between total CB before and after redistribution (gCO2eq)
CONSERVATION_TOLERANCE = 0.01


@dataclass
class PoolValidation:
    """Outcome of validate_pool()."""
    valid: bool
    errors: List[str] = field(default_factory=list)
    total_cb_before: float = 0.0
    total_cb_after: float = 0.0


def validate_pool(members: Sequence[PoolMember]) -> PoolValidation:
    """
    Check a proposed redistribution against the pooling rules.

    Args:
        members: Proposed members with cb_before / cb_after

    Returns:
        PoolValidation listing every failed rule
    """
    errors = []

    if len(members) < MIN_POOL_MEMBERS:
        errors.append(f"Pool must have at least {MIN_POOL_MEMBERS} members")

    total_before = sum(m.cb_before for m in members)
    total_after = sum(m.cb_after for m in members)

    if total_before < 0:
        errors.append(f"Total CB before pooling is negative: {round_half_away(total_before)}")

    if abs(total_after - total_before) > CONSERVATION_TOLERANCE:
        errors.append(
            f"Total CB after pooling must equal total CB before "
            f"({round_half_away(total_after)} != {round_half_away(total_before)})"
        )

    for m in members:
        if m.cb_before < 0 and m.cb_after < m.cb_before:
            errors.append(
                f"Ship {m.ship_id} deficit increased from {m.cb_before} to {m.cb_after}"
            )
        if m.cb_before >= 0 and m.cb_after < 0:
            errors.append(
                f"Ship {m.ship_id} went from surplus ({m.cb_before}) to deficit ({m.cb_after})"
            )

    return PoolValidation(
        valid=not errors,
        errors=errors,
        total_cb_before=round_half_away(total_before),
        total_cb_after=round_half_away(total_after),
    )


class PoolingService:
    """Creates and lists compliance pools."""

    def __init__(self, store: PoolStore):
        self.store = store

    def create_pool(self, year: int, members: Sequence[PoolMember]) -> Pool:
        """
        Validate and persist a pool.

        Raises:
            PoolValidationError: any rule failed; nothing is persisted
        """
        validation = validate_pool(members)
        if not validation.valid:
            logger.info("Pool for %d rejected: %s", year, "; ".join(validation.errors))
            raise PoolValidationError(validation.errors)

        pool = self.store.create(Pool(
            year=year,
            members=[PoolMember(m.ship_id, m.cb_before, m.cb_after) for m in members],
            total_cb_before=validation.total_cb_before,
            total_cb_after=validation.total_cb_after,
            valid=True,
        ))
        logger.info(
            "Pool %s created for %d with %d members (total CB %s)",
            pool.id, year, len(pool.members), pool.total_cb_before,
        )
        return pool

    def list_pools(self, year: int) -> List[Pool]:
        """Pools for a year, newest first, with display-only validity."""
        return [self._summarize(p) for p in self.store.list_by_year(year)]

    def get_pool(self, pool_id: str) -> Pool:
        pool = self.store.get(pool_id)
        if pool is None:
            raise PoolNotFoundError(pool_id)
        return self._summarize(pool)

    @staticmethod
    def _summarize(pool: Pool) -> Pool:
        # Retrieved pools only re-check the non-negative total, not every rule
        pool.total_cb_before = round_half_away(sum(m.cb_before for m in pool.members))
        pool.total_cb_after = round_half_away(sum(m.cb_after for m in pool.members))
        pool.valid = pool.total_cb_before >= 0
        return pool
