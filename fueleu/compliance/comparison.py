"""Route GHG intensity comparison against the baseline route."""

import logging
from dataclasses import dataclass
from typing import List, Optional

from fueleu.compliance.targets import TargetTable, get_target_table
from fueleu.errors import NoBaselineError, RouteNotFoundError, ValidationError
from fueleu.records import Route
from fueleu.stores import RouteStore
from fueleu.utils import round_half_away

logger = logging.getLogger(__name__)


@dataclass
class RouteComparison:
    route_id: str
    vessel_type: str
    fuel_type: str
    year: int
    baseline_ghg_intensity: float
    comparison_ghg_intensity: float
    percent_diff: float  # vs baseline, %
    compliant: bool  # intensity <= target for the route's year
    target: float


class RouteComparisonService:
    """Route listing, baseline selection and baseline comparison."""

    def __init__(self, store: RouteStore, targets: Optional[TargetTable] = None):
        self.store = store
        self.targets = targets or get_target_table()

    def list_routes(
        self,
        vessel_type: Optional[str] = None,
        fuel_type: Optional[str] = None,
        year: Optional[int] = None,
    ) -> List[Route]:
        return self.store.list(vessel_type=vessel_type, fuel_type=fuel_type, year=year)

    def create_route(self, route: Route) -> Route:
        """Store a new route. Its GHG intensity divides every comparison."""
        if not route.route_id:
            raise ValidationError("route_id is required")
        if route.ghg_intensity <= 0:
            raise ValidationError("GHG intensity must be positive")
        if self.store.get(route.route_id) is not None:
            raise ValidationError(f"Route {route.route_id} already exists")
        return self.store.create(route)

    def set_baseline(self, route_id: str) -> Route:
        route = self.store.set_baseline(route_id)
        if route is None:
            raise RouteNotFoundError(route_id)
        logger.info("Route %s set as baseline", route_id)
        return route

    def compare(self) -> List[RouteComparison]:
        """
        Compare every route (baseline included) with the baseline route.

        Raises:
            NoBaselineError: no route is flagged as baseline
        """
        baseline = self.store.baseline()
        if baseline is None:
            raise NoBaselineError()

        comparisons = []
        for route in self.store.list():
            target = self.targets.resolve(route.year)
            if route.route_id == baseline.route_id:
                percent_diff = 0.0
            else:
                percent_diff = round_half_away(
                    ((route.ghg_intensity / baseline.ghg_intensity) - 1) * 100
                )

            comparisons.append(RouteComparison(
                route_id=route.route_id,
                vessel_type=route.vessel_type,
                fuel_type=route.fuel_type,
                year=route.year,
                baseline_ghg_intensity=baseline.ghg_intensity,
                comparison_ghg_intensity=route.ghg_intensity,
                percent_diff=percent_diff,
                compliant=route.ghg_intensity <= target,
                target=target,
            ))

        return comparisons
