"""Route and route comparison API schemas."""

from pydantic import BaseModel


class RouteResponse(BaseModel):
    id: str
    route_id: str
    vessel_type: str
    fuel_type: str
    year: int
    ghg_intensity: float
    fuel_consumption: float
    distance: float
    total_emissions: float
    is_baseline: bool


class RouteComparisonResponse(BaseModel):
    route_id: str
    vessel_type: str
    fuel_type: str
    year: int
    baseline_ghg_intensity: float
    comparison_ghg_intensity: float
    percent_diff: float
    compliant: bool
    target: float
