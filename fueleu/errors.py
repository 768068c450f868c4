"""
Domain exceptions for the compliance, banking and pooling engine.

The HTTP layer maps the categories to status codes:
ValidationError -> 400, NotFoundError -> 404. Anything else is treated
as an unexpected failure.
"""

from typing import List, Optional


class ComplianceError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(ComplianceError):
    """Invalid process-wide configuration data (e.g. target table)."""


# =============================================================================
# Caller input errors
# =============================================================================

class ValidationError(ComplianceError):
    """Caller input is invalid. Reported verbatim, never retried."""


class UnknownFuelTypeError(ValidationError):
    def __init__(self, fuel_type: str, known: List[str]):
        super().__init__(
            f"Unknown fuel type: {fuel_type}. Valid: {', '.join(known)}"
        )
        self.fuel_type = fuel_type


class InsufficientBalanceError(ValidationError):
    """Requested amount exceeds what is available to bank or apply."""

    def __init__(self, message: str, available: float, requested: float):
        super().__init__(f"{message}. Available: {available}, Requested: {requested}")
        self.available = available
        self.requested = requested


class PoolValidationError(ValidationError):
    """Pool failed one or more conservation/fairness rules."""

    def __init__(self, errors: List[str]):
        super().__init__(f"Pool validation failed: {', '.join(errors)}")
        self.errors = list(errors)


# =============================================================================
# Lookup errors
# =============================================================================

class NotFoundError(ComplianceError):
    """Requested record does not exist."""


class BalanceNotFoundError(NotFoundError):
    def __init__(self, ship_id: str, year: int):
        super().__init__(f"Compliance balance not found for ship {ship_id} in {year}")
        self.ship_id = ship_id
        self.year = year


class NoBaselineError(NotFoundError):
    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "No baseline route set")


class RouteNotFoundError(NotFoundError):
    def __init__(self, route_id: str):
        super().__init__(f"Route {route_id} not found")
        self.route_id = route_id


class PoolNotFoundError(NotFoundError):
    def __init__(self, pool_id: str):
        super().__init__(f"Pool {pool_id} not found")
        self.pool_id = pool_id
