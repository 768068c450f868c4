"""Compliance module for FuelEU Maritime (targets, CB, pooling, routes)."""

from .balance import ComplianceBalance, ComplianceCalculator, ComplianceResult, calculate_penalty
from .comparison import RouteComparison, RouteComparisonService
from .energy import LCV, energy_in_scope, lookup_lcv
from .pooling import PoolValidation, PoolingService, validate_pool
from .targets import TargetTable, get_target_table, resolve_target

__all__ = [
    "ComplianceBalance",
    "ComplianceCalculator",
    "ComplianceResult",
    "calculate_penalty",
    "RouteComparison",
    "RouteComparisonService",
    "LCV",
    "energy_in_scope",
    "lookup_lcv",
    "PoolValidation",
    "PoolingService",
    "validate_pool",
    "TargetTable",
    "get_target_table",
    "resolve_target",
]
