"""
FuelEU Maritime GHG intensity target resolution.

The year -> target step table is process-wide configuration: it is
defined once here and may be replaced at startup by a JSON file named in
FUELEU_TARGETS_FILE (e.g. {"2025": 89.3368, "2030": 85.6904, ...}).
Every consumer (calculator, route comparison, reference-data API) reads
the same TargetTable instance through get_target_table().

Reference: EU Regulation 2023/1805 (FuelEU Maritime), Article 4
Baseline: 91.16 gCO2eq/MJ reduced by 2% (2025) ... 80% (2050)
"""

import json
import logging
from bisect import bisect_left
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from fueleu.config import settings
from fueleu.errors import ConfigurationError

logger = logging.getLogger(__name__)


# GHG intensity targets (gCO2eq/MJ) keyed by the first year of each step
DEFAULT_TARGETS: Dict[int, float] = {
    2025: 89.3368,  # -2%
    2030: 85.6904,  # -6%
    2035: 77.9418,  # -14.5%
    2040: 62.9004,  # -31%
    2045: 34.6408,  # -62%
    2050: 18.2320,  # -80%
}


class TargetTable:
    """Step table mapping a regulation year to its GHG intensity target."""

    def __init__(self, targets: Dict[int, float]):
        if not targets:
            raise ConfigurationError("Target table must not be empty")

        years = sorted(int(y) for y in targets)
        if len(set(years)) != len(years):
            raise ConfigurationError("Target table years must be unique")

        values = [float(targets[y]) for y in years]
        if any(v <= 0 for v in values):
            raise ConfigurationError("Target table values must be positive")

        self.years: List[int] = years
        self.targets: List[float] = values

    def resolve(self, year: int) -> float:
        """
        Resolve the GHG intensity target for a regulation year.

        A year before the first step uses the first target and a year at or
        after the last step uses the last target. In between, a year that
        falls exactly on a step still resolves to the previous step's
        target: 2030 -> 89.3368, 2031 -> 85.6904.
        """
        if year >= self.years[-1]:
            return self.targets[-1]

        # Number of steps strictly before `year`
        idx = bisect_left(self.years, year)
        return self.targets[max(idx - 1, 0)]

    def limits(self) -> List[Dict]:
        """Return (year, target) rows for every step, ascending."""
        return [
            {"year": y, "target": t}
            for y, t in zip(self.years, self.targets)
        ]

    def as_dict(self) -> Dict[int, float]:
        return dict(zip(self.years, self.targets))

    def __repr__(self):
        return f"<TargetTable(years={self.years[0]}..{self.years[-1]}, steps={len(self.years)})>"


def load_target_table(path: Optional[str] = None) -> TargetTable:
    """
    Build the target table, from a JSON file when a path is given.

    Args:
        path: JSON file mapping year (string or int) to target

    Returns:
        TargetTable

    Raises:
        ConfigurationError: unreadable file or invalid contents
    """
    if not path:
        return TargetTable(DEFAULT_TARGETS)

    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read target table {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Target table {path} must be a JSON object")

    try:
        targets = {int(year): float(value) for year, value in raw.items()}
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid entry in target table {path}: {e}") from e

    table = TargetTable(targets)
    logger.info("Loaded GHG target table from %s (%d steps)", path, len(table.years))
    return table


@lru_cache()
def get_target_table() -> TargetTable:
    """Process-wide target table, loaded once on first use."""
    return load_target_table(settings.targets_file)


def resolve_target(year: int) -> float:
    """Resolve `year` against the process-wide target table."""
    return get_target_table().resolve(year)
